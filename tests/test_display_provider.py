import logging

from daydream_controller.control.device import ButtonState
from daydream_controller.control.display_provider import (
    LoggingEventSink,
    TuiDisplayProvider,
    _status_lines,
)


class _Clock:
    def __init__(self):
        self.t = 100.0

    def __call__(self):
        return self.t


def test_display_keeps_latest_transform_and_recent_events():
    display = TuiDisplayProvider(cli_output="scroll", max_events=2)
    display.set_rotation((1.0, 2.0, 3.0))
    display.set_position((0.1, 0.2, 0.3))
    display.emit("buttondown", {"id": 0})
    display.emit("touchstart", {"id": 0, "state": ButtonState(touched=True), "axis": (0.5, 0.0)})
    display.emit("axismove", {"axis": (0.5, 0.25)})

    assert display.frame.rotation_deg == (1.0, 2.0, 3.0)
    assert display.frame.position == (0.1, 0.2, 0.3)
    assert display.frame.event_count == 3
    assert display.frame.events == [
        "touchstart id=0 state=ButtonState(pressed=False, touched=True) axis=(0.500, 0.000)",
        "axismove axis=(0.500, 0.250)",
    ]
    lines = _status_lines(display.frame)
    assert "events            = 3" in lines


def test_render_is_throttled_and_updates_status():
    clock = _Clock()
    statuses = []
    display = TuiDisplayProvider(
        cli_output="scroll", display_hz=10.0, set_status=statuses.append, clock=clock
    )
    assert display.render() is True
    clock.t += 0.05
    assert display.render() is False
    clock.t += 0.06
    assert display.render() is True
    assert len(statuses) == 2


def test_zero_display_hz_disables_rendering():
    display = TuiDisplayProvider(cli_output="scroll", display_hz=0.0)
    assert display.render() is False


def test_logging_event_sink_forwards_to_inner(caplog):
    display = TuiDisplayProvider(cli_output="scroll")
    sink = LoggingEventSink(display, level=logging.INFO)
    with caplog.at_level(logging.INFO):
        sink.emit("buttonup", {"id": 0})
    assert display.frame.events == ["buttonup id=0"]
    assert "[INPUT] buttonup id=0" in caplog.text
