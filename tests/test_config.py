import pytest

from daydream_controller.config import AppConfig, parse_args, validate_config


def test_validate_config_accepts_defaults():
    validate_config(AppConfig())


def test_validate_config_rejects_invalid_bridge_port():
    cfg = AppConfig(bridge_port=70000)
    with pytest.raises(ValueError, match="--bridge-port"):
        validate_config(cfg)


def test_validate_config_rejects_invalid_device_source():
    cfg = AppConfig(device_source="bad")
    with pytest.raises(ValueError, match="--device-source"):
        validate_config(cfg)


def test_validate_config_rejects_invalid_hand():
    cfg = AppConfig(hand="both")
    with pytest.raises(ValueError, match="--hand"):
        validate_config(cfg)


def test_validate_config_rejects_out_of_range_smoothing():
    cfg = AppConfig(position_smoothing=0.0)
    with pytest.raises(ValueError, match="--position-smoothing"):
        validate_config(cfg)


def test_validate_config_rejects_non_positive_body_scale():
    cfg = AppConfig(body_scale=0.0)
    with pytest.raises(ValueError, match="--body-scale"):
        validate_config(cfg)


def test_validate_config_rejects_empty_color():
    cfg = AppConfig(button_pressed_color=" ")
    with pytest.raises(ValueError, match="--button-pressed-color"):
        validate_config(cfg)


def test_validate_config_accepts_auto_rotation_offset():
    validate_config(AppConfig(rotation_offset=-999.0))


def test_component_config_and_arm_params_follow_app_config():
    cfg = AppConfig(model=False, rotation_offset=90.0, hand="left", body_scale=1.2)
    component = cfg.component_config()
    assert component.model is False
    assert component.rotation_offset == 90.0
    assert component.hand == "left"
    assert cfg.arm_params().body_scale == 1.2


def test_parse_args_reads_yaml_config(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "device_source: toy",
                "hand: left",
                "model: false",
                "rotation-offset: -999",
                "button_touched_color: '#00AAFF'",
                "display_hz: 30",
            ]
        ),
        encoding="utf-8",
    )
    cfg = parse_args(["--config", str(cfg_path)])
    assert cfg.device_source == "toy"
    assert cfg.hand == "left"
    assert cfg.model is False
    assert cfg.rotation_offset == -999.0
    assert cfg.button_touched_color == "#00AAFF"
    assert cfg.display_hz == 30.0


def test_parse_args_cli_overrides_yaml(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "hand: left",
                "display_hz: 60",
            ]
        ),
        encoding="utf-8",
    )
    cfg = parse_args(
        [
            "--config",
            str(cfg_path),
            "--hand",
            "right",
            "--display-hz",
            "12",
        ]
    )
    assert cfg.hand == "right"
    assert cfg.display_hz == 12.0


def test_parse_args_rejects_unknown_yaml_key(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("hand: left\nbad_key: 1\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        parse_args(["--config", str(cfg_path)])


def test_parse_args_rejects_invalid_values():
    with pytest.raises(SystemExit):
        parse_args(["--position-smoothing", "2.0"])
