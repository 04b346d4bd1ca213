import numpy as np
import pytest

from daydream_controller.control.arm_model import ArmModelParams, OrientationArmModel
from daydream_controller.math3d.quaternion import euler_yaw_pitch_roll_to_q, q_identity

HEAD = np.array([0.0, 1.6, 0.0], dtype=np.float64)
# head->shoulder + shoulder->elbow + forearm + grip, right hand, arm relaxed.
EXPECTED_IDENTITY = np.array([0.155, 1.135, -0.35], dtype=np.float64)


def _model(**params) -> OrientationArmModel:
    return OrientationArmModel(ArmModelParams(**params))


def _pose_for(controller_q, head_q=None, hand="right", head=HEAD):
    model = OrientationArmModel(hand=hand)
    model.set_head_orientation(q_identity() if head_q is None else head_q)
    model.set_head_position(head)
    model.set_controller_orientation(controller_q)
    model.update()
    return model.get_pose()


def test_pose_before_update_is_identity_and_not_ready():
    model = OrientationArmModel()
    assert model.has_pose is False
    pose = model.get_pose()
    np.testing.assert_allclose(pose.position, np.zeros(3))
    np.testing.assert_allclose(pose.quaternion, q_identity())


def test_identity_controller_gives_documented_offset():
    pose = _pose_for(q_identity())
    np.testing.assert_allclose(pose.position, EXPECTED_IDENTITY, atol=1e-9)
    np.testing.assert_allclose(pose.quaternion, q_identity(), atol=1e-12)
    # forward of and below the head
    assert pose.position[2] < HEAD[2]
    assert pose.position[1] < HEAD[1]


def test_pointing_up_raises_hand_above_pointing_down():
    up = _pose_for(euler_yaw_pitch_roll_to_q(0.0, 60.0, 0.0))
    level = _pose_for(q_identity())
    down = _pose_for(euler_yaw_pitch_roll_to_q(0.0, -60.0, 0.0))
    assert up.position[1] > level.position[1] > down.position[1]


def test_extension_ratio_follows_pitch_window():
    model = OrientationArmModel()
    model.set_head_position(HEAD)
    model.set_controller_orientation(euler_yaw_pitch_roll_to_q(0.0, 5.0, 0.0))
    model.update()
    assert model.get_extension_ratio() == 0.0

    model.set_controller_orientation(euler_yaw_pitch_roll_to_q(0.0, 30.5, 0.0))
    model.update()
    assert abs(model.get_extension_ratio() - 0.5) < 1e-6

    model.set_controller_orientation(euler_yaw_pitch_roll_to_q(0.0, 70.0, 0.0))
    model.update()
    assert model.get_extension_ratio() == 1.0


def test_head_pitch_does_not_move_the_arm():
    pitched = _pose_for(q_identity(), head_q=euler_yaw_pitch_roll_to_q(0.0, 40.0, 25.0))
    np.testing.assert_allclose(pitched.position, EXPECTED_IDENTITY, atol=1e-9)


def test_head_yaw_rotates_the_arm_about_the_head():
    head_q = euler_yaw_pitch_roll_to_q(90.0, 0.0, 0.0)
    controller_q = euler_yaw_pitch_roll_to_q(90.0, 0.0, 0.0)
    pose = _pose_for(controller_q, head_q=head_q)
    np.testing.assert_allclose(pose.position, [-0.35, 1.135, -0.155], atol=1e-9)


def test_left_hand_mirrors_lateral_offset():
    pose = _pose_for(q_identity(), hand="left")
    np.testing.assert_allclose(pose.position, [-0.155, 1.135, -0.35], atol=1e-9)


def test_invalid_hand_raises():
    with pytest.raises(ValueError, match="hand"):
        OrientationArmModel(hand="middle")


def test_update_is_idempotent_for_identical_samples():
    model = OrientationArmModel()
    q = euler_yaw_pitch_roll_to_q(20.0, 35.0, -10.0)
    model.set_head_position(HEAD)
    model.set_controller_orientation(q)
    model.set_controller_orientation(q)
    model.update()
    first = model.get_pose()
    model.update()
    second = model.get_pose()
    np.testing.assert_allclose(first.position, second.position)
    np.testing.assert_allclose(first.quaternion, second.quaternion)


def test_position_smoothing_interpolates_toward_new_result():
    model = _model(position_smoothing=0.5)
    model.set_head_position(HEAD)
    model.update()
    model.set_head_position(HEAD + np.array([0.0, 0.1, 0.0]))
    model.update()
    pose = model.get_pose()
    assert abs(pose.position[1] - (EXPECTED_IDENTITY[1] + 0.05)) < 1e-9


def test_orientation_stays_unit_length_with_smoothing():
    model = _model(orientation_smoothing=0.3)
    model.set_head_position(HEAD)
    for yaw in range(0, 180, 15):
        model.set_controller_orientation(euler_yaw_pitch_roll_to_q(float(yaw), 10.0, 5.0))
        model.update()
        assert abs(np.linalg.norm(model.get_pose().quaternion) - 1.0) < 1e-9


def test_non_unit_controller_orientation_is_renormalized():
    model = OrientationArmModel()
    model.set_head_position(HEAD)
    model.set_controller_orientation(np.array([2.0, 0.0, 0.0, 0.0]))
    model.update()
    np.testing.assert_allclose(model.get_pose().position, EXPECTED_IDENTITY, atol=1e-9)


def test_body_scale_scales_offsets():
    model = _model(body_scale=2.0)
    model.set_head_position(HEAD)
    model.update()
    expected = HEAD + 2.0 * (EXPECTED_IDENTITY - HEAD)
    np.testing.assert_allclose(model.get_pose().position, expected, atol=1e-9)
    assert abs(model.get_forearm_length() - 0.5) < 1e-12


def test_elbow_position_is_head_relative():
    model = OrientationArmModel()
    model.set_head_position(HEAD)
    model.update()
    np.testing.assert_allclose(model.get_elbow_position(), [0.155, 1.135, -0.15], atol=1e-9)
