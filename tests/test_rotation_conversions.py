"""Tests for quaternion, euler and axis-angle conversions."""

import logging

import numpy as np
import pytest
import torch
from scipy.spatial.transform import Rotation as ScipyRotation

from rigid_orient import (
    DEFAULT_AXIS,
    axis_angle_to_quaternion,
    convert_euler_degrees_to_quaternion,
    convert_quaternion_to_axis_angle,
    convert_quaternion_to_euler_degrees,
    deg_to_rad,
    euler_degrees_to_matrix_precise,
    euler_radians_to_matrix_precise,
    euler_radians_to_quaternion,
    matrix_to_quaternion,
    quaternion_angular_distance,
    quaternion_multiply,
    quaternion_normalize,
    quaternion_to_euler_radians,
    quaternion_to_matrix,
    rad_to_deg,
)


def random_euler(n=64, seed=0, margin=0.2):
    """Euler angles (radians) away from the gimbal-lock band."""
    rng = np.random.default_rng(seed)
    x = rng.uniform(-np.pi + 1e-3, np.pi - 1e-3, n)
    y = rng.uniform(-np.pi / 2 + margin, np.pi / 2 - margin, n)
    z = rng.uniform(-np.pi + 1e-3, np.pi - 1e-3, n)
    return np.stack([x, y, z], axis=-1)


def random_quaternions(n=64, seed=1):
    rng = np.random.default_rng(seed)
    q = rng.normal(size=(n, 4))
    return q / np.linalg.norm(q, axis=-1, keepdims=True)


class TestAngleUnits:
    def test_scale_factors(self):
        np.testing.assert_allclose(rad_to_deg(np.array([np.pi, np.pi / 2, 0.0])), [180.0, 90.0, 0.0])
        np.testing.assert_allclose(deg_to_rad([180.0, -90.0, 45.0]), [np.pi, -np.pi / 2, np.pi / 4])

    def test_inverse(self):
        v = np.random.default_rng(2).normal(size=(32, 3)) * 10
        np.testing.assert_allclose(deg_to_rad(rad_to_deg(v)), v, rtol=1e-14, atol=0)

    def test_torch(self):
        v = torch.tensor([1.0, -2.0, 3.0], dtype=torch.float64)
        out = rad_to_deg(v)
        assert isinstance(out, torch.Tensor)
        torch.testing.assert_close(deg_to_rad(out), v)


class TestQuaternionOps:
    def test_multiply_is_rotation_composition(self):
        q1, q2 = random_quaternions(2, seed=3)
        product = quaternion_multiply(q1, q2)
        expected = quaternion_to_matrix(q1) @ quaternion_to_matrix(q2)
        np.testing.assert_allclose(quaternion_to_matrix(product), expected, atol=1e-12)

    def test_normalize_zero_is_identity(self):
        np.testing.assert_array_equal(quaternion_normalize(np.zeros(4)), [0.0, 0.0, 0.0, 1.0])
        np.testing.assert_allclose(quaternion_normalize([0.0, 0.0, 0.0, 2.0]), [0.0, 0.0, 0.0, 1.0])

    def test_matrix_round_trip_torch_matches_numpy(self):
        q = random_quaternions(32, seed=7)
        q = np.where(q[:, 3:4] < 0, -q, q)

        np.testing.assert_allclose(matrix_to_quaternion(quaternion_to_matrix(q)), q, atol=1e-10)

        q_t = torch.as_tensor(q)
        m_t = quaternion_to_matrix(q_t)
        torch.testing.assert_close(m_t, torch.as_tensor(quaternion_to_matrix(q)))
        torch.testing.assert_close(matrix_to_quaternion(m_t), q_t)

    def test_bad_shape(self):
        with pytest.raises(ValueError, match=r"\(\.\.\., 4\)"):
            quaternion_to_matrix(np.zeros(3))
        with pytest.raises(ValueError, match=r"\(\.\.\., 3, 3\)"):
            matrix_to_quaternion(np.zeros((4, 4)))


class TestEulerQuaternion:
    def test_ninety_degrees_about_x(self):
        q = convert_euler_degrees_to_quaternion(np.array([90.0, 0.0, 0.0]))
        np.testing.assert_allclose(q, [np.sqrt(0.5), 0.0, 0.0, np.sqrt(0.5)], atol=1e-7)

    def test_single_axes(self):
        s = np.sqrt(0.5)
        np.testing.assert_allclose(convert_euler_degrees_to_quaternion([0, 90, 0]), [0, s, 0, s], atol=1e-12)
        np.testing.assert_allclose(convert_euler_degrees_to_quaternion([0, 0, 90]), [0, 0, s, s], atol=1e-12)

    def test_composition_order_matches_scipy_intrinsic_xyz(self):
        euler = random_euler(seed=8)
        q = euler_radians_to_quaternion(euler)
        expected = ScipyRotation.from_euler("XYZ", euler).as_matrix()
        np.testing.assert_allclose(quaternion_to_matrix(q), expected, atol=1e-12)

    def test_output_is_unit(self):
        q = euler_radians_to_quaternion(random_euler(seed=9) * 3)
        np.testing.assert_allclose(np.linalg.norm(q, axis=-1), 1.0, atol=1e-12)

    def test_round_trip(self):
        euler = random_euler(seed=10)
        recovered = quaternion_to_euler_radians(euler_radians_to_quaternion(euler))
        np.testing.assert_allclose(recovered, euler, atol=1e-4)

    def test_round_trip_degrees_single(self):
        euler = np.array([10.0, -25.0, 170.0])
        recovered = convert_quaternion_to_euler_degrees(convert_euler_degrees_to_quaternion(euler))
        np.testing.assert_allclose(recovered, euler, atol=1e-8)

    def test_extraction_matches_scipy(self):
        q = random_quaternions(64, seed=11)
        expected = ScipyRotation.from_quat(q).as_euler("XYZ")
        recovered = quaternion_to_euler_radians(q)
        np.testing.assert_allclose(quaternion_to_matrix(euler_radians_to_quaternion(recovered)),
                                   quaternion_to_matrix(q), atol=1e-10)
        np.testing.assert_allclose(recovered, expected, atol=1e-8)

    @pytest.mark.parametrize("pitch, expected_z", [(90.0, 50.0), (-90.0, -10.0)])
    def test_gimbal_lock_pins_x(self, pitch, expected_z):
        euler = np.array([30.0, pitch, 20.0])
        q = convert_euler_degrees_to_quaternion(euler)
        recovered = convert_quaternion_to_euler_degrees(q)

        assert np.all(np.isfinite(recovered))
        np.testing.assert_allclose(recovered, [0.0, pitch, expected_z], atol=1e-5)
        assert quaternion_angular_distance(convert_euler_degrees_to_quaternion(recovered), q) < 1e-6

    @pytest.mark.parametrize("pitch", [89.93, 89.95, 89.99, -89.95, -89.999])
    def test_near_gimbal_lock_is_exact(self, pitch):
        euler = np.array([30.0, pitch, 20.0])
        q = convert_euler_degrees_to_quaternion(euler)
        recovered = convert_quaternion_to_euler_degrees(q)

        np.testing.assert_allclose(recovered, euler, atol=1e-6)
        assert quaternion_angular_distance(convert_euler_degrees_to_quaternion(recovered), q) < 1e-6

    @pytest.mark.parametrize("pitch", [90.0 - 1e-5, -90.0 + 1e-5])
    def test_gimbal_lock_band_reproduces_rotation(self, pitch):
        q = convert_euler_degrees_to_quaternion(np.array([30.0, pitch, 20.0]))
        recovered = convert_quaternion_to_euler_degrees(q)

        assert recovered[0] == 0.0
        assert recovered[1] == pytest.approx(pitch, abs=1e-6)
        assert quaternion_angular_distance(convert_euler_degrees_to_quaternion(recovered), q) < 1e-6

    def test_gimbal_lock_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="rigid_orient.rotation_conversions")
        convert_quaternion_to_euler_degrees(convert_euler_degrees_to_quaternion([0.0, 90.0, 0.0]))
        assert "Gimbal lock" in caplog.text

    def test_clamps_overshoot(self):
        # slightly non-unit quaternion pushes the asin argument past 1
        q = np.array([0.0, np.sqrt(0.5), 0.0, np.sqrt(0.5)]) * (1 + 1e-9)
        euler = quaternion_to_euler_radians(q)
        assert np.all(np.isfinite(euler))
        np.testing.assert_allclose(euler[1], np.pi / 2, atol=1e-6)

    def test_zero_quaternion_does_not_crash(self):
        assert np.all(np.isfinite(quaternion_to_euler_radians(np.zeros(4))))

    def test_batched_and_torch(self):
        euler = random_euler(12, seed=12).reshape(3, 4, 3)
        q_np = euler_radians_to_quaternion(euler)
        assert q_np.shape == (3, 4, 4)

        q_t = euler_radians_to_quaternion(torch.as_tensor(euler))
        assert isinstance(q_t, torch.Tensor)
        torch.testing.assert_close(q_t, torch.as_tensor(q_np))
        torch.testing.assert_close(quaternion_to_euler_radians(q_t), torch.as_tensor(euler), atol=1e-6, rtol=0)

    def test_float32_torch(self):
        euler = torch.tensor([0.3, -0.2, 1.1], dtype=torch.float32)
        q = euler_radians_to_quaternion(euler)
        assert q.dtype == torch.float32
        torch.testing.assert_close(quaternion_to_euler_radians(q), euler, atol=1e-5, rtol=0)

    def test_bad_shape(self):
        with pytest.raises(ValueError, match="Euler angles"):
            euler_radians_to_quaternion(np.zeros(4))


class TestPreciseMatrix:
    def test_matches_scipy(self):
        euler = random_euler(seed=13) * 2
        expected = ScipyRotation.from_euler("XYZ", euler).as_matrix()
        np.testing.assert_allclose(euler_radians_to_matrix_precise(euler), expected, atol=1e-12)

    def test_agrees_with_quaternion_path(self):
        euler = random_euler(seed=14) * 3
        fast = quaternion_to_matrix(euler_radians_to_quaternion(euler))
        np.testing.assert_allclose(euler_radians_to_matrix_precise(euler), fast, atol=1e-5)

    def test_degrees(self):
        m = euler_degrees_to_matrix_precise([0.0, 0.0, 90.0])
        np.testing.assert_allclose(m, [[0, -1, 0], [1, 0, 0], [0, 0, 1]], atol=1e-12)

    def test_orthonormal_torch(self):
        m = euler_radians_to_matrix_precise(torch.as_tensor(random_euler(8, seed=15)))
        eye = torch.eye(3, dtype=m.dtype).expand_as(m)
        torch.testing.assert_close(m @ m.transpose(-1, -2), eye)
        torch.testing.assert_close(torch.linalg.det(m), torch.ones(8, dtype=m.dtype))


class TestAxisAngle:
    def test_identity_uses_default_axis(self):
        axis, angle = convert_quaternion_to_axis_angle(np.array([0.0, 0.0, 0.0, 1.0]))
        assert not np.any(np.isnan(axis))
        np.testing.assert_array_equal(axis, DEFAULT_AXIS)
        assert angle == pytest.approx(0.0)

    def test_quarter_turn_about_z(self):
        result = convert_quaternion_to_axis_angle([0.0, 0.0, np.sqrt(0.5), np.sqrt(0.5)])
        np.testing.assert_allclose(result.axis, [0.0, 0.0, 1.0], atol=1e-12)
        assert result.angle == pytest.approx(np.pi / 2)

    def test_round_trip(self):
        q = random_quaternions(64, seed=16)
        axis, angle = convert_quaternion_to_axis_angle(q)
        np.testing.assert_allclose(np.linalg.norm(axis, axis=-1), 1.0, atol=1e-12)
        rebuilt = axis_angle_to_quaternion(axis, angle)
        assert quaternion_angular_distance(rebuilt, q, reduce=False).max() < 1e-5

    def test_clamps_w(self):
        axis, angle = convert_quaternion_to_axis_angle(np.array([0.0, 0.0, 0.0, 1.0 + 1e-9]))
        assert np.isfinite(angle) and angle == 0.0

    def test_batched_identity_torch(self):
        q = torch.tensor([[0.0, 0.0, 0.0, 1.0], [1.0, 0.0, 0.0, 0.0]], dtype=torch.float64)
        axis, angle = convert_quaternion_to_axis_angle(q)
        torch.testing.assert_close(axis, torch.tensor([[0.0, 1.0, 0.0], [1.0, 0.0, 0.0]], dtype=torch.float64))
        torch.testing.assert_close(angle, torch.tensor([0.0, np.pi], dtype=torch.float64))

    def test_zero_axis_gives_identity(self):
        np.testing.assert_allclose(axis_angle_to_quaternion(np.zeros(3), 1.3), [0.0, 0.0, 0.0, 1.0])

    def test_unnormalized_axis(self):
        q = axis_angle_to_quaternion([0.0, 0.0, 5.0], np.pi)
        np.testing.assert_allclose(q, [0.0, 0.0, 1.0, 0.0], atol=1e-12)
