"""
Rotation conversion functions between different representations.

Supported representations:
- quaternion (xyzw convention, matching SciPy/ROS)
- euler angles (fixed convention, see below)
- rotation matrix (3x3)
- axis-angle

Euler convention
----------------
An euler triple ``(x, y, z)`` holds one angle per principal axis. The rotation it
describes is ``R = Rx(x) @ Ry(y) @ Rz(z)``: the Z rotation is applied first, then Y,
then X. Angles are radians unless the function name says ``degrees``.

All functions support:
- NumPy arrays and PyTorch tensors (plain sequences are treated as NumPy)
- Arbitrary batch dimensions
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Union, overload

import numpy as np
import torch
from scipy.spatial.transform import Rotation as ScipyRotation

from ._core import (
    ArrayLike,
    DEG_TO_RAD,
    EPS,
    GIMBAL_LOCK_EPS,
    RAD_TO_DEG,
    SMALL_ANGLE_THRESHOLD,
    VectorLike,
    abs_,
    any_,
    as_array,
    atan2,
    cat,
    check_last_dim,
    check_matrix,
    clamped_acos,
    clamped_asin,
    cos,
    get_backend,
    like,
    norm,
    ones_like,
    sin,
    stack,
    unbind,
    where,
    zeros_like,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Angle Units
# =============================================================================


@overload
def rad_to_deg(radians: np.ndarray) -> np.ndarray: ...
@overload
def rad_to_deg(radians: torch.Tensor) -> torch.Tensor: ...


def rad_to_deg(radians: VectorLike) -> ArrayLike:
    """Scale angles from radians to degrees, component-wise."""
    return as_array(radians) * RAD_TO_DEG


@overload
def deg_to_rad(degrees: np.ndarray) -> np.ndarray: ...
@overload
def deg_to_rad(degrees: torch.Tensor) -> torch.Tensor: ...


def deg_to_rad(degrees: VectorLike) -> ArrayLike:
    """Scale angles from degrees to radians, component-wise."""
    return as_array(degrees) * DEG_TO_RAD


# =============================================================================
# Quaternion Operations (xyzw convention)
# =============================================================================


@overload
def quaternion_to_matrix(quat: np.ndarray) -> np.ndarray: ...
@overload
def quaternion_to_matrix(quat: torch.Tensor) -> torch.Tensor: ...


def quaternion_to_matrix(quat: VectorLike) -> ArrayLike:
    """
    Convert quaternion (xyzw) to rotation matrix.

    Args:
        quat: Quaternion in xyzw format (..., 4)

    Returns:
        Rotation matrix (..., 3, 3)
    """
    quat = as_array(quat)
    check_last_dim(quat, 4, "Quaternion")

    backend = get_backend(quat)

    if backend == "numpy":
        batch_shape = quat.shape[:-1]
        quat_flat = quat.reshape(-1, 4)
        matrix_flat = ScipyRotation.from_quat(quat_flat).as_matrix()
        return matrix_flat.reshape(*batch_shape, 3, 3).astype(quat.dtype, copy=False)

    # PyTorch implementation
    x, y, z, w = torch.unbind(quat, dim=-1)

    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z

    matrix = torch.stack([
        1 - 2 * (yy + zz), 2 * (xy - wz), 2 * (xz + wy),
        2 * (xy + wz), 1 - 2 * (xx + zz), 2 * (yz - wx),
        2 * (xz - wy), 2 * (yz + wx), 1 - 2 * (xx + yy),
    ], dim=-1)

    return matrix.reshape(quat.shape[:-1] + (3, 3))


@overload
def matrix_to_quaternion(matrix: np.ndarray) -> np.ndarray: ...
@overload
def matrix_to_quaternion(matrix: torch.Tensor) -> torch.Tensor: ...


def matrix_to_quaternion(matrix: ArrayLike) -> ArrayLike:
    """
    Convert rotation matrix to quaternion (xyzw).

    Uses Shepperd's method for numerical stability. The result is canonical (w >= 0).

    Args:
        matrix: Rotation matrix (..., 3, 3)

    Returns:
        Quaternion in xyzw format (..., 4)
    """
    matrix = as_array(matrix)
    check_matrix(matrix)

    backend = get_backend(matrix)

    if backend == "numpy":
        batch_shape = matrix.shape[:-2]
        matrix_flat = matrix.reshape(-1, 3, 3)
        quat_flat = ScipyRotation.from_matrix(matrix_flat).as_quat()
        quat_flat = np.where(quat_flat[:, 3:4] < 0, -quat_flat, quat_flat)
        return quat_flat.reshape(*batch_shape, 4).astype(matrix.dtype, copy=False)

    # PyTorch: Shepperd's method
    batch_shape = matrix.shape[:-2]
    m = matrix.reshape(-1, 3, 3)

    trace = m[:, 0, 0] + m[:, 1, 1] + m[:, 2, 2]
    quat = torch.zeros(m.shape[0], 4, dtype=matrix.dtype, device=matrix.device)

    # Case 1: trace > 0 (trace + 1 >= 1, always safe)
    mask1 = trace > 0
    if mask1.any():
        s = torch.sqrt(trace[mask1] + 1.0) * 2
        quat[mask1, 3] = 0.25 * s
        quat[mask1, 0] = (m[mask1, 2, 1] - m[mask1, 1, 2]) / s
        quat[mask1, 1] = (m[mask1, 0, 2] - m[mask1, 2, 0]) / s
        quat[mask1, 2] = (m[mask1, 1, 0] - m[mask1, 0, 1]) / s

    # Case 2: m[0,0] is largest (clamp inside sqrt)
    mask2 = (~mask1) & (m[:, 0, 0] > m[:, 1, 1]) & (m[:, 0, 0] > m[:, 2, 2])
    if mask2.any():
        val = torch.clamp(1.0 + m[mask2, 0, 0] - m[mask2, 1, 1] - m[mask2, 2, 2], min=SMALL_ANGLE_THRESHOLD)
        s = torch.sqrt(val) * 2
        quat[mask2, 3] = (m[mask2, 2, 1] - m[mask2, 1, 2]) / s
        quat[mask2, 0] = 0.25 * s
        quat[mask2, 1] = (m[mask2, 0, 1] + m[mask2, 1, 0]) / s
        quat[mask2, 2] = (m[mask2, 0, 2] + m[mask2, 2, 0]) / s

    # Case 3: m[1,1] is largest
    mask3 = (~mask1) & (~mask2) & (m[:, 1, 1] > m[:, 2, 2])
    if mask3.any():
        val = torch.clamp(1.0 + m[mask3, 1, 1] - m[mask3, 0, 0] - m[mask3, 2, 2], min=SMALL_ANGLE_THRESHOLD)
        s = torch.sqrt(val) * 2
        quat[mask3, 3] = (m[mask3, 0, 2] - m[mask3, 2, 0]) / s
        quat[mask3, 0] = (m[mask3, 0, 1] + m[mask3, 1, 0]) / s
        quat[mask3, 1] = 0.25 * s
        quat[mask3, 2] = (m[mask3, 1, 2] + m[mask3, 2, 1]) / s

    # Case 4: m[2,2] is largest
    mask4 = (~mask1) & (~mask2) & (~mask3)
    if mask4.any():
        val = torch.clamp(1.0 + m[mask4, 2, 2] - m[mask4, 0, 0] - m[mask4, 1, 1], min=SMALL_ANGLE_THRESHOLD)
        s = torch.sqrt(val) * 2
        quat[mask4, 3] = (m[mask4, 1, 0] - m[mask4, 0, 1]) / s
        quat[mask4, 0] = (m[mask4, 0, 2] + m[mask4, 2, 0]) / s
        quat[mask4, 1] = (m[mask4, 1, 2] + m[mask4, 2, 1]) / s
        quat[mask4, 2] = 0.25 * s

    quat = torch.where(quat[:, 3:4] < 0, -quat, quat)

    return quat.reshape(batch_shape + (4,))


def quaternion_normalize(q: VectorLike, eps: float = EPS) -> ArrayLike:
    """
    Scale quaternion(s) to unit norm.

    A (near) zero quaternion becomes the identity instead of dividing by zero.
    """
    q = as_array(q)
    check_last_dim(q, 4, "Quaternion")
    n = norm(q, keepdim=True)
    identity = like([0.0, 0.0, 0.0, 1.0], q)
    return where(n > eps, q / where(n > eps, n, ones_like(n)), identity)


@overload
def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray: ...
@overload
def quaternion_multiply(q1: torch.Tensor, q2: torch.Tensor) -> torch.Tensor: ...


def quaternion_multiply(q1: VectorLike, q2: VectorLike) -> ArrayLike:
    """
    Multiply two quaternions (Hamilton product).

    The result represents the composition of rotations: first q2, then q1.

    Args:
        q1: First quaternion(s) in xyzw format (..., 4)
        q2: Second quaternion(s) in xyzw format (..., 4)

    Returns:
        Product quaternion(s) in xyzw format (..., 4)
    """
    q1 = as_array(q1)
    q2 = as_array(q2)
    backend = get_backend(q1)

    x1, y1, z1, w1 = q1[..., 0], q1[..., 1], q1[..., 2], q1[..., 3]
    x2, y2, z2, w2 = q2[..., 0], q2[..., 1], q2[..., 2], q2[..., 3]

    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2

    if backend == "numpy":
        return np.stack(np.broadcast_arrays(x, y, z, w), axis=-1)

    return torch.stack(torch.broadcast_tensors(x, y, z, w), dim=-1)


# =============================================================================
# Euler Angles
# =============================================================================


def _axis_quaternion(angle: ArrayLike, axis_index: int) -> ArrayLike:
    """Quaternion for a rotation of ``angle`` radians about one principal axis."""
    half = angle * 0.5
    zero = zeros_like(half)
    components = [zero, zero, zero, cos(half)]
    components[axis_index] = sin(half)
    return stack(components, dim=-1)


@overload
def euler_radians_to_quaternion(euler: np.ndarray) -> np.ndarray: ...
@overload
def euler_radians_to_quaternion(euler: torch.Tensor) -> torch.Tensor: ...


def euler_radians_to_quaternion(euler: VectorLike) -> ArrayLike:
    """
    Create a quaternion from euler angles in radians.

    The per-axis half-angle quaternions are composed as ``qx * qy * qz``, i.e. the
    rotation about Z is applied first, then Y, then X. The product is renormalized
    to absorb rounding.

    Args:
        euler: Euler angles (..., 3) as (x, y, z) in radians

    Returns:
        Unit quaternion in xyzw format (..., 4)
    """
    euler = as_array(euler)
    check_last_dim(euler, 3, "Euler angles")

    ax, ay, az = unbind(euler, dim=-1)
    qx = _axis_quaternion(ax, 0)
    qy = _axis_quaternion(ay, 1)
    qz = _axis_quaternion(az, 2)

    quat = quaternion_multiply(quaternion_multiply(qx, qy), qz)
    return quaternion_normalize(quat)


def euler_degrees_to_quaternion(euler: VectorLike) -> ArrayLike:
    """Create a quaternion from euler angles in degrees (see ``euler_radians_to_quaternion``)."""
    return euler_radians_to_quaternion(deg_to_rad(euler))


def _euler_from_matrix_elements(m02, m10, m11, m12, m20, m21, m22, gimbal_eps: float) -> ArrayLike:
    """
    Recover (x, y, z) radians of ``Rx @ Ry @ Rz`` from its matrix entries.

    For that product the first row is ``(cy*cz, -cy*sz, sy)`` and the last column is
    ``(sy, -sx*cy, cx*cy)``. Once x is known, ``Rx^T @ R = Ry @ Rz`` has the second
    row ``(sz, cz, 0)``, which gives z exactly for every pitch. Near ``|sy| == 1``
    the x and z rotations act about the same axis; x is then pinned to zero and
    the whole coupled angle goes to z.
    """
    pitch = clamped_asin(m02)
    locked = abs_(m02) >= 1.0 - gimbal_eps

    if any_(locked) and logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Gimbal lock in euler extraction for {int(locked.sum())} rotation(s); pinning x to 0")

    roll = where(locked, zeros_like(pitch), atan2(-m12, m22))
    sx, cx = sin(roll), cos(roll)
    yaw = atan2(cx * m10 + sx * m20, cx * m11 + sx * m21)
    return stack([roll, pitch, yaw], dim=-1)


@overload
def quaternion_to_euler_radians(quat: np.ndarray, gimbal_eps: float = ...) -> np.ndarray: ...
@overload
def quaternion_to_euler_radians(quat: torch.Tensor, gimbal_eps: float = ...) -> torch.Tensor: ...


def quaternion_to_euler_radians(quat: VectorLike, gimbal_eps: float = GIMBAL_LOCK_EPS) -> ArrayLike:
    """
    Convert a quaternion to euler angles in radians.

    Inverse of ``euler_radians_to_quaternion``. The middle (y) angle lies in
    [-pi/2, pi/2]; the outer two lie in (-pi, pi].

    Gimbal lock: when ``1 - |sin(y)| <= gimbal_eps`` the x and z angles are coupled.
    The returned decomposition has ``x = 0`` and carries the full coupled angle in z.

    Args:
        quat: Unit quaternion in xyzw format (..., 4)
        gimbal_eps: Distance of ``|sin(y)|`` from 1 treated as gimbal lock; away from
            it every pitch decomposes exactly

    Returns:
        Euler angles (..., 3) as (x, y, z) in radians
    """
    quat = as_array(quat)
    check_last_dim(quat, 4, "Quaternion")

    x, y, z, w = unbind(quat, dim=-1)

    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z

    return _euler_from_matrix_elements(
        2 * (xz + wy),  # m02
        2 * (xy + wz),  # m10
        1 - 2 * (xx + zz),  # m11
        2 * (yz - wx),  # m12
        2 * (xz - wy),  # m20
        2 * (yz + wx),  # m21
        1 - 2 * (xx + yy),  # m22
        gimbal_eps,
    )


def quaternion_to_euler_degrees(quat: VectorLike, gimbal_eps: float = GIMBAL_LOCK_EPS) -> ArrayLike:
    """Convert a quaternion to euler angles in degrees (see ``quaternion_to_euler_radians``)."""
    return rad_to_deg(quaternion_to_euler_radians(quat, gimbal_eps=gimbal_eps))


@overload
def euler_radians_to_matrix_precise(euler: np.ndarray) -> np.ndarray: ...
@overload
def euler_radians_to_matrix_precise(euler: torch.Tensor) -> torch.Tensor: ...


def euler_radians_to_matrix_precise(euler: VectorLike) -> ArrayLike:
    """
    Convert euler angles in radians to a rotation matrix, term by term.

    Each sine/cosine is evaluated once and the entries of ``Rx @ Ry @ Rz`` are
    written out directly instead of composing quaternions.

    Args:
        euler: Euler angles (..., 3) as (x, y, z) in radians

    Returns:
        Rotation matrix (..., 3, 3)
    """
    euler = as_array(euler)
    check_last_dim(euler, 3, "Euler angles")

    ax, ay, az = unbind(euler, dim=-1)
    sx, cx = sin(ax), cos(ax)
    sy, cy = sin(ay), cos(ay)
    sz, cz = sin(az), cos(az)

    row0 = stack([cy * cz, -cy * sz, sy], dim=-1)
    row1 = stack([cx * sz + sx * sy * cz, cx * cz - sx * sy * sz, -sx * cy], dim=-1)
    row2 = stack([sx * sz - cx * sy * cz, sx * cz + cx * sy * sz, cx * cy], dim=-1)
    return stack([row0, row1, row2], dim=-2)


def euler_degrees_to_matrix_precise(euler: VectorLike) -> ArrayLike:
    """Degree variant of ``euler_radians_to_matrix_precise``."""
    return euler_radians_to_matrix_precise(deg_to_rad(euler))


# =============================================================================
# Axis-Angle
# =============================================================================


class AxisAngle(NamedTuple):
    """Rotation axis (..., 3) and angle in radians (...)."""

    axis: ArrayLike
    angle: ArrayLike


# Returned when the axis is undefined (identity rotation)
DEFAULT_AXIS = (0.0, 1.0, 0.0)


def quaternion_to_axis_angle(quat: VectorLike, eps: float = EPS) -> AxisAngle:
    """
    Split a unit quaternion into rotation axis and angle.

    ``angle = 2 * acos(w)`` with ``w`` clamped to [-1, 1], so the angle lies in
    [0, 2*pi]. The axis is the normalized vector part. For a near-identity rotation
    (vector part shorter than ``eps``) the axis is undefined and ``DEFAULT_AXIS``
    (+Y) is returned instead.

    Args:
        quat: Unit quaternion in xyzw format (..., 4)
        eps: Vector-part length below which the axis falls back to +Y

    Returns:
        AxisAngle(axis (..., 3), angle (...))
    """
    quat = as_array(quat)
    check_last_dim(quat, 4, "Quaternion")

    xyz = quat[..., :3]
    angle = 2 * clamped_acos(quat[..., 3])

    length = norm(xyz, keepdim=True)
    valid = length > eps
    axis = where(valid, xyz / where(valid, length, ones_like(length)), like(DEFAULT_AXIS, xyz))
    return AxisAngle(axis=axis, angle=angle)


def axis_angle_to_quaternion(axis: VectorLike, angle: Union[float, VectorLike], eps: float = EPS) -> ArrayLike:
    """
    Build a unit quaternion rotating ``angle`` radians about ``axis``.

    The axis is normalized first; a zero-length axis yields the identity quaternion.

    Args:
        axis: Rotation axis (..., 3)
        angle: Angle in radians, scalar or (...)

    Returns:
        Quaternion in xyzw format (..., 4)
    """
    axis = as_array(axis)
    check_last_dim(axis, 3, "Axis")
    angle = like(angle, axis)

    length = norm(axis, keepdim=True)
    valid = length > eps
    unit = where(valid, axis / where(valid, length, ones_like(length)), zeros_like(axis))

    half = angle[..., None] * 0.5
    xyz = unit * sin(half)
    w = where(valid, cos(half), ones_like(half)) + zeros_like(xyz[..., :1])
    return cat([xyz, w], dim=-1)


# =============================================================================
# Aliases
# =============================================================================

convert_euler_radians_to_quaternion = euler_radians_to_quaternion
convert_euler_degrees_to_quaternion = euler_degrees_to_quaternion
convert_quaternion_to_euler_radians = quaternion_to_euler_radians
convert_quaternion_to_euler_degrees = quaternion_to_euler_degrees
convert_quaternion_to_axis_angle = quaternion_to_axis_angle
