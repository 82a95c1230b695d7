"""
Conversions between transforms and euler angles.

Two interchangeable euler -> transform algorithms are provided:

- fast: compose per-axis quaternions (``euler_radians_to_quaternion``) and lift the
  result to a rotation matrix.
- precise: evaluate each sine/cosine once and write the nine matrix entries of
  ``Rx @ Ry @ Rz`` directly (``euler_radians_to_matrix_precise``).

Both are pure functions with the same contract; they agree to within 1e-5 and are
selected explicitly, either by name or through ``convert_euler_to_transform``.
Transform -> euler discards translation and scale.
"""

from __future__ import annotations

from typing import Callable, Dict, Union

from ._core import (
    ArrayLike,
    EulerConversionMethod,
    GIMBAL_LOCK_EPS,
    VectorLike,
    as_array,
    zeros_like,
)
from .rotation_conversions import (
    deg_to_rad,
    euler_degrees_to_quaternion,
    euler_radians_to_matrix_precise,
    euler_radians_to_quaternion,
    quaternion_to_euler_degrees,
    quaternion_to_euler_radians,
    quaternion_to_matrix,
)
from .transform import Transform


# =============================================================================
# Transform -> Euler
# =============================================================================


def convert_transform_to_euler_radians(
    transform: Transform, gimbal_eps: float = GIMBAL_LOCK_EPS
) -> ArrayLike:
    """
    Decompose the rotational part of a transform into euler angles in radians.

    Args:
        transform: Source transform; translation and scale are ignored
        gimbal_eps: See ``quaternion_to_euler_radians``

    Returns:
        Euler angles (..., 3) as (x, y, z), composed as ``Rx @ Ry @ Rz``
    """
    return quaternion_to_euler_radians(transform.rotation_quaternion(), gimbal_eps=gimbal_eps)


def convert_transform_to_euler_degrees(
    transform: Transform, gimbal_eps: float = GIMBAL_LOCK_EPS
) -> ArrayLike:
    """Degree variant of ``convert_transform_to_euler_radians``."""
    return quaternion_to_euler_degrees(transform.rotation_quaternion(), gimbal_eps=gimbal_eps)


# =============================================================================
# Euler -> Transform
# =============================================================================


def _rotation_only(rotation: ArrayLike) -> Transform:
    """Transform with the given rotation, zero translation and unit scale."""
    return Transform(rotation=rotation, translation=zeros_like(rotation[..., 0]))


def convert_euler_radians_to_transform(euler: VectorLike) -> Transform:
    """Create a rotation transform from euler angles in radians via quaternion composition."""
    return _rotation_only(quaternion_to_matrix(euler_radians_to_quaternion(euler)))


def convert_euler_degrees_to_transform(euler: VectorLike) -> Transform:
    """
    Create a rotation transform from euler angles in degrees.

    The rotation is built by composing per-axis quaternions, z first, then y, then x.

    Args:
        euler: Euler angles (..., 3) as (x, y, z) in degrees

    Returns:
        Transform with zero translation and unit scale
    """
    return _rotation_only(quaternion_to_matrix(euler_degrees_to_quaternion(euler)))


def convert_euler_radians_to_transform_precise(euler: VectorLike) -> Transform:
    """
    Create a rotation transform from euler angles in radians using direct sin/cos.

    Args:
        euler: Euler angles (..., 3) as (x, y, z) in radians

    Returns:
        Transform whose rotation is ``Rx @ Ry @ Rz``, zero translation, unit scale
    """
    return _rotation_only(euler_radians_to_matrix_precise(euler))


def convert_euler_degrees_to_transform_precise(euler: VectorLike) -> Transform:
    """Degree variant of ``convert_euler_radians_to_transform_precise``."""
    return convert_euler_radians_to_transform_precise(deg_to_rad(euler))


# =============================================================================
# Strategy Dispatch
# =============================================================================

EulerToTransform = Callable[[VectorLike], Transform]

_EULER_TO_TRANSFORM_HANDLERS: Dict[EulerConversionMethod, EulerToTransform] = {
    EulerConversionMethod.FAST: convert_euler_radians_to_transform,
    EulerConversionMethod.PRECISE: convert_euler_radians_to_transform_precise,
}


def convert_euler_to_transform(
    euler: VectorLike,
    *,
    degrees: bool = True,
    method: Union[str, EulerConversionMethod] = EulerConversionMethod.FAST,
) -> Transform:
    """
    Create a rotation transform from euler angles with an explicitly chosen algorithm.

    Args:
        euler: Euler angles (..., 3) as (x, y, z)
        degrees: If True, angles are in degrees
        method: "fast" (quaternion composition) or "precise" (direct sin/cos)

    Returns:
        Transform with zero translation and unit scale
    """
    method = EulerConversionMethod(method)
    euler = as_array(euler)
    if degrees:
        euler = deg_to_rad(euler)
    return _EULER_TO_TRANSFORM_HANDLERS[method](euler)
