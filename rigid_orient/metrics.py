"""
Distance metrics for rotations.

Used to check that different conversion paths describe the same rotation.
"""

from __future__ import annotations

from typing import Literal, Union, overload

import numpy as np
import torch

from ._core import ArrayLike, as_array, check_last_dim, check_matrix, get_backend, matmul, transpose_last_two


@overload
def geodesic_distance(
    R1: np.ndarray, R2: np.ndarray, reduce: Literal[True] = ..., degrees: bool = ...
) -> float: ...
@overload
def geodesic_distance(
    R1: np.ndarray, R2: np.ndarray, reduce: Literal[False] = ..., degrees: bool = ...
) -> np.ndarray: ...
@overload
def geodesic_distance(
    R1: torch.Tensor, R2: torch.Tensor, reduce: Literal[True] = ..., degrees: bool = ...
) -> float: ...
@overload
def geodesic_distance(
    R1: torch.Tensor, R2: torch.Tensor, reduce: Literal[False] = ..., degrees: bool = ...
) -> torch.Tensor: ...


def geodesic_distance(
    R1: ArrayLike,
    R2: ArrayLike,
    reduce: bool = True,
    degrees: bool = False,
) -> Union[float, ArrayLike]:
    """
    Compute geodesic distance (rotation angle) between rotation matrices.

    Args:
        R1: First rotation matrix (..., 3, 3)
        R2: Second rotation matrix (..., 3, 3)
        reduce: If True, return mean distance as float
        degrees: If True, return angle in degrees

    Returns:
        If reduce=True: float (mean angle)
        If reduce=False: array of angles with same shape as batch dims
    """
    R1 = as_array(R1)
    R2 = as_array(R2)
    check_matrix(R1)
    check_matrix(R2)
    backend = get_backend(R1)

    R_diff = matmul(transpose_last_two(R1), R2)

    if backend == "torch":
        trace = torch.diagonal(R_diff, dim1=-2, dim2=-1).sum(-1)
        cos_angle = torch.clamp((trace - 1) / 2, -1.0, 1.0)
        angle = torch.acos(cos_angle)

        if degrees:
            angle = torch.rad2deg(angle)

        return angle.mean().item() if reduce else angle

    trace = np.trace(R_diff, axis1=-2, axis2=-1)
    cos_angle = np.clip((trace - 1) / 2, -1.0, 1.0)
    angle = np.arccos(cos_angle)

    if degrees:
        angle = np.rad2deg(angle)

    return float(np.mean(angle)) if reduce else angle


def quaternion_angular_distance(
    q1: ArrayLike,
    q2: ArrayLike,
    reduce: bool = True,
    degrees: bool = False,
) -> Union[float, ArrayLike]:
    """
    Rotation angle between two unit quaternions.

    ``q`` and ``-q`` describe the same rotation, so the distance between them is 0.

    Args:
        q1: First quaternion(s) in xyzw format (..., 4)
        q2: Second quaternion(s) in xyzw format (..., 4)
        reduce: If True, return mean distance as float
        degrees: If True, return angle in degrees
    """
    q1 = as_array(q1)
    q2 = as_array(q2)
    check_last_dim(q1, 4, "Quaternion")
    check_last_dim(q2, 4, "Quaternion")

    if get_backend(q1) == "torch":
        cos_half = torch.clamp(torch.abs((q1 * q2).sum(-1)), max=1.0)
        angle = 2 * torch.acos(cos_half)
        if degrees:
            angle = torch.rad2deg(angle)
        return angle.mean().item() if reduce else angle

    cos_half = np.minimum(np.abs(np.sum(q1 * q2, axis=-1)), 1.0)
    angle = 2 * np.arccos(cos_half)
    if degrees:
        angle = np.rad2deg(angle)
    return float(np.mean(angle)) if reduce else angle
