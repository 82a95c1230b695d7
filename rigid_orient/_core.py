"""
Core utilities: types, constants, and backend-agnostic operations.

This module provides the foundational building blocks used throughout rigid_orient.
All internal modules depend on this module.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import List, Literal, Sequence, Tuple, Union

import numpy as np
import torch
import torch.nn.functional as F


# =============================================================================
# Type Definitions
# =============================================================================

ArrayLike = Union[np.ndarray, torch.Tensor]
VectorLike = Union[np.ndarray, torch.Tensor, Sequence[float]]
Backend = Literal["numpy", "torch"]


# =============================================================================
# Numerical Constants
# =============================================================================

EPS = 1e-8  # General epsilon for division safety and zero-length checks
SMALL_ANGLE_THRESHOLD = 1e-6  # Below this, use small-angle branches
GIMBAL_LOCK_EPS = 1e-12  # 1 - |sin(pitch)| <= GIMBAL_LOCK_EPS is treated as gimbal lock
LOOK_AT_PARALLEL_EPS = 1e-3  # |forward . up| > 1 - this switches the reference up axis

DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi


# =============================================================================
# Enums
# =============================================================================


class Axis(str, Enum):
    """Signed principal local axis."""

    X_POSITIVE = "+x"
    X_NEGATIVE = "-x"
    Y_POSITIVE = "+y"
    Y_NEGATIVE = "-y"
    Z_POSITIVE = "+z"
    Z_NEGATIVE = "-z"

    @property
    def component(self) -> int:
        """Component index of the underlying basis axis (0, 1 or 2)."""
        return "xyz".index(self.value[1])

    @property
    def sign(self) -> float:
        return -1.0 if self.value[0] == "-" else 1.0

    @property
    def unit_vector(self) -> np.ndarray:
        """Unit vector along this axis."""
        v = np.zeros(3, dtype=np.float64)
        v[self.component] = self.sign
        return v


class EulerConversionMethod(str, Enum):
    """Euler angles -> rotation algorithms."""

    FAST = "fast"  # compose per-axis quaternions
    PRECISE = "precise"  # evaluate sin/cos once, write matrix terms directly


class BackendMismatchError(ValueError):
    """Raised when attempting to combine NumPy and PyTorch values."""


# =============================================================================
# Backend Detection
# =============================================================================


def get_backend(x: ArrayLike) -> Backend:
    """Determine backend from input type."""
    return "torch" if isinstance(x, torch.Tensor) else "numpy"


def as_array(x: VectorLike) -> ArrayLike:
    """Pass tensors/arrays through, turn plain sequences into float64 arrays."""
    if isinstance(x, torch.Tensor):
        return x
    x = np.asarray(x)
    if not np.issubdtype(x.dtype, np.floating):
        x = x.astype(np.float64)
    return x


def like(value: Union[ArrayLike, Sequence[float]], ref: ArrayLike) -> ArrayLike:
    """Create a constant array on the same backend, dtype and device as ``ref``."""
    if isinstance(ref, torch.Tensor):
        return torch.as_tensor(value, dtype=ref.dtype, device=ref.device)
    return np.asarray(value, dtype=ref.dtype)


def check_last_dim(x: ArrayLike, size: int, name: str) -> None:
    """Raise ValueError unless ``x`` has shape (..., size)."""
    if x.ndim < 1 or x.shape[-1] != size:
        raise ValueError(f"{name} must have shape (..., {size}), got {tuple(x.shape)}")


def check_matrix(x: ArrayLike, name: str = "Rotation matrix") -> None:
    """Raise ValueError unless ``x`` has shape (..., 3, 3)."""
    if x.ndim < 2 or tuple(x.shape[-2:]) != (3, 3):
        raise ValueError(f"{name} must have shape (..., 3, 3), got {tuple(x.shape)}")


# =============================================================================
# Backend-Agnostic Operations
# =============================================================================


def normalize(x: ArrayLike, dim: int = -1, eps: float = EPS) -> ArrayLike:
    """Normalize vectors along specified dimension."""
    if isinstance(x, torch.Tensor):
        return F.normalize(x, dim=dim, eps=eps)
    norm = np.linalg.norm(x, axis=dim, keepdims=True)
    return x / np.maximum(norm, eps)


def norm(x: ArrayLike, dim: int = -1, keepdim: bool = False) -> ArrayLike:
    """Euclidean norm along specified dimension."""
    if isinstance(x, torch.Tensor):
        return torch.linalg.norm(x, dim=dim, keepdim=keepdim)
    return np.linalg.norm(x, axis=dim, keepdims=keepdim)


def cross(a: ArrayLike, b: ArrayLike, dim: int = -1) -> ArrayLike:
    """Cross product along specified dimension."""
    if isinstance(a, torch.Tensor):
        a, b = torch.broadcast_tensors(a, b)
        return torch.linalg.cross(a, b, dim=dim)
    return np.cross(a, b, axis=dim)


def cat(arrays: List[ArrayLike], dim: int = -1) -> ArrayLike:
    """Concatenate arrays along dimension."""
    if isinstance(arrays[0], torch.Tensor):
        return torch.cat(arrays, dim=dim)
    return np.concatenate(arrays, axis=dim)


def stack(arrays: List[ArrayLike], dim: int = -1) -> ArrayLike:
    """Stack arrays along new dimension."""
    if isinstance(arrays[0], torch.Tensor):
        return torch.stack(arrays, dim=dim)
    return np.stack(arrays, axis=dim)


def unbind(x: ArrayLike, dim: int = -1) -> Tuple[ArrayLike, ...]:
    """Split along a dimension into a tuple of views."""
    if isinstance(x, torch.Tensor):
        return torch.unbind(x, dim=dim)
    return tuple(np.moveaxis(x, dim, 0))


def sin(x: ArrayLike) -> ArrayLike:
    return torch.sin(x) if isinstance(x, torch.Tensor) else np.sin(x)


def cos(x: ArrayLike) -> ArrayLike:
    return torch.cos(x) if isinstance(x, torch.Tensor) else np.cos(x)


def atan2(y: ArrayLike, x: ArrayLike) -> ArrayLike:
    return torch.atan2(y, x) if isinstance(y, torch.Tensor) else np.arctan2(y, x)


def clamped_asin(x: ArrayLike) -> ArrayLike:
    """Arcsine with the argument clamped to [-1, 1]."""
    if isinstance(x, torch.Tensor):
        return torch.asin(torch.clamp(x, -1.0, 1.0))
    return np.arcsin(np.clip(x, -1.0, 1.0))


def clamped_acos(x: ArrayLike) -> ArrayLike:
    """Arccosine with the argument clamped to [-1, 1]."""
    if isinstance(x, torch.Tensor):
        return torch.acos(torch.clamp(x, -1.0, 1.0))
    return np.arccos(np.clip(x, -1.0, 1.0))


def where(cond: ArrayLike, a: ArrayLike, b: ArrayLike) -> ArrayLike:
    """Element-wise select with broadcasting."""
    if isinstance(cond, torch.Tensor):
        return torch.where(cond, a, b)
    return np.where(cond, a, b)


def abs_(x: ArrayLike) -> ArrayLike:
    return torch.abs(x) if isinstance(x, torch.Tensor) else np.abs(x)


def any_(x: ArrayLike) -> bool:
    """True if any element is set."""
    return bool(x.any())


def transpose_last_two(x: ArrayLike) -> ArrayLike:
    """Transpose last two dimensions."""
    if isinstance(x, torch.Tensor):
        return x.transpose(-1, -2)
    return np.swapaxes(x, -1, -2)


def matmul(a: ArrayLike, b: ArrayLike) -> ArrayLike:
    """Matrix multiplication."""
    if isinstance(a, torch.Tensor):
        return torch.matmul(a, b)
    return np.matmul(a, b)


def eye(n: int, backend: Backend, dtype=None, device=None) -> ArrayLike:
    """Identity matrix."""
    if backend == "torch":
        return torch.eye(n, dtype=dtype, device=device)
    return np.eye(n, dtype=dtype or np.float64)


def zeros(shape: Tuple[int, ...], backend: Backend, dtype=None, device=None) -> ArrayLike:
    """Zero tensor/array."""
    if backend == "torch":
        return torch.zeros(shape, dtype=dtype, device=device)
    return np.zeros(shape, dtype=dtype or np.float64)


def zeros_like(x: ArrayLike) -> ArrayLike:
    return torch.zeros_like(x) if isinstance(x, torch.Tensor) else np.zeros_like(x)


def ones_like(x: ArrayLike) -> ArrayLike:
    return torch.ones_like(x) if isinstance(x, torch.Tensor) else np.ones_like(x)


def copy(x: ArrayLike) -> ArrayLike:
    """Independent copy of an array."""
    if isinstance(x, torch.Tensor):
        return x.clone()
    return np.array(x, copy=True)
