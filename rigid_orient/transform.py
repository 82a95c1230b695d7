"""
Transform class for rigid body transformations (rotation + translation + uniform scale).

Provides a frozen value type for SE(3) transformations with an optional
uniform scale, supporting both NumPy and PyTorch backends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple, Union

import numpy as np
import torch

from ._core import (
    ArrayLike,
    Backend,
    BackendMismatchError,
    VectorLike,
    as_array,
    check_last_dim,
    check_matrix,
    copy,
    eye,
    get_backend,
    matmul,
    norm,
    transpose_last_two,
    zeros,
)
from .rotation_conversions import matrix_to_quaternion, quaternion_to_matrix


@dataclass(frozen=True, slots=True, eq=False)
class Transform:
    """
    Rigid body transform with uniform scale, for NumPy and PyTorch backends.

    A point ``p`` maps to ``scale * rotation @ p + translation``. Fields cannot be
    reassigned and construction copies the input arrays, so later changes to
    those arrays do not leak into the transform.

    Attributes:
        rotation: Orthonormal rotation matrix (..., 3, 3)
        translation: Translation vector (..., 3)
        scale: Uniform scale, scalar or (...)
        backend: "numpy" or "torch" (auto-detected from inputs)

    Example:
        >>> tf = Transform.from_pos_quat(np.array([1.0, 2.0, 3.0]), np.array([0, 0, 0, 1.0]))
        >>> tf.transform_point(np.zeros(3))
        array([1., 2., 3.])
    """

    rotation: ArrayLike
    translation: ArrayLike
    scale: Union[float, ArrayLike] = 1.0
    backend: Backend = field(init=False)

    def __post_init__(self) -> None:
        """Validate inputs and align everything to one backend."""
        rotation = as_array(self.rotation)
        translation = as_array(self.translation)
        scale = self.scale

        check_matrix(rotation)
        check_last_dim(translation, 3, "Translation")

        is_torch = (
            get_backend(rotation) == "torch"
            or get_backend(translation) == "torch"
            or isinstance(scale, torch.Tensor)
        )
        backend = "torch" if is_torch else "numpy"

        if backend == "torch":
            if not isinstance(rotation, torch.Tensor):
                rotation = torch.as_tensor(rotation)
            translation = torch.as_tensor(translation, dtype=rotation.dtype, device=rotation.device)
            scale = torch.as_tensor(scale, dtype=rotation.dtype, device=rotation.device)
        else:
            scale = np.asarray(scale, dtype=rotation.dtype)

        # frozen dataclass: normalized fields are written once here, detached from the caller's arrays
        object.__setattr__(self, "rotation", copy(rotation))
        object.__setattr__(self, "translation", copy(translation))
        object.__setattr__(self, "scale", copy(scale))
        object.__setattr__(self, "backend", backend)

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def identity(
        cls,
        backend: Backend = "numpy",
        dtype=None,
        device=None,
    ) -> "Transform":
        """Create identity transform."""
        rot = eye(3, backend, dtype=dtype, device=device)
        trans = zeros((3,), backend, dtype=dtype, device=device)
        return cls(rotation=rot, translation=trans)

    @classmethod
    def from_matrix(cls, matrix: ArrayLike) -> "Transform":
        """
        Create transform from 4x4 homogeneous matrix.

        The uniform scale is read from the length of the first basis column.
        """
        matrix = as_array(matrix)
        if matrix.ndim < 2 or tuple(matrix.shape[-2:]) != (4, 4):
            raise ValueError(f"Homogeneous matrix must have shape (..., 4, 4), got {tuple(matrix.shape)}")

        linear = matrix[..., :3, :3]
        scale = norm(linear[..., :, 0], dim=-1)
        return cls(
            rotation=linear / scale[..., None, None],
            translation=matrix[..., :3, 3],
            scale=scale,
        )

    @classmethod
    def from_pos_quat(
        cls,
        position: VectorLike,
        quaternion: VectorLike,
        scale: Union[float, ArrayLike] = 1.0,
    ) -> "Transform":
        """
        Create transform from position and quaternion.

        Args:
            position: Translation vector (..., 3)
            quaternion: Unit quaternion in xyzw format (..., 4)
            scale: Uniform scale
        """
        rotation = quaternion_to_matrix(quaternion)
        return cls(rotation=rotation, translation=as_array(position), scale=scale)

    @classmethod
    def stack(cls, transforms: List["Transform"], axis: int = 0) -> "Transform":
        """Stack multiple transforms into a batched transform."""
        if not transforms:
            raise ValueError("Cannot stack empty list of transforms")

        backend = transforms[0].backend
        for i, tf in enumerate(transforms[1:], 1):
            if tf.backend != backend:
                raise BackendMismatchError(
                    f"Cannot stack transforms with different backends: "
                    f"transforms[0] is {backend}, transforms[{i}] is {tf.backend}."
                )

        if backend == "numpy":
            rotation = np.stack([tf.rotation for tf in transforms], axis=axis)
            translation = np.stack([tf.translation for tf in transforms], axis=axis)
            scale = np.stack([np.broadcast_to(tf.scale, tf.batch_shape) for tf in transforms], axis=axis)
        else:
            rotation = torch.stack([tf.rotation for tf in transforms], dim=axis)
            translation = torch.stack([tf.translation for tf in transforms], dim=axis)
            scale = torch.stack([tf.scale.expand(tf.batch_shape) for tf in transforms], dim=axis)

        return cls(rotation=rotation, translation=translation, scale=scale)

    # -------------------------------------------------------------------------
    # Conversion Methods
    # -------------------------------------------------------------------------

    def as_matrix(self) -> ArrayLike:
        """Convert to 4x4 homogeneous transformation matrix."""
        batch_shape = self.batch_shape
        linear = self.rotation * self.scale[..., None, None]

        if self.backend == "torch":
            matrix = torch.eye(4, dtype=self.rotation.dtype, device=self.rotation.device)
            if batch_shape:
                matrix = matrix.expand(*batch_shape, 4, 4).clone()
            matrix[..., :3, :3] = linear
            matrix[..., :3, 3] = self.translation
            return matrix

        matrix = np.zeros((*batch_shape, 4, 4), dtype=self.rotation.dtype)
        matrix[..., :3, :3] = linear
        matrix[..., :3, 3] = self.translation
        matrix[..., 3, 3] = 1.0
        return matrix

    def rotation_quaternion(self) -> ArrayLike:
        """Rotational part as a canonical (w >= 0) xyzw quaternion (..., 4)."""
        return matrix_to_quaternion(self.rotation)

    # -------------------------------------------------------------------------
    # Transform Operations
    # -------------------------------------------------------------------------

    def __matmul__(self, other: "Transform") -> "Transform":
        """
        Compose transforms: self @ other.

        The result transforms points as: self.transform_point(other.transform_point(point))
        """
        if self.backend != other.backend:
            raise BackendMismatchError(
                f"Cannot compose transforms with different backends: "
                f"{self.backend} vs {other.backend}"
            )

        rotation = matmul(self.rotation, other.rotation)
        translation = self.transform_point(other.translation)
        return Transform(rotation=rotation, translation=translation, scale=self.scale * other.scale)

    def compose(self, other: "Transform") -> "Transform":
        """Alias for @ operator."""
        return self @ other

    def inverse(self) -> "Transform":
        """Compute inverse transform."""
        rot_inv = transpose_last_two(self.rotation)
        scale_inv = 1.0 / self.scale
        trans_inv = -matmul(rot_inv, self.translation[..., None]).squeeze(-1) * scale_inv[..., None]
        return Transform(rotation=rot_inv, translation=trans_inv, scale=scale_inv)

    def transform_point(self, point: VectorLike) -> ArrayLike:
        """Apply transform to point(s)."""
        return self.transform_vector(point) + self.translation

    def transform_vector(self, vector: VectorLike) -> ArrayLike:
        """Apply rotation and scale only to vector(s) (no translation)."""
        vector = as_array(vector)
        rotated = matmul(self.rotation, vector[..., None]).squeeze(-1)
        return rotated * self.scale[..., None]

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def batch_shape(self) -> Tuple[int, ...]:
        """Get batch dimensions."""
        return tuple(self.rotation.shape[:-2])

    @property
    def is_batched(self) -> bool:
        """Check if transform has batch dimensions."""
        return len(self.batch_shape) > 0

    @property
    def device(self):
        """Get device (for PyTorch tensors)."""
        if self.backend == "torch":
            return self.rotation.device
        return None

    @property
    def dtype(self):
        """Get data type."""
        return self.rotation.dtype

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def to(self, device=None, dtype=None) -> "Transform":
        """Move transform to device/dtype (PyTorch only)."""
        if self.backend != "torch":
            raise ValueError("to() is only supported for PyTorch tensors")

        return Transform(
            rotation=self.rotation.to(device=device, dtype=dtype),
            translation=self.translation.to(device=device, dtype=dtype),
            scale=self.scale.to(device=device, dtype=dtype),
        )

    def clone(self) -> "Transform":
        """Create an independent copy of the transform."""
        return Transform(rotation=self.rotation, translation=self.translation, scale=self.scale)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"Transform(backend={self.backend}, "
            f"batch_shape={self.batch_shape}, "
            f"dtype={self.dtype})"
        )

    def __getitem__(self, idx) -> "Transform":
        """Index into batched transforms."""
        scale = self.scale[idx] if self.scale.ndim > 0 else self.scale
        return Transform(
            rotation=self.rotation[idx],
            translation=self.translation[idx],
            scale=scale,
        )
