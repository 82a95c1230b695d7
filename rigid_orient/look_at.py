"""
Look-at transform construction.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Tuple, Union

import numpy as np
import torch

from ._core import (
    ArrayLike,
    Axis,
    EPS,
    LOOK_AT_PARALLEL_EPS,
    VectorLike,
    abs_,
    any_,
    as_array,
    check_last_dim,
    cross,
    like,
    norm,
    normalize,
    ones_like,
    stack,
    where,
    zeros_like,
)
from .transform import Transform

logger = logging.getLogger(__name__)

_WORLD_UP = (0.0, 0.0, 1.0)
_FALLBACK_UP = (1.0, 0.0, 0.0)

Basis = Tuple[ArrayLike, ArrayLike, ArrayLike]

# (right, forward, up) -> rotation columns; every mapping keeps det = +1
_LOOK_AT_COLUMNS: Dict[Axis, Callable[[ArrayLike, ArrayLike, ArrayLike], Basis]] = {
    Axis.X_POSITIVE: lambda r, f, u: (f, -r, u),
    Axis.X_NEGATIVE: lambda r, f, u: (-f, r, u),
    Axis.Y_POSITIVE: lambda r, f, u: (r, f, u),
    Axis.Y_NEGATIVE: lambda r, f, u: (-r, -f, u),
    Axis.Z_POSITIVE: lambda r, f, u: (r, -u, f),
    Axis.Z_NEGATIVE: lambda r, f, u: (r, u, -f),
}


def create_look_at(
    from_: VectorLike,
    to: VectorLike,
    forward_axis: Union[str, Axis] = Axis.Y_POSITIVE,
    eps: float = EPS,
) -> Transform:
    """
    Create a transform at ``from_`` whose local ``forward_axis`` points at ``to``.

    World +Z is the reference up direction. When the look direction is (nearly)
    parallel to it, world +X is used as the reference instead. The other two local
    axes are chosen so the rotation stays orthonormal and right-handed for every
    choice of ``forward_axis``.

    Args:
        from_: Source position (..., 3), world space
        to: Target position (..., 3), world space
        forward_axis: Local axis that should point at the target (default +Y)
        eps: Look distance below which the rotation falls back to identity

    Returns:
        Transform positioned at ``from_`` with unit scale. If ``from_`` and ``to``
        coincide the rotation is identity.
    """
    forward_axis = Axis(forward_axis)

    from_ = as_array(from_)
    to = as_array(to)
    if isinstance(to, torch.Tensor) and not isinstance(from_, torch.Tensor):
        from_ = like(from_, to)
    else:
        to = like(to, from_)
    check_last_dim(from_, 3, "from_")
    check_last_dim(to, 3, "to")

    direction = to - from_
    length = norm(direction, keepdim=True)
    degenerate = length < eps
    forward = direction / where(degenerate, ones_like(length), length)

    # forward . (0, 0, 1), kept as (..., 1)
    parallel = abs_(forward[..., 2:3]) > 1.0 - LOOK_AT_PARALLEL_EPS
    up_ref = where(parallel, like(_FALLBACK_UP, forward), like(_WORLD_UP, forward))

    right = normalize(cross(forward, up_ref), eps=eps)
    up = normalize(cross(right, forward), eps=eps)

    rotation = stack(list(_LOOK_AT_COLUMNS[forward_axis](right, forward, up)), dim=-1)

    if any_(degenerate):
        logger.debug("Look-at source and target coincide; using identity rotation")
        rotation = where(degenerate[..., None], like(np.eye(3), rotation), rotation)
    elif any_(parallel):
        logger.debug("Look-at direction is parallel to world up; using world X as reference")

    return Transform(rotation=rotation, translation=from_ + zeros_like(direction))
