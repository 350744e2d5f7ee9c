"""Scale-factor arithmetic for pyramid levels.

Every level of a pyramid divides the extent of each axis by the scale
factor (floor rounding, applied one level at a time), multiplies the
spacing by it and keeps the origin. Output ``i`` of a pyramid with ``L``
levels and ``K`` high-pass sub-bands lives at level ``i // K``, band
``i % K``; the final low-pass output sits alone at index ``L * K``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from isowave.errors import ConfigurationError, DimensionMismatch, IndexOutOfRange

_FLOOR_TOL = 1e-9


@dataclass(frozen=True)
class LevelGeometry:
    """Grid of one pyramid level.

    Attributes:
        level: Level number (0 = full resolution)
        size: Extent of each axis
        spacing: Sample spacing, ``base_spacing * scale_factor ** level``
        origin: Sample origin, equal to the base origin
    """

    level: int
    size: tuple[int, ...]
    spacing: tuple[float, ...]
    origin: tuple[float, ...]


def validate_scale_factor(scale_factor: float) -> float:
    if not scale_factor > 1:
        raise ConfigurationError(f"scale_factor must be > 1, got {scale_factor}")
    return float(scale_factor)


def validate_levels(levels: int) -> int:
    if isinstance(levels, bool) or int(levels) != levels or levels < 0:
        raise ConfigurationError(f"levels must be an integer >= 0, got {levels}")
    return int(levels)


def validate_sub_bands(high_pass_sub_bands: int) -> int:
    if (
        isinstance(high_pass_sub_bands, bool)
        or int(high_pass_sub_bands) != high_pass_sub_bands
        or high_pass_sub_bands < 1
    ):
        raise ConfigurationError(
            f"high_pass_sub_bands must be an integer >= 1, got {high_pass_sub_bands}"
        )
    return int(high_pass_sub_bands)


def validate_size(size: Sequence[int]) -> tuple[int, ...]:
    size = tuple(int(extent) for extent in size)
    if not size:
        raise ConfigurationError("size must have at least one axis")
    if any(extent < 1 for extent in size):
        raise ConfigurationError(f"all extents must be >= 1, got {size}")
    return size


def shrink_extent(extent: int, scale_factor: float) -> int:
    """Extent of an axis one level down (floor rounding).

    The quotient is floored with a small tolerance so that ``11 / 1.1``
    gives 10 although ``11 // 1.1`` is 9 in binary floating point.
    """
    return math.floor(extent / scale_factor + _FLOOR_TOL)


def shrink_size(size: Sequence[int], scale_factor: float) -> tuple[int, ...]:
    """Size of the next level down."""
    return tuple(shrink_extent(extent, scale_factor) for extent in size)


def fft_indices(extent: int) -> np.ndarray:
    """Signed frequency index of each sample of an axis, in numpy FFT order.

    ``[0, 1, ..., ceil(n/2) - 1, -floor(n/2), ..., -1]``, the same layout as
    ``np.fft.fftfreq(n) * n``.
    """
    return np.concatenate(
        [np.arange((extent + 1) // 2), np.arange(-(extent // 2), 0)]
    ).astype(np.intp)


def level_size(size: Sequence[int], level: int, scale_factor: float) -> tuple[int, ...]:
    """Size of ``level`` obtained by shrinking ``size`` one level at a time."""
    current = tuple(size)
    for _ in range(level):
        current = shrink_size(current, scale_factor)
    return current


def level_spacing(
    spacing: Sequence[float], level: int, scale_factor: float
) -> tuple[float, ...]:
    factor = scale_factor ** level
    return tuple(float(sp) * factor for sp in spacing)


def pyramid_geometry(
    size: Sequence[int],
    levels: int,
    scale_factor: float = 2.0,
    spacing: Sequence[float] | None = None,
    origin: Sequence[float] | None = None,
) -> list[LevelGeometry]:
    """Geometry of every level ``0..levels`` of a pyramid.

    Args:
        size: Base (level 0) size
        levels: Number of decomposition levels
        scale_factor: Per-level, per-axis shrink factor
        spacing: Base spacing (defaults to 1 per axis)
        origin: Base origin (defaults to 0 per axis)

    Returns:
        ``levels + 1`` LevelGeometry entries; the last one is the grid of
        the final low-pass output

    Raises:
        ConfigurationError: If a level would shrink an axis below one sample
        DimensionMismatch: If spacing or origin length differs from size
    """
    size = validate_size(size)
    levels = validate_levels(levels)
    scale_factor = validate_scale_factor(scale_factor)
    spacing = tuple(spacing) if spacing is not None else (1.0,) * len(size)
    origin = tuple(origin) if origin is not None else (0.0,) * len(size)
    if len(spacing) != len(size) or len(origin) != len(size):
        raise DimensionMismatch(
            f"spacing {spacing} and origin {origin} must match the {len(size)} axes of {size}"
        )

    geometry = []
    current = size
    for level in range(levels + 1):
        if level > 0:
            current = shrink_size(current, scale_factor)
            if min(current) < 1:
                raise ConfigurationError(
                    f"levels={levels} shrinks size {size} below one sample at level "
                    f"{level} (scale_factor={scale_factor})"
                )
        geometry.append(
            LevelGeometry(
                level=level,
                size=current,
                spacing=level_spacing(spacing, level, scale_factor),
                origin=tuple(float(o) for o in origin),
            )
        )
    return geometry


def max_levels(size: Sequence[int], scale_factor: float = 2.0) -> int:
    """Deepest level count that keeps every axis at one sample or more."""
    size = validate_size(size)
    scale_factor = validate_scale_factor(scale_factor)
    levels = 0
    current = size
    while min(shrink_size(current, scale_factor)) >= 1:
        current = shrink_size(current, scale_factor)
        levels += 1
    return levels


def total_outputs(levels: int, high_pass_sub_bands: int) -> int:
    """Number of pyramid outputs: one per band per level plus the low-pass."""
    return levels * high_pass_sub_bands + 1


def output_index_to_level_band(
    index: int, levels: int, high_pass_sub_bands: int
) -> tuple[int, int]:
    """Map a flat output index to its ``(level, band)`` pair.

    Raises:
        IndexOutOfRange: If ``index`` is negative or ``>= total_outputs``
    """
    total = total_outputs(levels, high_pass_sub_bands)
    if not 0 <= index < total:
        raise IndexOutOfRange(f"output index {index} out of range [0, {total})")
    if index == total - 1:
        return levels, 0
    return index // high_pass_sub_bands, index % high_pass_sub_bands


def level_band_to_output_index(
    level: int, band: int, levels: int, high_pass_sub_bands: int
) -> int:
    """Inverse of ``output_index_to_level_band``.

    Raises:
        IndexOutOfRange: If the pair does not name an output
    """
    if level == levels and band == 0:
        return levels * high_pass_sub_bands
    if not 0 <= level < levels:
        raise IndexOutOfRange(f"level {level} out of range [0, {levels}]")
    if not 0 <= band < high_pass_sub_bands:
        raise IndexOutOfRange(f"band {band} out of range [0, {high_pass_sub_bands})")
    return level * high_pass_sub_bands + band
