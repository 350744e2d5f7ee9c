"""Filter bank analysis helpers."""

from __future__ import annotations

from typing import Any

import numpy as np

from isowave.systems.filter_bank import FilterSet
from isowave.wavelets import IsotropicWaveletFunction


def partition_of_unity_error(filter_set: FilterSet) -> float:
    """Largest deviation of ``sum(mask**2)`` from one over the grid.

    Only meaningful for forward sets; an inverse set of a tight bank gives
    the same masks and therefore the same value.
    """
    total = sum(np.abs(mask) ** 2 for mask in filter_set.masks)
    return float(np.max(np.abs(total - 1.0)))


def compare_filter_sets(
    a: FilterSet, b: FilterSet, atol: float = 1e-12
) -> int:
    """Count samples where two sets differ by more than ``atol``.

    Every mask is compared; sets of different shape or band count differ
    everywhere.
    """
    if len(a) != len(b) or a.size != b.size:
        return sum(mask.size for mask in a.masks) + sum(mask.size for mask in b.masks)
    return int(
        sum(
            np.count_nonzero(np.abs(mask_a - mask_b) > atol)
            for mask_a, mask_b in zip(a.masks, b.masks)
        )
    )


def radial_profile(
    wavelet: IsotropicWaveletFunction, samples: int = 257
) -> dict[str, Any]:
    """Tabulate every branch of a wavelet over ``[0, 1/2]``.

    Returns:
        Dictionary with ``frequency``, ``low_pass``, ``high_pass``,
        ``mother`` arrays and ``sub_bands``, a list of K arrays
    """
    if samples < 2:
        raise ValueError(f"samples must be >= 2, got {samples}")
    w = np.linspace(0.0, 0.5, samples)
    return {
        "frequency": w,
        "low_pass": np.asarray(wavelet.evaluate_low_pass(w)),
        "high_pass": np.asarray(wavelet.evaluate_high_pass(w)),
        "mother": np.asarray(wavelet.evaluate_magnitude(w)),
        "sub_bands": wavelet.evaluate_sub_bands(w),
    }
