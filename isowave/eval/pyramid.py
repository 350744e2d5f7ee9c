"""Energy statistics of wavelet pyramids."""

from __future__ import annotations

import numpy as np

from isowave.components.pyramid import WaveletPyramid
from isowave.core.world import World


def spectral_energy(spectrum: np.ndarray) -> float:
    """Spatial-domain energy of a spectrum (Parseval, numpy FFT scaling)."""
    if spectrum.size == 0:
        return 0.0
    return float(np.sum(np.abs(spectrum) ** 2) / spectrum.size)


def band_energies(world: World, pyramid: WaveletPyramid) -> list[float]:
    """Spatial energy of every pyramid output, in output order."""
    return [spectral_energy(world.arena.view(band.data)) for band in pyramid.bands]


def energy_fractions(energies: list[float]) -> np.ndarray:
    """Normalize energies so they sum to one (all zeros stay zeros)."""
    values = np.asarray(energies, dtype=np.float64)
    total = values.sum()
    if total <= 0:
        return np.zeros_like(values)
    return values / total
