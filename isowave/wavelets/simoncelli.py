"""Simoncelli isotropic wavelet: a raised cosine in log-frequency."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from isowave.wavelets.base import IsotropicWaveletFunction


@dataclass(frozen=True)
class SimoncelliIsotropicWavelet(IsotropicWaveletFunction):
    """Simoncelli wavelet, ``low(t) = cos(pi/2 * t)``."""

    name: ClassVar[str] = "simoncelli"

    def _profile(self, t: np.ndarray) -> np.ndarray:
        return np.cos(0.5 * np.pi * t)
