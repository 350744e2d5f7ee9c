"""Shannon isotropic wavelet: ideal (brick-wall) band splitting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from isowave.wavelets.base import IsotropicWaveletFunction


@dataclass(frozen=True)
class ShannonIsotropicWavelet(IsotropicWaveletFunction):
    """Shannon wavelet; the low-pass is 1 up to ``1 / (2 s)`` and 0 beyond.

    Masks only take the values 0 and 1, so each frequency sample belongs
    to exactly one band.
    """

    name: ClassVar[str] = "shannon"

    def _profile(self, t: np.ndarray) -> np.ndarray:
        return np.ones_like(t)
