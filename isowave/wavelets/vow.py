"""Vow isotropic wavelet (Papadakis et al.).

The squared transition is built from a tangent, ``kappa`` controlling how
sharp the roll-off is: small values approach a linear ramp in square,
values close to ``pi / 2`` approach a brick wall.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from isowave.errors import ConfigurationError
from isowave.wavelets.base import IsotropicWaveletFunction


@dataclass(frozen=True)
class VowIsotropicWavelet(IsotropicWaveletFunction):
    """Vow wavelet, ``low(t)^2 = 1/2 - tan(kappa (2t - 1)) / (2 tan kappa)``.

    Attributes:
        kappa: Sharpness, strictly between 0 and pi/2 (default 0.75)
    """

    name: ClassVar[str] = "vow"

    kappa: float = 0.75

    def __post_init__(self) -> None:
        super().__post_init__()
        if not 0.0 < self.kappa < 0.5 * np.pi:
            raise ConfigurationError(f"kappa must be in (0, pi/2), got {self.kappa}")
        object.__setattr__(self, "kappa", float(self.kappa))

    def _profile(self, t: np.ndarray) -> np.ndarray:
        squared = 0.5 - np.tan(self.kappa * (2.0 * t - 1.0)) / (2.0 * np.tan(self.kappa))
        return np.sqrt(np.clip(squared, 0.0, 1.0))
