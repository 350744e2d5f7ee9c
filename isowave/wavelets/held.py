"""Held isotropic wavelet.

Held et al. build the transition from a polynomial ``q`` with ``q(0) = 0``,
``q(1) = 1`` and ``q(t) + q(1 - t) = 1``; higher orders give smoother
(more derivatives vanish at the band edges) but steeper responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np
from numpy.polynomial import polynomial

from isowave.errors import ConfigurationError
from isowave.wavelets.base import IsotropicWaveletFunction

# Ascending-power coefficients of q for each supported order.
HELD_POLYNOMIALS: dict[int, tuple[float, ...]] = {
    1: (0.0, 1.0),
    2: (0.0, 0.0, 3.0, -2.0),
    3: (0.0, 0.0, 0.0, 10.0, -15.0, 6.0),
    4: (0.0, 0.0, 0.0, 0.0, 35.0, -84.0, 70.0, -20.0),
    5: (0.0, 0.0, 0.0, 0.0, 0.0, 126.0, -420.0, 540.0, -315.0, 70.0),
}


@dataclass(frozen=True)
class HeldIsotropicWavelet(IsotropicWaveletFunction):
    """Held wavelet, ``low(t) = cos(pi/2 * q(t))``.

    Attributes:
        order: Polynomial order of ``q``, one of 1-5 (default 5)
    """

    name: ClassVar[str] = "held"

    order: int = 5

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.order not in HELD_POLYNOMIALS:
            raise ConfigurationError(
                f"order must be one of {sorted(HELD_POLYNOMIALS)}, got {self.order}"
            )

    def polynomial(self, t: np.ndarray | float) -> np.ndarray:
        """Evaluate Held's polynomial ``q`` of the configured order."""
        return polynomial.polyval(t, HELD_POLYNOMIALS[self.order])

    def _profile(self, t: np.ndarray) -> np.ndarray:
        return np.cos(0.5 * np.pi * self.polynomial(t))
