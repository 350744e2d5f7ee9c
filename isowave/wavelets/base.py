"""Base class for radial (isotropic) wavelet functions in the frequency domain.

Frequencies are expressed in cycles per sample: ``0`` is DC and ``0.5`` the
Nyquist frequency of one axis. The isotropic magnitude of an N-dimensional
sample is the Euclidean norm of its per-axis frequencies, so it can reach
``sqrt(N) / 2`` in the corners of the spectrum; every branch stays finite
there.

A variant only supplies its transition profile ``_profile(t)``, a function
falling from 1 to 0 as ``t`` runs over ``[0, 1]``. With ``s`` the scale
factor the profile is laid over the band ``[1/(2 s^2), 1/(2 s)]``
(``[1/8, 1/4]`` for dyadic pyramids) in logarithmic coordinates,
``t = log_s(2 s^2 w)``. Everything else is derived:

- low-pass: 1 below the band, ``_profile(t)`` inside, 0 above. Its support
  ends at ``1/(2 s)``, so the low-pass band survives decimation by ``s``.
- high-pass: ``sqrt(1 - low^2)``.
- mother wavelet: ``sqrt(low(w / s)^2 - low(w)^2)``, a band-pass spanning
  two scales whose dilations by powers of ``s`` tile the spectrum.
- sub-bands: the high-pass split into ``K`` slices, each shifted by
  ``1/K`` of a scale in log-frequency. Low-pass and sub-bands always sum
  to one in square, which is what makes the filter bank invertible.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import ClassVar

import numpy as np

from isowave.core.geometry import validate_scale_factor, validate_sub_bands
from isowave.errors import IndexOutOfRange

# Samples within rounding distance of the low-pass cutoff count as stop band.
_EDGE_RTOL = 1e-12


def _as_output(values: np.ndarray) -> np.ndarray | float:
    return values if values.ndim else float(values)


@dataclass(frozen=True)
class IsotropicWaveletFunction(ABC):
    """Radial frequency response shared by every level of a transform.

    Attributes:
        high_pass_sub_bands: Number of high-pass sub-bands K the high-pass
            branch is split into
        scale_factor: Ratio between consecutive pyramid levels
    """

    name: ClassVar[str] = ""

    high_pass_sub_bands: int = 1
    scale_factor: float = 2.0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "high_pass_sub_bands", validate_sub_bands(self.high_pass_sub_bands)
        )
        object.__setattr__(self, "scale_factor", validate_scale_factor(self.scale_factor))

    @abstractmethod
    def _profile(self, t: np.ndarray) -> np.ndarray:
        """Low-pass transition on ``t`` in ``(0, 1)``, from 1 down to 0."""

    @property
    def transition_band(self) -> tuple[float, float]:
        """Frequencies where the low-pass branch falls from 1 to 0."""
        return 0.5 / self.scale_factor**2, 0.5 / self.scale_factor

    def with_sub_bands(self, high_pass_sub_bands: int) -> IsotropicWaveletFunction:
        """Copy of this wavelet aware of a different number of sub-bands."""
        return replace(self, high_pass_sub_bands=high_pass_sub_bands)

    def evaluate_low_pass(self, frequency: np.ndarray | float) -> np.ndarray | float:
        """Low-pass branch; 1 at DC, 0 from ``1 / (2 * scale_factor)`` up."""
        w = np.abs(np.asarray(frequency, dtype=np.float64))
        lower, upper = self.transition_band
        response = np.where(w <= lower, 1.0, 0.0)
        inside = (w > lower) & (w < upper * (1 - _EDGE_RTOL))
        if np.any(inside):
            t = np.log(w[inside] / lower) / np.log(self.scale_factor)
            response[inside] = np.clip(self._profile(t), 0.0, 1.0)
        return _as_output(response)

    def evaluate_high_pass(self, frequency: np.ndarray | float) -> np.ndarray | float:
        """High-pass branch, the complement in square of the low-pass."""
        low = np.asarray(self.evaluate_low_pass(frequency))
        return _as_output(np.sqrt(np.clip(1.0 - low**2, 0.0, 1.0)))

    def evaluate_magnitude(self, frequency: np.ndarray | float) -> np.ndarray | float:
        """Mother wavelet response; vanishes at DC and above Nyquist."""
        w = np.abs(np.asarray(frequency, dtype=np.float64))
        coarse = np.asarray(self.evaluate_low_pass(w / self.scale_factor))
        fine = np.asarray(self.evaluate_low_pass(w))
        return _as_output(np.sqrt(np.clip(coarse**2 - fine**2, 0.0, 1.0)))

    __call__ = evaluate_magnitude

    def _dilated_low_pass(self, w: np.ndarray, shift: int) -> np.ndarray:
        # Low-pass with its cutoff moved up by shift / K of a scale.
        factor = self.scale_factor ** (-shift / self.high_pass_sub_bands)
        return np.asarray(self.evaluate_low_pass(w * factor))

    def evaluate_sub_band(
        self, frequency: np.ndarray | float, band: int
    ) -> np.ndarray | float:
        """Band-limited high-pass response of sub-band ``band`` (1-based).

        Raises:
            IndexOutOfRange: If ``band`` is not in ``[1, high_pass_sub_bands]``
        """
        if not 1 <= band <= self.high_pass_sub_bands:
            raise IndexOutOfRange(
                f"sub-band {band} out of range [1, {self.high_pass_sub_bands}]"
            )
        w = np.abs(np.asarray(frequency, dtype=np.float64))
        below = self._dilated_low_pass(w, band - 1)
        if band == self.high_pass_sub_bands:
            above = np.ones_like(below)
        else:
            above = self._dilated_low_pass(w, band)
        return _as_output(np.sqrt(np.clip(above**2 - below**2, 0.0, 1.0)))

    def evaluate_sub_bands(self, frequency: np.ndarray | float) -> list[np.ndarray]:
        """All K sub-band responses, sharing the dilated low-pass evaluations."""
        w = np.abs(np.asarray(frequency, dtype=np.float64))
        edges = [
            self._dilated_low_pass(w, shift)
            for shift in range(self.high_pass_sub_bands)
        ]
        edges.append(np.ones_like(edges[0]))
        return [
            np.sqrt(np.clip(edges[k] ** 2 - edges[k - 1] ** 2, 0.0, 1.0))
            for k in range(1, len(edges))
        ]
