"""Isotropic wavelet function family: Held, Vow, Simoncelli, Shannon."""

from __future__ import annotations

from typing import Any

from isowave.errors import ConfigurationError
from isowave.wavelets.base import IsotropicWaveletFunction
from isowave.wavelets.held import HeldIsotropicWavelet
from isowave.wavelets.shannon import ShannonIsotropicWavelet
from isowave.wavelets.simoncelli import SimoncelliIsotropicWavelet
from isowave.wavelets.vow import VowIsotropicWavelet

WAVELETS: dict[str, type[IsotropicWaveletFunction]] = {
    cls.name: cls
    for cls in (
        HeldIsotropicWavelet,
        VowIsotropicWavelet,
        SimoncelliIsotropicWavelet,
        ShannonIsotropicWavelet,
    )
}


def make_wavelet(
    wavelet: str | IsotropicWaveletFunction = "held", **params: Any
) -> IsotropicWaveletFunction:
    """Build a wavelet function from its name and variant parameters.

    Args:
        wavelet: Variant name (case-insensitive) or an existing instance,
            which is copied with ``params`` applied
        **params: ``high_pass_sub_bands``, ``scale_factor`` and the
            variant's own parameters (``order`` for Held, ``kappa`` for Vow)

    Raises:
        ConfigurationError: For an unknown name or an invalid parameter

    Example:
        >>> make_wavelet("vow", kappa=0.5, high_pass_sub_bands=2)
        VowIsotropicWavelet(high_pass_sub_bands=2, scale_factor=2.0, kappa=0.5)
    """
    if isinstance(wavelet, IsotropicWaveletFunction):
        cls: type[IsotropicWaveletFunction] = type(wavelet)
        params = {**vars(wavelet), **params}
    else:
        try:
            cls = WAVELETS[wavelet.lower()]
        except KeyError as e:
            raise ConfigurationError(
                f"Unknown wavelet {wavelet!r}, expected one of {sorted(WAVELETS)}"
            ) from e
    try:
        return cls(**params)
    except TypeError as e:
        raise ConfigurationError(f"Invalid parameters for {cls.__name__}: {e}") from e


__all__ = [
    "WAVELETS",
    "IsotropicWaveletFunction",
    "HeldIsotropicWavelet",
    "VowIsotropicWavelet",
    "SimoncelliIsotropicWavelet",
    "ShannonIsotropicWavelet",
    "make_wavelet",
]
