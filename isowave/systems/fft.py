"""FFT adapter systems between the spatial and frequency domains.

The wavelet transform works on spectra in numpy FFT order; these systems
move images in and out of that representation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from isowave.components.image import Image, ReconImage
from isowave.components.spectrum import ReconSpectrum, Spectrum
from isowave.core.system import System
from isowave.errors import ConfigurationError

if TYPE_CHECKING:
    from isowave.core.world import World

logger = logging.getLogger(__name__)


class ForwardFFT(System):
    """N-dimensional forward FFT.

    Forward mode: Image → Spectrum
    """

    def __init__(self) -> None:
        super().__init__(mode="forward")

    def required_components(self) -> list[type]:
        """Return required component types."""
        return [Image]

    def produced_components(self) -> list[type]:
        """Return produced component types."""
        return [Spectrum]

    def run(self, world: World, eids: list[int]) -> None:
        """Transform each entity's image into its spectrum."""
        for eid in eids:
            image = world.get_component(eid, Image)
            spectrum = np.fft.fftn(world.arena.view(image.pix))
            world.add_component(
                eid,
                Spectrum(
                    data=world.arena.copy_array(spectrum, dtype=np.complex128),
                    spacing=image.spacing,
                    origin=image.origin,
                ),
            )
            logger.debug("FFT of entity %d: %s", eid, image.size)


class InverseFFT(System):
    """N-dimensional inverse FFT.

    Inverse mode: Spectrum (or ReconSpectrum) → ReconImage

    The imaginary part is dropped unless ``keep_complex`` is set; spectra of
    real images and of their radial wavelet bands are Hermitian, so it only
    holds rounding noise.
    """

    def __init__(
        self,
        source: type = ReconSpectrum,
        keep_complex: bool = False,
    ):
        """Initialize inverse FFT system.

        Args:
            source: Spectrum component to transform (default: ReconSpectrum)
            keep_complex: Store the complex result instead of its real part
        """
        super().__init__(mode="inverse")
        if source not in (Spectrum, ReconSpectrum):
            raise ConfigurationError(
                f"source must be Spectrum or ReconSpectrum, got {source!r}"
            )
        self.source = source
        self.keep_complex = keep_complex

    def required_components(self) -> list[type]:
        """Return required component types."""
        return [self.source]

    def produced_components(self) -> list[type]:
        """Return produced component types."""
        return [ReconImage]

    def run(self, world: World, eids: list[int]) -> None:
        """Transform each entity's spectrum back to the spatial domain."""
        for eid in eids:
            spectrum = world.get_component(eid, self.source)
            pix = np.fft.ifftn(world.arena.view(spectrum.data))
            if self.keep_complex:
                pix_ref = world.arena.copy_array(pix, dtype=np.complex128)
            else:
                pix_ref = world.arena.copy_array(pix.real, dtype=np.float64)
            world.add_component(
                eid,
                ReconImage(pix=pix_ref, spacing=spectrum.spacing, origin=spectrum.origin),
            )
            logger.debug("Inverse FFT of entity %d: %s", eid, spectrum.size)
