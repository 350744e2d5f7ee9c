"""Frequency-domain components: Spectrum, ReconSpectrum."""

from typing import ClassVar

from isowave.components.image import SampledComponent
from isowave.core.arena import ArrayRef


class Spectrum(SampledComponent):
    """Complex N-dimensional spectrum in numpy FFT order (DC at index 0).

    Also used for every band of a wavelet pyramid, where ``spacing`` and
    ``origin`` describe the spatial grid the band inverse-transforms onto.

    Attributes:
        data: ArrayRef to complex128 spectrum
        spacing: Spatial sample spacing of the grid the spectrum came from
        origin: Spatial origin of that grid
    """

    array_field: ClassVar[str] = "data"

    data: ArrayRef


class ReconSpectrum(SampledComponent):
    """Full-resolution spectrum rebuilt from a wavelet pyramid."""

    array_field: ClassVar[str] = "data"

    data: ArrayRef
