"""Isotropic wavelet pyramids in the frequency domain, with ECS architecture.

This package provides a multiresolution isotropic wavelet transform for
N-dimensional images:
- Radial wavelet functions (Held, Vow, Simoncelli, Shannon)
- Tight frequency-domain filter banks with any number of high-pass sub-bands
- Forward/inverse pyramids with lossless reconstruction
- Entity-Component-System (ECS) architecture with Arena-backed arrays

Quick Start:
    >>> from isowave import decompose, reconstruct
    >>> import numpy as np
    >>>
    >>> img = np.random.rand(64, 64, 64)
    >>> bands = decompose(img, levels=2, high_pass_sub_bands=4, wavelet="held")
    >>> recon = reconstruct(bands, levels=2, high_pass_sub_bands=4, wavelet="held")

For more control, use the fluent pipeline API:
    >>> from isowave import World, WaveletPyramid
    >>> from isowave.systems.fft import ForwardFFT
    >>> from isowave.systems.wavelet import WaveletFrequencyForward
    >>>
    >>> world = World()
    >>> entity = world.spawn_image(img, spacing=(0.5, 0.5, 1.0))
    >>> pyramid = (
    ...     world.pipe(entity)
    ...     .to(ForwardFFT())
    ...     .to(WaveletFrequencyForward(levels=2, high_pass_sub_bands=4))
    ...     .out(WaveletPyramid)
    ... )
"""

__version__ = "0.1.0"

from isowave.api import decompose, get_decomposition_info, reconstruct
from isowave.components.pyramid import WaveletPyramid
from isowave.core.world import World
from isowave.errors import (
    ConfigurationError,
    DimensionMismatch,
    IndexOutOfRange,
    IsowaveError,
    TransformCancelled,
)
from isowave.wavelets import make_wavelet

__all__ = [
    "__version__",
    "decompose",
    "reconstruct",
    "get_decomposition_info",
    "World",
    "WaveletPyramid",
    "make_wavelet",
    "IsowaveError",
    "ConfigurationError",
    "IndexOutOfRange",
    "DimensionMismatch",
    "TransformCancelled",
]
