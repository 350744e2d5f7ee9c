"""High-level API for isotropic wavelet decomposition and reconstruction.

Provides decompose() and reconstruct() functions that run the complete
FFT → wavelet pyramid → inverse FFT pipeline on spatial arrays.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from isowave.components.image import ReconImage
from isowave.components.pyramid import WaveletPyramid
from isowave.components.spectrum import ReconSpectrum, Spectrum
from isowave.core.config import TransformConfig, load_config
from isowave.core.geometry import (
    output_index_to_level_band,
    pyramid_geometry,
    total_outputs,
    validate_levels,
    validate_sub_bands,
)
from isowave.core.world import World
from isowave.errors import ConfigurationError
from isowave.systems.fft import ForwardFFT, InverseFFT
from isowave.systems.wavelet import WaveletFrequencyForward, WaveletFrequencyInverse
from isowave.wavelets import IsotropicWaveletFunction

_ALIGN_SLACK = 64


def _transform_settings(
    levels: int | None,
    high_pass_sub_bands: int | None,
    wavelet: str | IsotropicWaveletFunction | None,
    scale_factor: float | None,
    config_path: str | None,
    wavelet_params: dict[str, Any],
) -> dict[str, Any]:
    """Merge explicit arguments over the loaded configuration.

    A wavelet instance keeps its own scale factor and sub-band count unless
    they are given explicitly.
    """
    config: TransformConfig = load_config(config_path)
    settings: dict[str, Any] = {
        "levels": config.levels if levels is None else levels,
        "workers": config.workers,
        "high_pass_sub_bands": high_pass_sub_bands,
        "scale_factor": scale_factor,
    }
    if not isinstance(wavelet, IsotropicWaveletFunction):
        if wavelet is None:
            wavelet = config.wavelet.name
            wavelet_params = {**config.wavelet.params, **wavelet_params}
        if high_pass_sub_bands is None:
            settings["high_pass_sub_bands"] = config.high_pass_sub_bands
        if scale_factor is None:
            settings["scale_factor"] = config.scale_factor
    return {**settings, "wavelet": wavelet, **wavelet_params}


def _arena_bytes(band_sizes: Sequence[Sequence[int]], image_size: Sequence[int]) -> int:
    """Arena size for one pyramid plus the image-sized buffers around it."""
    band_samples = sum(int(np.prod(size)) for size in band_sizes)
    image_samples = int(np.prod(image_size))
    # complex128 bands, spectrum and recon spectrum; float64 image and recon image
    total = 16 * band_samples + (16 + 16 + 8 + 8) * image_samples
    return total + _ALIGN_SLACK * (len(band_sizes) + 4) + (1 << 16)


def _pyramid_band_sizes(
    shape: Sequence[int], levels: int, high_pass_sub_bands: int, scale_factor: float
) -> list[tuple[int, ...]]:
    geometry = pyramid_geometry(shape, levels, scale_factor)
    return [
        geometry[output_index_to_level_band(index, levels, high_pass_sub_bands)[0]].size
        for index in range(total_outputs(levels, high_pass_sub_bands))
    ]


def decompose(
    image: np.ndarray,
    levels: int | None = None,
    high_pass_sub_bands: int | None = None,
    wavelet: str | IsotropicWaveletFunction | None = None,
    scale_factor: float | None = None,
    spacing: Sequence[float] | None = None,
    origin: Sequence[float] | None = None,
    config_path: str | None = None,
    **wavelet_params: Any,
) -> list[np.ndarray]:
    """Decompose a real N-dimensional image into isotropic wavelet bands.

    Arguments left as None come from ``isowave.toml`` or the built-in
    defaults (3 levels, 1 sub-band, Held wavelet, scale factor 2).
    A wavelet instance keeps its own sub-band count and scale factor
    unless ``high_pass_sub_bands`` or ``scale_factor`` is given.

    Args:
        image: Real array with any number of axes
        levels: Number of decomposition levels L
        high_pass_sub_bands: High-pass sub-bands per level K
        wavelet: 'held', 'vow', 'simoncelli', 'shannon' or an instance
        scale_factor: Per-level shrink factor
        spacing: Physical spacing of the image samples
        origin: Physical origin of the image
        config_path: Path to isowave.toml (auto-detected if None)
        **wavelet_params: Variant parameters (``order``, ``kappa``)

    Returns:
        ``L * K + 1`` real arrays in output order: the K sub-bands of
        level 0, then of level 1, and so on, and the low-pass residual last

    Raises:
        TypeError: If image is not an ndarray
        ConfigurationError: For invalid settings or levels too deep for the image

    Example:
        >>> import numpy as np
        >>> from isowave import decompose, reconstruct
        >>> img = np.random.rand(64, 64)
        >>> bands = decompose(img, levels=2, high_pass_sub_bands=2)
        >>> [b.shape for b in bands]
        [(64, 64), (64, 64), (32, 32), (32, 32), (16, 16)]
        >>> np.allclose(reconstruct(bands, levels=2, high_pass_sub_bands=2), img)
        True
    """
    if not isinstance(image, np.ndarray):
        raise TypeError(f"Expected ndarray, got {type(image)}")

    settings = _transform_settings(
        levels, high_pass_sub_bands, wavelet, scale_factor, config_path, wavelet_params
    )
    forward = WaveletFrequencyForward(**settings)

    band_sizes = _pyramid_band_sizes(
        image.shape, forward.levels, forward.high_pass_sub_bands, forward.scale_factor
    )
    world = World(arena_bytes=_arena_bytes(band_sizes, image.shape))
    try:
        entity = world.spawn_image(image, spacing=spacing, origin=origin)
        pyramid = (
            world.pipe(entity)
            .to(ForwardFFT())
            .to(forward)
            .out(WaveletPyramid)
        )
        return [
            np.fft.ifftn(world.arena.view(band.data)).real.copy()
            for band in pyramid.bands
        ]
    finally:
        world.clear()


def reconstruct(
    coefficients: Sequence[np.ndarray],
    levels: int | None = None,
    high_pass_sub_bands: int | None = None,
    wavelet: str | IsotropicWaveletFunction | None = None,
    scale_factor: float | None = None,
    config_path: str | None = None,
    **wavelet_params: Any,
) -> np.ndarray:
    """Rebuild an image from the output of ``decompose``.

    The settings must match the ones ``decompose`` used.
    As in ``decompose``, a wavelet instance supplies its own sub-band count
    and scale factor by default.

    Raises:
        ConfigurationError: If the number of coefficients is not ``L * K + 1``
        DimensionMismatch: If coefficient shapes do not form a pyramid
    """
    settings = _transform_settings(
        levels, high_pass_sub_bands, wavelet, scale_factor, config_path, wavelet_params
    )
    inverse = WaveletFrequencyInverse(**settings)
    expected = inverse.total_outputs
    if len(coefficients) != expected:
        raise ConfigurationError(
            f"expected {expected} coefficient arrays for levels={inverse.levels}, "
            f"high_pass_sub_bands={inverse.high_pass_sub_bands}, got {len(coefficients)}"
        )

    world = World(
        arena_bytes=_arena_bytes(
            [np.shape(c) for c in coefficients], np.shape(coefficients[0])
        )
    )
    try:
        entity = world.new_entity()
        bands = [
            Spectrum(data=world.arena.copy_array(np.fft.fftn(np.asarray(c)), dtype=np.complex128))
            for c in coefficients
        ]
        world.add_component(
            entity,
            WaveletPyramid(
                bands=bands,
                levels=inverse.levels,
                high_pass_sub_bands=inverse.high_pass_sub_bands,
                scale_factor=inverse.scale_factor,
                wavelet=inverse.wavelet.name,
            ),
        )
        recon = (
            world.pipe(entity)
            .to(inverse)
            .to(InverseFFT(source=ReconSpectrum))
            .out(ReconImage)
        )
        return world.arena.view(recon.pix).copy()
    finally:
        world.clear()


def get_decomposition_info(
    shape: Sequence[int],
    levels: int,
    high_pass_sub_bands: int = 1,
    scale_factor: float = 2.0,
    spacing: Sequence[float] | None = None,
    origin: Sequence[float] | None = None,
) -> list[dict[str, Any]]:
    """Describe every output of a decomposition without computing it.

    Returns:
        One dict per output index with ``index``, ``level``, ``band``,
        ``low_pass``, ``size``, ``spacing`` and ``origin``

    Raises:
        ConfigurationError: If the levels shrink an axis below one sample

    Example:
        >>> info = get_decomposition_info((64, 64, 64), levels=2, high_pass_sub_bands=4)
        >>> len(info), info[8]["size"]
        (9, (16, 16, 16))
    """
    levels = validate_levels(levels)
    high_pass_sub_bands = validate_sub_bands(high_pass_sub_bands)
    geometry = pyramid_geometry(shape, levels, scale_factor, spacing, origin)

    info = []
    for index in range(total_outputs(levels, high_pass_sub_bands)):
        level, band = output_index_to_level_band(index, levels, high_pass_sub_bands)
        grid = geometry[level]
        info.append(
            {
                "index": index,
                "level": level,
                "band": band,
                "low_pass": level == levels,
                "size": grid.size,
                "spacing": grid.spacing,
                "origin": grid.origin,
            }
        )
    return info
