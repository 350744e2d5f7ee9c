"""Multiresolution isotropic wavelet transform in the frequency domain.

Each forward level multiplies the current spectrum by the masks of a
filter bank sized to it. The K high-pass products become outputs of the
pyramid; the low-pass product is shrunk by the scale factor and feeds the
next level. The inverse walks the levels back, expanding the running
low-pass and adding the dual-filtered high-pass bands.

Forward mode: Spectrum → WaveletPyramid
Inverse mode: WaveletPyramid → ReconSpectrum
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Literal, Sequence

import numpy as np

from isowave.components.pyramid import WaveletPyramid
from isowave.components.spectrum import ReconSpectrum, Spectrum
from isowave.core.geometry import (
    LevelGeometry,
    fft_indices,
    pyramid_geometry,
    shrink_size,
    total_outputs,
    validate_levels,
    validate_sub_bands,
)
from isowave.core.system import System
from isowave.errors import (
    ConfigurationError,
    DimensionMismatch,
    TransformCancelled,
)
from isowave.systems.filter_bank import WaveletFrequencyFilterBankGenerator
from isowave.wavelets import IsotropicWaveletFunction, make_wavelet

if TYPE_CHECKING:
    from isowave.core.world import World

logger = logging.getLogger(__name__)


def _kept_indices(size: Sequence[int], shrunk: Sequence[int]) -> tuple[np.ndarray, ...]:
    return np.ix_(*(fft_indices(m) % n for n, m in zip(size, shrunk)))


def shrink_spectrum(spectrum: np.ndarray, size: Sequence[int]) -> np.ndarray:
    """Keep the lowest frequencies of ``spectrum`` that fit in ``size``.

    The result is scaled by the ratio of sample counts, so its inverse FFT
    is the decimation of the band-limited signal.
    """
    size = tuple(size)
    if len(size) != spectrum.ndim:
        raise DimensionMismatch(f"cannot shrink {spectrum.shape} to {size}")
    ratio = np.prod(size, dtype=np.float64) / np.prod(spectrum.shape, dtype=np.float64)
    return spectrum[_kept_indices(spectrum.shape, size)] * ratio


def expand_spectrum(spectrum: np.ndarray, size: Sequence[int]) -> np.ndarray:
    """Zero-pad ``spectrum`` to ``size``; exact inverse of ``shrink_spectrum``."""
    size = tuple(size)
    if len(size) != spectrum.ndim:
        raise DimensionMismatch(f"cannot expand {spectrum.shape} to {size}")
    ratio = np.prod(size, dtype=np.float64) / np.prod(spectrum.shape, dtype=np.float64)
    expanded = np.zeros(size, dtype=np.complex128)
    expanded[_kept_indices(size, spectrum.shape)] = spectrum * ratio
    return expanded


@dataclass(frozen=True, eq=False)
class LevelContext:
    """Spectrum entering one level of the transform, with its grid."""

    level: int
    size: tuple[int, ...]
    spacing: tuple[float, ...]
    origin: tuple[float, ...]
    spectrum: np.ndarray


def _multiply(
    spectra: Sequence[np.ndarray], masks: Sequence[np.ndarray], workers: int
) -> list[np.ndarray]:
    if workers > 1 and len(masks) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(np.multiply, spectra, masks))
    return [spectrum * mask for spectrum, mask in zip(spectra, masks)]


def _apply_masks(
    spectrum: np.ndarray, masks: Sequence[np.ndarray], workers: int
) -> list[np.ndarray]:
    return _multiply([spectrum] * len(masks), masks, workers)


def _decompose_level(
    context: LevelContext,
    next_geometry: LevelGeometry,
    generator: WaveletFrequencyFilterBankGenerator,
    workers: int,
) -> tuple[list[LevelContext], LevelContext]:
    filter_set = generator.generate(context.size)
    filtered = _apply_masks(context.spectrum, filter_set.masks, workers)
    bands = [
        LevelContext(
            level=context.level,
            size=context.size,
            spacing=context.spacing,
            origin=context.origin,
            spectrum=band,
        )
        for band in filtered[1:]
    ]
    next_context = LevelContext(
        level=next_geometry.level,
        size=next_geometry.size,
        spacing=next_geometry.spacing,
        origin=next_geometry.origin,
        spectrum=shrink_spectrum(filtered[0], next_geometry.size),
    )
    return bands, next_context


def decompose_spectrum(
    spectrum: np.ndarray,
    levels: int,
    wavelet: IsotropicWaveletFunction,
    spacing: Sequence[float] | None = None,
    origin: Sequence[float] | None = None,
    workers: int = 1,
    should_stop: Callable[[], bool] | None = None,
) -> list[LevelContext]:
    """Split a spectrum into ``levels * K + 1`` bands.

    Args:
        spectrum: Complex spectrum in numpy FFT order
        levels: Number of levels L (0 returns the input alone)
        wavelet: Wavelet function; its ``high_pass_sub_bands`` sets K
        spacing: Base sample spacing (default 1 per axis)
        origin: Base origin (default 0 per axis)
        workers: Threads used for mask sampling and application
        should_stop: Polled between levels; returning True cancels

    Returns:
        One LevelContext per output, in output order

    Raises:
        ConfigurationError: If ``levels`` shrinks an axis below one sample
        DimensionMismatch: If spacing/origin do not match the rank
        TransformCancelled: If ``should_stop`` returned True
    """
    spectrum = np.asarray(spectrum, dtype=np.complex128)
    geometry = pyramid_geometry(
        spectrum.shape, levels, wavelet.scale_factor, spacing, origin
    )
    generator = WaveletFrequencyFilterBankGenerator(
        wavelet=wavelet,
        high_pass_sub_bands=wavelet.high_pass_sub_bands,
        workers=workers,
    )

    context = LevelContext(
        level=0,
        size=geometry[0].size,
        spacing=geometry[0].spacing,
        origin=geometry[0].origin,
        spectrum=spectrum,
    )
    outputs: list[LevelContext] = []
    for level in range(levels):
        if should_stop is not None and should_stop():
            raise TransformCancelled(f"decomposition cancelled before level {level}")
        logger.debug(
            "Level %d: size=%s, spacing=%s", level, context.size, context.spacing
        )
        bands, context = _decompose_level(
            context, geometry[level + 1], generator, workers
        )
        outputs.extend(bands)
    outputs.append(context)

    if levels > 0 and min(context.size) == 1:
        logger.warning(
            "Decomposition of %s with %d levels reaches size %s",
            spectrum.shape,
            levels,
            context.size,
        )
    return outputs


def reconstruct_spectrum(
    bands: Sequence[np.ndarray],
    levels: int,
    wavelet: IsotropicWaveletFunction,
    workers: int = 1,
    should_stop: Callable[[], bool] | None = None,
) -> np.ndarray:
    """Rebuild the full-resolution spectrum from pyramid bands.

    Args:
        bands: Band spectra in output order, as returned by the forward
        levels: Number of levels L the bands were produced with
        wavelet: Wavelet function of the forward transform

    Raises:
        ConfigurationError: If the band count is not ``levels * K + 1``
        DimensionMismatch: If band ranks or sizes are inconsistent
        TransformCancelled: If ``should_stop`` returned True
    """
    levels = validate_levels(levels)
    k = wavelet.high_pass_sub_bands
    expected = total_outputs(levels, k)
    if len(bands) != expected:
        raise ConfigurationError(
            f"expected {expected} bands for levels={levels}, "
            f"high_pass_sub_bands={k}, got {len(bands)}"
        )
    bands = [np.asarray(band, dtype=np.complex128) for band in bands]
    if len({band.ndim for band in bands}) != 1:
        raise DimensionMismatch(
            f"bands have different ranks: {[band.ndim for band in bands]}"
        )

    generator = WaveletFrequencyFilterBankGenerator(
        wavelet=wavelet,
        high_pass_sub_bands=k,
        inverse_bank=True,
        workers=workers,
    )
    current = bands[-1]
    for level in range(levels - 1, -1, -1):
        if should_stop is not None and should_stop():
            raise TransformCancelled(f"reconstruction cancelled at level {level}")
        level_bands = bands[level * k : (level + 1) * k]
        size = level_bands[0].shape
        if any(band.shape != size for band in level_bands):
            raise DimensionMismatch(
                f"level {level} bands have different sizes: "
                f"{[band.shape for band in level_bands]}"
            )
        if shrink_size(size, wavelet.scale_factor) != current.shape:
            raise DimensionMismatch(
                f"level {level + 1} has size {current.shape}, expected "
                f"{shrink_size(size, wavelet.scale_factor)} from level size {size}"
            )
        logger.debug("Reconstructing level %d: size=%s", level, size)

        masks = generator.generate(size).masks
        filtered = _multiply(
            [expand_spectrum(current, size), *level_bands], masks, workers
        )
        current = filtered[0]
        for band in filtered[1:]:
            current += band
    return current


class WaveletFrequencyForward(System):
    """Isotropic wavelet pyramid of a spectrum.

    Forward mode: Spectrum → WaveletPyramid
    Inverse mode: WaveletPyramid → ReconSpectrum

    Every run recomputes the pyramid from the current configuration and
    replaces the entity's previous result.
    """

    def __init__(
        self,
        levels: int = 3,
        high_pass_sub_bands: int | None = None,
        wavelet: str | IsotropicWaveletFunction = "held",
        scale_factor: float | None = None,
        dimension: int | None = None,
        workers: int = 1,
        mode: Literal["forward", "inverse"] = "forward",
        **wavelet_params: Any,
    ):
        """Initialize the wavelet transform system.

        Args:
            levels: Number of decomposition levels L (>= 0)
            high_pass_sub_bands: High-pass sub-bands per level K (>= 1),
                overriding the wavelet's own (1 unless set on an instance)
            wavelet: Wavelet name or instance
            scale_factor: Per-level shrink factor (> 1), overriding the
                wavelet's own (2 unless set on an instance)
            dimension: Expected spectrum rank, checked on every run
            workers: Threads used for mask sampling and application
            mode: 'forward' for decomposition, 'inverse' for reconstruction
            **wavelet_params: Variant parameters (``order``, ``kappa``)

        Raises:
            ConfigurationError: For any invalid parameter
        """
        super().__init__(mode=mode)
        params = dict(wavelet_params)
        if scale_factor is not None:
            params["scale_factor"] = scale_factor
        if high_pass_sub_bands is not None:
            params["high_pass_sub_bands"] = validate_sub_bands(high_pass_sub_bands)
        self._wavelet = make_wavelet(wavelet, **params)
        self.levels = levels
        if dimension is not None and dimension < 1:
            raise ConfigurationError(f"dimension must be >= 1, got {dimension}")
        self.dimension = dimension
        if workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {workers}")
        self.workers = workers

    @property
    def levels(self) -> int:
        return self._levels

    @levels.setter
    def levels(self, value: int) -> None:
        self._levels = validate_levels(value)

    @property
    def high_pass_sub_bands(self) -> int:
        return self._wavelet.high_pass_sub_bands

    @high_pass_sub_bands.setter
    def high_pass_sub_bands(self, value: int) -> None:
        self._wavelet = self._wavelet.with_sub_bands(validate_sub_bands(value))

    @property
    def wavelet(self) -> IsotropicWaveletFunction:
        return self._wavelet

    @property
    def scale_factor(self) -> float:
        return self._wavelet.scale_factor

    @property
    def total_outputs(self) -> int:
        return total_outputs(self.levels, self.high_pass_sub_bands)

    def required_components(self) -> list[type]:
        """Return required component types based on mode."""
        if self.mode == "forward":
            return [Spectrum]
        else:
            return [WaveletPyramid]

    def produced_components(self) -> list[type]:
        """Return produced component types based on mode."""
        if self.mode == "forward":
            return [WaveletPyramid]
        else:
            return [ReconSpectrum]

    def run(self, world: World, eids: list[int]) -> None:
        """Execute the transform on entities.

        Args:
            world: World containing entities
            eids: List of entity IDs to process
        """
        if self.mode == "forward":
            self._run_forward(world, eids)
        else:
            self._run_inverse(world, eids)

    def _check_dimension(self, ndim: int, eid: int) -> None:
        if self.dimension is not None and ndim != self.dimension:
            raise DimensionMismatch(
                f"{self.__class__.__name__} configured for dimension "
                f"{self.dimension}, entity {eid} has {ndim} axes"
            )

    def _run_forward(self, world: World, eids: list[int]) -> None:
        """Forward decomposition: Spectrum → WaveletPyramid."""
        for eid in eids:
            spectrum = world.get_component(eid, Spectrum)
            self._check_dimension(spectrum.ndim, eid)

            outputs = decompose_spectrum(
                world.arena.view(spectrum.data),
                self.levels,
                self._wavelet,
                spacing=spectrum.spacing,
                origin=spectrum.origin,
                workers=self.workers,
            )
            bands = [
                Spectrum(
                    data=world.arena.copy_array(output.spectrum),
                    spacing=output.spacing,
                    origin=output.origin,
                )
                for output in outputs
            ]
            pyramid = WaveletPyramid(
                bands=bands,
                levels=self.levels,
                high_pass_sub_bands=self.high_pass_sub_bands,
                scale_factor=self.scale_factor,
                wavelet=self._wavelet.name,
            )
            world.add_component(eid, pyramid)
            logger.info(
                "Decomposed entity %d: %s into %d outputs (levels=%d, K=%d, %s)",
                eid,
                spectrum.size,
                len(bands),
                self.levels,
                self.high_pass_sub_bands,
                self._wavelet.name,
            )

    def _run_inverse(self, world: World, eids: list[int]) -> None:
        """Inverse reconstruction: WaveletPyramid → ReconSpectrum."""
        for eid in eids:
            pyramid = world.get_component(eid, WaveletPyramid)
            self._check_pyramid(pyramid)
            self._check_dimension(pyramid.bands[0].ndim, eid)

            data = reconstruct_spectrum(
                [world.arena.view(band.data) for band in pyramid.bands],
                self.levels,
                self._wavelet,
                workers=self.workers,
            )
            base = pyramid.bands[0]
            world.add_component(
                eid,
                ReconSpectrum(
                    data=world.arena.copy_array(data),
                    spacing=base.spacing,
                    origin=base.origin,
                ),
            )
            logger.info(
                "Reconstructed entity %d: %d outputs into %s",
                eid,
                len(pyramid.bands),
                data.shape,
            )

    def _check_pyramid(self, pyramid: WaveletPyramid) -> None:
        mismatches = [
            f"{name}: pyramid {theirs!r}, system {ours!r}"
            for name, theirs, ours in (
                ("levels", pyramid.levels, self.levels),
                ("high_pass_sub_bands", pyramid.high_pass_sub_bands, self.high_pass_sub_bands),
                ("scale_factor", pyramid.scale_factor, self.scale_factor),
                ("wavelet", pyramid.wavelet, self._wavelet.name),
            )
            if theirs != ours
        ]
        if mismatches:
            raise ConfigurationError(
                "pyramid was produced with a different configuration: "
                + "; ".join(mismatches)
            )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(levels={self.levels}, "
            f"high_pass_sub_bands={self.high_pass_sub_bands}, "
            f"wavelet={self._wavelet.name!r}, mode={self.mode})"
        )


class WaveletFrequencyInverse(WaveletFrequencyForward):
    """Reconstruction counterpart of WaveletFrequencyForward.

    Inverse mode: WaveletPyramid → ReconSpectrum
    """

    def __init__(
        self,
        levels: int = 3,
        high_pass_sub_bands: int | None = None,
        wavelet: str | IsotropicWaveletFunction = "held",
        scale_factor: float | None = None,
        dimension: int | None = None,
        workers: int = 1,
        mode: Literal["forward", "inverse"] = "inverse",
        **wavelet_params: Any,
    ):
        super().__init__(
            levels=levels,
            high_pass_sub_bands=high_pass_sub_bands,
            wavelet=wavelet,
            scale_factor=scale_factor,
            dimension=dimension,
            workers=workers,
            mode=mode,
            **wavelet_params,
        )
