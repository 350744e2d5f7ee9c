"""Filter bank generation: radial wavelet masks sampled on a spectrum grid.

A filter bank holds ``K + 1`` real masks in numpy FFT order: the low-pass
mask first, then the ``K`` high-pass sub-bands. The masks of a forward bank
add up to one in square at every sample; an inverse bank holds the
canonical dual masks ``mask / sum(mask**2)``.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np

from isowave.components.filter_bank import FilterBank
from isowave.components.spectrum import Spectrum
from isowave.core.geometry import (
    fft_indices,
    shrink_extent,
    validate_size,
    validate_sub_bands,
)
from isowave.core.system import System
from isowave.errors import ConfigurationError, DimensionMismatch, IndexOutOfRange
from isowave.wavelets import IsotropicWaveletFunction, make_wavelet

if TYPE_CHECKING:
    from isowave.core.world import World

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class FilterSet:
    """Masks generated for one size.

    Attributes:
        masks: Low-pass mask followed by the K high-pass sub-band masks
        size: Grid the masks were sampled on
        inverse: True for a reconstruction (dual) set
        wavelet: Name of the generating wavelet function
    """

    masks: tuple[np.ndarray, ...]
    size: tuple[int, ...]
    inverse: bool = False
    wavelet: str = ""

    @property
    def low_pass(self) -> np.ndarray:
        return self.masks[0]

    @property
    def high_pass(self) -> tuple[np.ndarray, ...]:
        return self.masks[1:]

    @property
    def high_pass_sub_bands(self) -> int:
        return len(self.masks) - 1

    def __len__(self) -> int:
        return len(self.masks)

    def __getitem__(self, index: int) -> np.ndarray:
        if not 0 <= index < len(self.masks):
            raise IndexOutOfRange(
                f"filter set output {index} out of range [0, {len(self.masks)})"
            )
        return self.masks[index]


def frequency_axes(size: Sequence[int], scale_factor: float) -> list[np.ndarray]:
    """Normalised frequency of every sample along each axis.

    Axis ``i`` of extent ``N`` maps its signed FFT index ``k`` to
    ``k / (s * floor(N / s))``, or ``k / N`` when ``N < s``. The low-pass
    cutoff ``1 / (2 s)`` then falls exactly on the border of the samples a
    shrink by ``s`` keeps.
    """
    axes = []
    for extent in size:
        shrunk = shrink_extent(extent, scale_factor)
        denominator = scale_factor * shrunk if shrunk >= 1 else float(extent)
        axes.append(fft_indices(extent) / denominator)
    return axes


def radial_frequency(axes: Sequence[np.ndarray]) -> np.ndarray:
    """Euclidean norm of the per-axis frequencies over the full grid."""
    grids = np.meshgrid(*axes, indexing="ij", sparse=True)
    squared = sum(g**2 for g in grids)
    return np.sqrt(np.broadcast_to(squared, tuple(len(a) for a in axes)))


def _evaluate(
    wavelet: IsotropicWaveletFunction, w: np.ndarray
) -> list[np.ndarray]:
    return [np.asarray(wavelet.evaluate_low_pass(w))] + wavelet.evaluate_sub_bands(w)


class WaveletFrequencyFilterBankGenerator(System):
    """Generate the low-pass and high-pass masks of one pyramid level.

    Used standalone through ``generate()``, or as a system attaching a
    ``FilterBank`` sized to each entity's ``Spectrum``.

    Forward mode (default): analysis bank
    Inverse mode: dual bank used for reconstruction
    """

    def __init__(
        self,
        wavelet: str | IsotropicWaveletFunction = "held",
        high_pass_sub_bands: int | None = None,
        inverse_bank: bool = False,
        size: Sequence[int] | None = None,
        scale_factor: float | None = None,
        workers: int = 1,
        **wavelet_params: Any,
    ):
        """Initialize the generator.

        Args:
            wavelet: Wavelet name or instance
            high_pass_sub_bands: Number of high-pass sub-bands K (>= 1),
                overriding the wavelet's own
            inverse_bank: Generate the reconstruction bank
            size: Default grid for ``generate()``
            scale_factor: Overrides the wavelet's scale factor
            workers: Threads used to sample the masks
            **wavelet_params: Variant parameters (``order``, ``kappa``)

        Raises:
            ConfigurationError: For any invalid parameter
        """
        super().__init__(mode="inverse" if inverse_bank else "forward")
        params = dict(wavelet_params)
        if scale_factor is not None:
            params["scale_factor"] = scale_factor
        if high_pass_sub_bands is not None:
            params["high_pass_sub_bands"] = validate_sub_bands(high_pass_sub_bands)
        self._wavelet = make_wavelet(wavelet, **params)
        self.size = size
        if workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {workers}")
        self.workers = workers
        self._last: FilterSet | None = None

    @property
    def wavelet(self) -> IsotropicWaveletFunction:
        return self._wavelet

    @property
    def high_pass_sub_bands(self) -> int:
        return self._wavelet.high_pass_sub_bands

    @high_pass_sub_bands.setter
    def high_pass_sub_bands(self, value: int) -> None:
        self._wavelet = self._wavelet.with_sub_bands(validate_sub_bands(value))
        self._last = None

    @property
    def inverse_bank(self) -> bool:
        return self.mode == "inverse"

    @inverse_bank.setter
    def inverse_bank(self, value: bool) -> None:
        self.mode = "inverse" if value else "forward"
        self._last = None

    @property
    def size(self) -> tuple[int, ...] | None:
        return self._size

    @size.setter
    def size(self, value: Sequence[int] | None) -> None:
        self._size = None if value is None else validate_size(value)
        self._last = None

    @property
    def scale_factor(self) -> float:
        return self._wavelet.scale_factor

    def generate(self, size: Sequence[int] | None = None) -> FilterSet:
        """Sample every mask on ``size`` (or the configured size).

        Raises:
            ConfigurationError: If no size is given or configured
        """
        if size is None:
            if self._size is None:
                raise ConfigurationError("no size given and none configured")
            size = self._size
        size = validate_size(size)

        w = radial_frequency(frequency_axes(size, self.scale_factor))
        if self.workers > 1 and size[0] > 1:
            chunks = np.array_split(w, min(self.workers, size[0]), axis=0)
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                parts = list(executor.map(lambda c: _evaluate(self._wavelet, c), chunks))
            masks = [
                np.concatenate([part[k] for part in parts], axis=0)
                for k in range(self.high_pass_sub_bands + 1)
            ]
        else:
            masks = _evaluate(self._wavelet, w)

        if self.inverse_bank:
            total = sum(np.abs(m) ** 2 for m in masks)
            # The tight bank sums to one everywhere; guard the division anyway.
            total = np.where(total > 0, total, 1.0)
            masks = [np.conj(m) / total for m in masks]

        filter_set = FilterSet(
            masks=tuple(np.ascontiguousarray(m, dtype=np.float64) for m in masks),
            size=size,
            inverse=self.inverse_bank,
            wavelet=self._wavelet.name,
        )
        logger.debug(
            "Generated %s %s bank: size=%s, K=%d, scale_factor=%g",
            "inverse" if self.inverse_bank else "forward",
            self._wavelet.name,
            size,
            self.high_pass_sub_bands,
            self.scale_factor,
        )
        self._last = filter_set
        return filter_set

    def get_output(self, index: int) -> np.ndarray:
        """Mask ``index`` of the last generated set, generating it if needed.

        Raises:
            IndexOutOfRange: If ``index`` is not in ``[0, K]``
        """
        if self._last is None:
            self.generate()
        assert self._last is not None
        return self._last[index]

    def required_components(self) -> list[type]:
        """Return required component types."""
        return [Spectrum]

    def produced_components(self) -> list[type]:
        """Return produced component types."""
        return [FilterBank]

    def run(self, world: World, eids: list[int]) -> None:
        """Attach a FilterBank sized to each entity's spectrum."""
        for eid in eids:
            spectrum = world.get_component(eid, Spectrum)
            if self._size is not None and len(self._size) != spectrum.ndim:
                raise DimensionMismatch(
                    f"generator configured for {len(self._size)} axes, "
                    f"spectrum of entity {eid} has {spectrum.ndim}"
                )
            filter_set = self.generate(spectrum.size)
            refs = [world.arena.copy_array(mask) for mask in filter_set.masks]
            world.add_component(
                eid,
                FilterBank(
                    masks=refs,
                    high_pass_sub_bands=filter_set.high_pass_sub_bands,
                    inverse=filter_set.inverse,
                    wavelet=filter_set.wavelet,
                ),
            )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(wavelet={self._wavelet.name!r}, "
            f"high_pass_sub_bands={self.high_pass_sub_bands}, "
            f"inverse_bank={self.inverse_bank})"
        )
