"""Quality metrics systems for evaluating reconstruction.

Implements PSNR, MSE and NRMSE using scikit-image, plus a spectral
relative error computed directly on the spectra. Metrics store results in
World metadata rather than creating components.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any

import numpy as np
from skimage.metrics import (
    mean_squared_error,
    normalized_root_mse,
    peak_signal_noise_ratio,
)

from isowave.components.image import Image, ReconImage
from isowave.components.spectrum import ReconSpectrum, Spectrum
from isowave.core.system import System

if TYPE_CHECKING:
    from isowave.core.world import World


class _PairMetric(System):
    """Metric comparing a source and a reconstructed image component."""

    key = ""

    def __init__(
        self,
        src_component: type = Image,
        recon_component: type = ReconImage,
    ):
        super().__init__(mode="forward")
        self.src_component = src_component
        self.recon_component = recon_component

    def required_components(self) -> list[type]:
        """Return required component types."""
        return [self.src_component, self.recon_component]

    def produced_components(self) -> list[type]:
        """Return produced component types (none - stores in metadata)."""
        return []

    def _pair(self, world: World, eid: int) -> tuple[np.ndarray, np.ndarray]:
        src: Any = world.get_component(eid, self.src_component)
        recon: Any = world.get_component(eid, self.recon_component)

        src_data = world.arena.view(src.ref)
        recon_data = world.arena.view(recon.ref)

        if src_data.shape != recon_data.shape:
            raise ValueError(
                f"Shape mismatch: src {src_data.shape} vs recon {recon_data.shape}"
            )
        return src_data, recon_data

    @abstractmethod
    def _compute(self, src: np.ndarray, recon: np.ndarray) -> float:
        """Metric value for one source/reconstruction pair."""

    def run(self, world: World, eids: list[int]) -> None:
        """Compute the metric for entities.

        Args:
            world: World containing entities
            eids: List of entity IDs to process
        """
        for eid in eids:
            src, recon = self._pair(world, eid)
            world.metadata.setdefault(eid, {})[self.key] = float(self._compute(src, recon))


class MetricPSNR(_PairMetric):
    """Compute Peak Signal-to-Noise Ratio between source and reconstruction.

    A lossless round trip gives very large values (above 200 dB for float64
    data); an exact match gives ``inf``.

    Stores result in world.metadata[eid]['psnr'].
    """

    key = "psnr"

    def __init__(
        self,
        src_component: type = Image,
        recon_component: type = ReconImage,
        data_range: float | None = None,
    ):
        """Initialize PSNR metric system.

        Args:
            src_component: Source image component type (default: Image)
            recon_component: Reconstructed image component type (default: ReconImage)
            data_range: Data range for PSNR (default: peak-to-peak of the source)
        """
        super().__init__(src_component, recon_component)
        self.data_range = data_range

    def _compute(self, src: np.ndarray, recon: np.ndarray) -> float:
        data_range = self.data_range
        if data_range is None:
            data_range = float(np.ptp(src)) or 1.0
        with np.errstate(divide="ignore"):
            return peak_signal_noise_ratio(src, recon, data_range=data_range)


class MetricMSE(_PairMetric):
    """Compute Mean Squared Error between source and reconstruction.

    Stores result in world.metadata[eid]['mse'].
    """

    key = "mse"

    def _compute(self, src: np.ndarray, recon: np.ndarray) -> float:
        return mean_squared_error(src, recon)


class MetricNRMSE(_PairMetric):
    """Compute Normalized Root Mean Squared Error (Euclidean normalization).

    Stores result in world.metadata[eid]['nrmse'].
    """

    key = "nrmse"

    def _compute(self, src: np.ndarray, recon: np.ndarray) -> float:
        return normalized_root_mse(src, recon, normalization="euclidean")


class MetricSpectralError(_PairMetric):
    """Maximum error between a spectrum and its reconstruction.

    Relative to the largest magnitude of the source spectrum, so a lossless
    transform stays near machine precision whatever the image scale.

    Stores result in world.metadata[eid]['spectral_error'].
    """

    key = "spectral_error"

    def __init__(
        self,
        src_component: type = Spectrum,
        recon_component: type = ReconSpectrum,
    ):
        super().__init__(src_component, recon_component)

    def _compute(self, src: np.ndarray, recon: np.ndarray) -> float:
        scale = float(np.max(np.abs(src))) if src.size else 0.0
        error = float(np.max(np.abs(src - recon))) if src.size else 0.0
        return error / scale if scale > 0 else error
