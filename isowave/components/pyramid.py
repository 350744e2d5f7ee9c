"""Wavelet pyramid component."""

from pydantic import BaseModel, Field, model_validator

from isowave.components.spectrum import Spectrum
from isowave.core.geometry import (
    level_band_to_output_index,
    output_index_to_level_band,
    total_outputs,
)
from isowave.errors import IndexOutOfRange


class Component(BaseModel):
    """Base class for all ECS components."""

    model_config = {"arbitrary_types_allowed": True}


class WaveletPyramid(Component):
    """Multiresolution decomposition of a spectrum.

    Output ``l * K + b`` is high-pass sub-band ``b + 1`` of level ``l``, on
    the grid of that level. The last output, at index ``L * K``, is the
    low-pass residual after ``L`` shrinks.

    Attributes:
        bands: One Spectrum per output, in output order
        levels: Number of decomposition levels L
        high_pass_sub_bands: Number of high-pass sub-bands per level K
        scale_factor: Per-level shrink factor
        wavelet: Name of the wavelet function used
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    bands: list[Spectrum]
    levels: int = Field(ge=0)
    high_pass_sub_bands: int = Field(ge=1)
    scale_factor: float = Field(default=2.0, gt=1)
    wavelet: str = Field(default="held")

    @model_validator(mode="after")
    def _check_band_count(self) -> "WaveletPyramid":
        expected = total_outputs(self.levels, self.high_pass_sub_bands)
        if len(self.bands) != expected:
            raise ValueError(
                f"expected {expected} bands for levels={self.levels}, "
                f"high_pass_sub_bands={self.high_pass_sub_bands}, got {len(self.bands)}"
            )
        return self

    @property
    def total_outputs(self) -> int:
        return len(self.bands)

    def get_output(self, index: int) -> Spectrum:
        """Band at flat output ``index``.

        Raises:
            IndexOutOfRange: If ``index`` is not in ``[0, total_outputs)``
        """
        if not 0 <= index < len(self.bands):
            raise IndexOutOfRange(
                f"output index {index} out of range [0, {len(self.bands)})"
            )
        return self.bands[index]

    def output_index_to_level_band(self, index: int) -> tuple[int, int]:
        return output_index_to_level_band(index, self.levels, self.high_pass_sub_bands)

    def level_band_to_output_index(self, level: int, band: int) -> int:
        return level_band_to_output_index(
            level, band, self.levels, self.high_pass_sub_bands
        )

    def outputs_high_pass(self) -> list[Spectrum]:
        """Every high-pass band, level by level."""
        return self.bands[:-1]

    def output_low_pass(self) -> Spectrum:
        """Low-pass residual at the coarsest level."""
        return self.bands[-1]

    def outputs_high_pass_by_level(self, level: int) -> list[Spectrum]:
        """The K high-pass bands of ``level``.

        Raises:
            IndexOutOfRange: If ``level`` is not in ``[0, levels)``
        """
        if not 0 <= level < self.levels:
            raise IndexOutOfRange(f"level {level} out of range [0, {self.levels})")
        k = self.high_pass_sub_bands
        return self.bands[level * k : (level + 1) * k]
