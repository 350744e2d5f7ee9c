"""Spatial-domain image components: Image, ReconImage."""

from typing import Any, ClassVar

from pydantic import BaseModel, model_validator

from isowave.core.arena import ArrayRef


class Component(BaseModel):
    """Base class for all ECS components.

    Components are data containers using Pydantic for validation and type safety.
    All array data is stored as ArrayRef handles pointing into the arena.
    """

    model_config = {"arbitrary_types_allowed": True}


class SampledComponent(Component):
    """Array on a regular grid with per-axis physical metadata.

    Spacing defaults to 1 and origin to 0 along every axis.
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    array_field: ClassVar[str] = "pix"

    spacing: tuple[float, ...]
    origin: tuple[float, ...]

    @model_validator(mode="before")
    @classmethod
    def _default_metadata(cls, data: Any) -> Any:
        if isinstance(data, dict):
            ref = data.get(cls.array_field)
            if isinstance(ref, ArrayRef):
                data = dict(data)
                data.setdefault("spacing", (1.0,) * ref.ndim)
                data.setdefault("origin", (0.0,) * ref.ndim)
        return data

    @model_validator(mode="after")
    def _check_metadata(self) -> "SampledComponent":
        ndim = self.ref.ndim
        if len(self.spacing) != ndim or len(self.origin) != ndim:
            raise ValueError(
                f"spacing {self.spacing} and origin {self.origin} must have "
                f"one entry per axis ({ndim})"
            )
        if any(sp <= 0 for sp in self.spacing):
            raise ValueError(f"spacing must be positive, got {self.spacing}")
        return self

    @property
    def ref(self) -> ArrayRef:
        """ArrayRef of the sampled data."""
        return getattr(self, self.array_field)

    @property
    def size(self) -> tuple[int, ...]:
        """Extent of each axis."""
        return self.ref.shape

    @property
    def ndim(self) -> int:
        """Number of axes."""
        return self.ref.ndim


class Image(SampledComponent):
    """Real-valued N-dimensional image.

    Attributes:
        pix: ArrayRef to pixel data, float64
        spacing: Physical distance between samples along each axis
        origin: Physical coordinate of the first sample
    """

    pix: ArrayRef


class ReconImage(SampledComponent):
    """Spatial image recovered by an inverse FFT.

    Attributes:
        pix: ArrayRef to pixel data (float64, or complex128 when kept complex)
    """

    pix: ArrayRef
