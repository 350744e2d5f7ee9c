"""Filter bank component: frequency masks attached to an entity."""

from pydantic import BaseModel, Field

from isowave.core.arena import ArrayRef
from isowave.errors import IndexOutOfRange


class Component(BaseModel):
    """Base class for all ECS components."""

    model_config = {"arbitrary_types_allowed": True}


class FilterBank(Component):
    """Low-pass and high-pass masks generated for one spectrum size.

    Attributes:
        masks: ArrayRefs to float64 masks; index 0 is the low-pass, 1..K the
            high-pass sub-bands by increasing centre frequency
        high_pass_sub_bands: Number of high-pass sub-bands K
        inverse: True for a reconstruction (dual) bank
        wavelet: Name of the wavelet function the masks came from
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    masks: list[ArrayRef]
    high_pass_sub_bands: int = Field(ge=1)
    inverse: bool = Field(default=False)
    wavelet: str = Field(default="held")

    def get_output(self, index: int) -> ArrayRef:
        """Mask ``index`` (0 = low-pass).

        Raises:
            IndexOutOfRange: If ``index`` is not in ``[0, K]``
        """
        if not 0 <= index < len(self.masks):
            raise IndexOutOfRange(
                f"filter bank output {index} out of range [0, {len(self.masks)})"
            )
        return self.masks[index]
