"""System base class for ECS transformations.

Systems are the "logic" layer of the ECS architecture. They operate on
components attached to entities, reading required components and producing
new components.

Systems support two modes:
- 'forward': analysis direction (image to spectrum, spectrum to pyramid)
- 'inverse': synthesis direction (pyramid to spectrum, spectrum to image)

Example:
    >>> class Conjugate(System):
    ...     def required_components(self):
    ...         return [Spectrum]
    ...     def produced_components(self):
    ...         return [ReconSpectrum]
    ...     def run(self, world, eids):
    ...         for eid in eids:
    ...             spectrum = world.get_component(eid, Spectrum)
    ...             data = np.conj(world.arena.view(spectrum.data))
    ...             world.add_component(
    ...                 eid, ReconSpectrum(data=world.arena.copy_array(data))
    ...             )
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Literal

from isowave.errors import ConfigurationError

if TYPE_CHECKING:
    from isowave.core.world import World

Mode = Literal["forward", "inverse"]
MODES = ("forward", "inverse")


class System(ABC):
    """Base class for all ECS systems.

    Systems transform components attached to entities. They declare:
    - required_components(): What inputs they need
    - produced_components(): What outputs they create
    - run(): The actual transformation logic

    Attributes:
        mode: Transformation direction ('forward' or 'inverse')
    """

    def __init__(self, mode: Mode = "forward") -> None:
        """Initialize system with transformation mode.

        Raises:
            ConfigurationError: If ``mode`` is not 'forward' or 'inverse'
        """
        self.mode = mode

    @property
    def mode(self) -> Mode:
        return self._mode

    @mode.setter
    def mode(self, mode: Mode) -> None:
        if mode not in MODES:
            raise ConfigurationError(f"mode must be one of {MODES}, got {mode!r}")
        self._mode = mode

    @abstractmethod
    def required_components(self) -> list[type]:
        """Return list of component types this system requires as input."""

    @abstractmethod
    def produced_components(self) -> list[type]:
        """Return list of component types this system produces as output."""

    @abstractmethod
    def run(self, world: World, eids: list[int]) -> None:
        """Execute system on given entities.

        Args:
            world: World instance with entities and components
            eids: List of entity IDs to process

        Note:
            - Must attach every produced component to each entity
            - Must not attach anything when it raises, so a failed run
              leaves the entity as it was
        """

    def can_run(self, world: World, eid: int) -> bool:
        """Check if entity has all required components."""
        return all(world.has_component(eid, ct) for ct in self.required_components())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mode={self.mode})"
