"""World: Entity-Component-System manager.

The World is the central ECS registry that manages:
- Entity creation (integer IDs)
- Component storage (type -> entity -> component mapping)
- Component queries (find entities with specific component combinations)
- Arena memory management

Example:
    >>> world = World()
    >>> eid = world.spawn_image(np.random.rand(64, 64), spacing=(0.5, 0.5))
    >>> entities = world.query(Image)
    >>> world.clear()  # Reset for the next decomposition
"""

from __future__ import annotations

from typing import Any, Sequence, TypeVar

import numpy as np
from pydantic import BaseModel

from isowave.core.arena import Arena
from isowave.errors import DimensionMismatch

Component = BaseModel

T = TypeVar("T", bound=Component)


def _metadata(
    shape: tuple[int, ...],
    spacing: Sequence[float] | None,
    origin: Sequence[float] | None,
) -> tuple[tuple[float, ...], tuple[float, ...]]:
    ndim = len(shape)
    spacing = tuple(float(sp) for sp in spacing) if spacing is not None else (1.0,) * ndim
    origin = tuple(float(o) for o in origin) if origin is not None else (0.0,) * ndim
    if len(spacing) != ndim:
        raise DimensionMismatch(
            f"spacing has {len(spacing)} entries but the array has {ndim} axes"
        )
    if len(origin) != ndim:
        raise DimensionMismatch(
            f"origin has {len(origin)} entries but the array has {ndim} axes"
        )
    return spacing, origin


class World:
    """Central ECS registry managing entities, components, and memory.

    The World owns:
    - Arena: Zero-copy memory allocator
    - Entity registry: Integer entity IDs
    - Component stores: Mappings from (component_type, entity_id) to component
    - Metadata: Arbitrary key-value data per entity (metrics land here)

    Attributes:
        arena: Memory arena for array allocation
        metadata: Per-entity metadata dict
    """

    def __init__(self, arena_bytes: int = 512 << 20):
        """Create World with specified arena size.

        Args:
            arena_bytes: Arena size in bytes (default 512 MB)
        """
        self.arena = Arena(size_bytes=arena_bytes)
        self._next_eid = 0
        self._components: dict[type[Component], dict[int, Component]] = {}
        self.metadata: dict[int, dict[str, Any]] = {}

    def new_entity(self) -> int:
        """Create a new entity and return its ID."""
        eid = self._next_eid
        self._next_eid += 1
        self.metadata[eid] = {}
        return eid

    def spawn_image(
        self,
        img: np.ndarray,
        spacing: Sequence[float] | None = None,
        origin: Sequence[float] | None = None,
    ) -> int:
        """Ingest a real N-dimensional image into the world.

        Args:
            img: Real array, any number of axes
            spacing: Physical sample spacing per axis (default 1)
            origin: Physical origin per axis (default 0)

        Returns:
            Entity ID with an Image component attached

        Raises:
            ValueError: If the image is complex or has no axes
            DimensionMismatch: If spacing/origin length differs from img.ndim
        """
        from isowave.components.image import Image

        img = np.asarray(img)
        if img.ndim == 0:
            raise ValueError("Expected an array with at least one axis")
        if np.iscomplexobj(img):
            raise ValueError(
                f"Expected a real image, got dtype {img.dtype}; use spawn_spectrum"
            )
        spacing, origin = _metadata(img.shape, spacing, origin)

        eid = self.new_entity()
        pix_ref = self.arena.copy_array(img, dtype=np.float64)
        self.add_component(eid, Image(pix=pix_ref, spacing=spacing, origin=origin))

        self.metadata[eid]["image_shape"] = img.shape
        self.metadata[eid]["image_dtype"] = str(img.dtype)
        return eid

    def spawn_spectrum(
        self,
        spectrum: np.ndarray,
        spacing: Sequence[float] | None = None,
        origin: Sequence[float] | None = None,
    ) -> int:
        """Ingest a spectrum produced by an external forward FFT.

        The data is stored as complex128 in numpy FFT order.

        Returns:
            Entity ID with a Spectrum component attached

        Raises:
            DimensionMismatch: If spacing/origin length differs from the rank
        """
        from isowave.components.spectrum import Spectrum

        spectrum = np.asarray(spectrum)
        if spectrum.ndim == 0:
            raise ValueError("Expected an array with at least one axis")
        spacing, origin = _metadata(spectrum.shape, spacing, origin)

        eid = self.new_entity()
        data_ref = self.arena.copy_array(spectrum, dtype=np.complex128)
        self.add_component(eid, Spectrum(data=data_ref, spacing=spacing, origin=origin))

        self.metadata[eid]["spectrum_shape"] = spectrum.shape
        return eid

    def clear(self) -> None:
        """Reset arena and clear all entities/components for reuse.

        After clear(), all ArrayRefs from previous entities are invalidated.
        """
        self.arena.reset()
        self._next_eid = 0
        self._components.clear()
        self.metadata.clear()

    def add_component(self, eid: int, component: Component) -> None:
        """Attach a component to an entity, replacing one of the same type.

        Raises:
            ValueError: If entity does not exist
        """
        if eid not in self.metadata:
            raise ValueError(f"Entity {eid} does not exist")

        self._components.setdefault(type(component), {})[eid] = component

    def get_component(self, eid: int, comp_type: type[T]) -> T:
        """Retrieve a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if comp_type not in self._components:
            raise KeyError(f"No entities have component type {comp_type.__name__}")
        if eid not in self._components[comp_type]:
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")

        return self._components[comp_type][eid]  # type: ignore

    def has_component(self, eid: int, comp_type: type[Component]) -> bool:
        """Check if entity has a specific component type."""
        return (
            comp_type in self._components
            and eid in self._components[comp_type]
        )

    def remove_component(self, eid: int, comp_type: type[Component]) -> None:
        """Remove a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if not self.has_component(eid, comp_type):
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")

        del self._components[comp_type][eid]

    def query(self, *comp_types: type[Component]) -> list[int]:
        """Query entities that have ALL specified component types.

        Example:
            >>> eids = world.query(Spectrum, WaveletPyramid)
        """
        if not comp_types:
            return list(self.metadata.keys())

        result_set = set(self._components.get(comp_types[0], {}).keys())
        for comp_type in comp_types[1:]:
            if comp_type not in self._components:
                return []
            result_set &= set(self._components[comp_type].keys())

        return sorted(result_set)

    def destroy_entity(self, eid: int) -> None:
        """Remove entity and all its components.

        Note:
            This does not free arena memory (use clear() for that).
        """
        if eid not in self.metadata:
            raise ValueError(f"Entity {eid} does not exist")

        for comp_store in self._components.values():
            comp_store.pop(eid, None)
        del self.metadata[eid]

    def pipe(self, entity: int) -> Any:
        """Create a fluent pipeline for the given entity.

        Example:
            >>> pyramid = (
            ...     world.pipe(entity)
            ...     .to(ForwardFFT())
            ...     .to(WaveletFrequencyForward(levels=2))
            ...     .out(WaveletPyramid)
            ... )
        """
        from isowave.core.pipeline import Pipe

        return Pipe(world=self, entity=entity)

    def __repr__(self) -> str:
        num_entities = len(self.metadata)
        num_comp_types = len(self._components)
        return (
            f"World(entities={num_entities}, component_types={num_comp_types}, "
            f"arena={self.arena})"
        )
