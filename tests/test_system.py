"""Tests for System base class."""

import numpy as np
import pytest

from isowave.components.spectrum import ReconSpectrum, Spectrum
from isowave.core.system import System
from isowave.core.world import World
from isowave.errors import ConfigurationError


class Conjugate(System):
    """Mock system conjugating spectra."""

    def required_components(self) -> list[type]:
        """Return required components."""
        if self.mode == "forward":
            return [Spectrum]
        else:
            return [ReconSpectrum]

    def produced_components(self) -> list[type]:
        """Return produced components."""
        if self.mode == "forward":
            return [ReconSpectrum]
        else:
            return [Spectrum]

    def run(self, world: World, eids: list[int]) -> None:
        """Conjugate the input spectrum."""
        for eid in eids:
            spectrum = world.get_component(eid, Spectrum)
            data = np.conj(world.arena.view(spectrum.data))
            world.add_component(eid, ReconSpectrum(data=world.arena.copy_array(data)))


class TestSystem:
    """Tests for System base class."""

    def test_abstract(self) -> None:
        """Test System cannot be instantiated directly."""
        with pytest.raises(TypeError):
            System()  # type: ignore[abstract]

    def test_mode(self) -> None:
        """Test valid and invalid modes."""
        assert Conjugate().mode == "forward"
        assert Conjugate(mode="inverse").mode == "inverse"
        with pytest.raises(ConfigurationError, match="mode must be one of"):
            Conjugate(mode="encode")  # type: ignore[arg-type]

    def test_can_run(self) -> None:
        """Test dependency checking."""
        world = World(arena_bytes=1 << 20)
        with_spectrum = world.spawn_spectrum(np.ones((4, 4)))
        without = world.new_entity()
        system = Conjugate()
        assert system.can_run(world, with_spectrum)
        assert not system.can_run(world, without)

    def test_run(self) -> None:
        """Test the produced component is attached."""
        world = World(arena_bytes=1 << 20)
        eid = world.spawn_spectrum(np.full((2, 2), 1 + 2j))
        Conjugate().run(world, [eid])
        recon = world.get_component(eid, ReconSpectrum)
        np.testing.assert_array_equal(world.arena.view(recon.data), np.full((2, 2), 1 - 2j))

    def test_repr(self) -> None:
        """Test repr shows the mode."""
        assert repr(Conjugate()) == "Conjugate(mode=forward)"
