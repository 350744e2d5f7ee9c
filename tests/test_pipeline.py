"""Tests for Pipeline."""

import numpy as np
import pytest

from isowave.components.image import Image, ReconImage
from isowave.components.pyramid import WaveletPyramid
from isowave.components.spectrum import ReconSpectrum, Spectrum
from isowave.core.pipeline import Pipe
from isowave.core.world import World
from isowave.systems.fft import ForwardFFT, InverseFFT
from isowave.systems.wavelet import WaveletFrequencyForward, WaveletFrequencyInverse


class TestPipeBasics:
    """Test basic Pipe construction and chaining."""

    def test_pipe_creation(self) -> None:
        """Test creating a pipe."""
        world = World(arena_bytes=1 << 20)
        entity = world.new_entity()
        pipe = world.pipe(entity)

        assert isinstance(pipe, Pipe)
        assert pipe.entities == [entity]
        assert pipe.systems == []

    def test_pipe_to_chaining(self) -> None:
        """Test .to() method chains systems."""
        world = World(arena_bytes=1 << 20)
        entity = world.new_entity()
        fft = ForwardFFT()

        pipe = world.pipe(entity).to(fft)

        assert pipe.systems == [fft]

    def test_pipe_or_operator(self) -> None:
        """Test | operator for chaining."""
        world = World(arena_bytes=1 << 20)
        entity = world.new_entity()
        fft = ForwardFFT()
        forward = WaveletFrequencyForward(levels=1)

        pipe = world.pipe(entity) | fft | forward

        assert pipe.systems == [fft, forward]


class TestPipeExecution:
    """Test running pipelines."""

    def test_missing_dependency(self) -> None:
        """Test a system whose inputs are missing raises RuntimeError."""
        world = World(arena_bytes=1 << 20)
        entity = world.new_entity()
        with pytest.raises(RuntimeError, match="cannot run"):
            world.pipe(entity).to(ForwardFFT()).execute()

    def test_out_returns_component(self) -> None:
        """Test .out() runs the pipeline and returns the component."""
        world = World(arena_bytes=4 << 20)
        entity = world.spawn_image(np.random.rand(16, 16))
        spectrum = world.pipe(entity).to(ForwardFFT()).out(Spectrum)
        assert spectrum.size == (16, 16)

    def test_round_trip(self) -> None:
        """Test image → pyramid → image through one pipeline."""
        world = World(arena_bytes=16 << 20)
        img = np.random.rand(32, 24)
        entity = world.spawn_image(img, spacing=(0.5, 1.5))

        recon = (
            world.pipe(entity)
            | ForwardFFT()
            | WaveletFrequencyForward(levels=2, high_pass_sub_bands=2)
            | WaveletFrequencyInverse(levels=2, high_pass_sub_bands=2)
            | InverseFFT(source=ReconSpectrum)
        ).out(ReconImage)

        np.testing.assert_allclose(world.arena.view(recon.pix), img, atol=1e-10)
        assert recon.spacing == (0.5, 1.5)
        assert world.has_component(entity, WaveletPyramid)
        assert world.has_component(entity, Image)
