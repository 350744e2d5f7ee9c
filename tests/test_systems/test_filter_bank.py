"""Tests for the frequency filter bank generator."""

from __future__ import annotations

import numpy as np
import pytest

from isowave.components.filter_bank import FilterBank
from isowave.components.spectrum import Spectrum
from isowave.core.geometry import fft_indices, shrink_size
from isowave.core.world import World
from isowave.errors import ConfigurationError, DimensionMismatch, IndexOutOfRange
from isowave.eval.bank import compare_filter_sets, partition_of_unity_error
from isowave.systems.filter_bank import (
    FilterSet,
    WaveletFrequencyFilterBankGenerator,
    frequency_axes,
)
from isowave.wavelets import make_wavelet

ALL_WAVELETS = ["held", "vow", "simoncelli", "shannon"]


def _outside_kept(size: tuple[int, ...], scale_factor: float) -> np.ndarray:
    """Boolean mask of the samples a shrink by ``scale_factor`` discards."""
    kept = np.zeros(size, dtype=bool)
    shrunk = shrink_size(size, scale_factor)
    kept[np.ix_(*(fft_indices(m) % n for n, m in zip(size, shrunk)))] = True
    return ~kept


class TestFrequencyAxes:
    """Tests for the per-axis frequency normalization."""

    def test_even_extent(self) -> None:
        """Test even extents are normalized by their own length."""
        (axis,) = frequency_axes((8,), 2.0)
        np.testing.assert_allclose(axis, np.fft.fftfreq(8))

    def test_odd_extent(self) -> None:
        """Test odd extents are normalized by s * floor(N / s)."""
        (axis,) = frequency_axes((9,), 2.0)
        np.testing.assert_allclose(axis, fft_indices(9) / 8.0)

    def test_extent_below_scale(self) -> None:
        """Test tiny axes fall back to their own length."""
        (axis,) = frequency_axes((1,), 2.0)
        np.testing.assert_array_equal(axis, [0.0])


class TestWaveletFrequencyFilterBankGenerator:
    """Tests for the filter bank generator system."""

    def test_init(self) -> None:
        """Test default configuration."""
        generator = WaveletFrequencyFilterBankGenerator()
        assert generator.wavelet.name == "held"
        assert generator.high_pass_sub_bands == 1
        assert not generator.inverse_bank
        assert generator.mode == "forward"
        assert generator.size is None
        assert generator.scale_factor == 2.0

    def test_wavelet_instance_settings(self) -> None:
        """Test an instance keeps its sub-bands unless overridden."""
        wavelet = make_wavelet("simoncelli", high_pass_sub_bands=4)
        assert WaveletFrequencyFilterBankGenerator(wavelet=wavelet).high_pass_sub_bands == 4
        generator = WaveletFrequencyFilterBankGenerator(wavelet=wavelet, high_pass_sub_bands=2)
        assert generator.high_pass_sub_bands == 2
        assert len(generator.generate((8, 8))) == 3

    def test_invalid_configuration(self) -> None:
        """Test eager validation of K, size and workers."""
        with pytest.raises(ConfigurationError):
            WaveletFrequencyFilterBankGenerator(high_pass_sub_bands=0)
        with pytest.raises(ConfigurationError):
            WaveletFrequencyFilterBankGenerator(size=(0, 4))
        with pytest.raises(ConfigurationError):
            WaveletFrequencyFilterBankGenerator(workers=0)
        generator = WaveletFrequencyFilterBankGenerator()
        with pytest.raises(ConfigurationError):
            generator.high_pass_sub_bands = 0
        with pytest.raises(ConfigurationError, match="no size"):
            generator.generate()

    def test_generate_shapes(self) -> None:
        """Test one low-pass and K high-pass masks of the requested size."""
        generator = WaveletFrequencyFilterBankGenerator(high_pass_sub_bands=3, size=(16, 12))
        filter_set = generator.generate()
        assert isinstance(filter_set, FilterSet)
        assert len(filter_set) == 4
        assert filter_set.high_pass_sub_bands == 3
        assert filter_set.size == (16, 12)
        for mask in filter_set.masks:
            assert mask.shape == (16, 12)
            assert mask.dtype == np.float64
        assert filter_set.low_pass[0, 0] == 1.0
        assert all(band[0, 0] == 0.0 for band in filter_set.high_pass)

    def test_partition_of_unity(self) -> None:
        """Test the squared masks sum to one for every wavelet and K."""
        for name in ALL_WAVELETS:
            for k, size in [(1, (16, 16)), (2, (9, 10, 7)), (4, (32,))]:
                generator = WaveletFrequencyFilterBankGenerator(name, high_pass_sub_bands=k)
                assert partition_of_unity_error(generator.generate(size)) < 1e-12

    def test_low_pass_vanishes_where_shrink_discards(self) -> None:
        """Test no low-pass energy is lost by the shrink, even or odd."""
        for name in ALL_WAVELETS:
            for scale_factor, size in [(2.0, (16, 15)), (2.0, (9, 12, 5)), (3.0, (20, 11))]:
                generator = WaveletFrequencyFilterBankGenerator(name, scale_factor=scale_factor)
                low = generator.generate(size).low_pass
                assert np.all(low[_outside_kept(size, scale_factor)] == 0.0)

    def test_masks_are_symmetric(self) -> None:
        """Test masks are even in frequency so real images stay real."""
        generator = WaveletFrequencyFilterBankGenerator("vow", high_pass_sub_bands=2)
        for mask in generator.generate((12, 9)).masks:
            flipped = np.roll(mask[::-1, ::-1], shift=(1, 1), axis=(0, 1))
            np.testing.assert_allclose(mask, flipped, atol=1e-15)

    def test_inverse_bank_matches_forward(self) -> None:
        """Test the dual of a tight bank equals the bank itself."""
        for name in ALL_WAVELETS:
            forward = WaveletFrequencyFilterBankGenerator(name, high_pass_sub_bands=2)
            inverse = WaveletFrequencyFilterBankGenerator(
                name, high_pass_sub_bands=2, inverse_bank=True
            )
            assert inverse.mode == "inverse"
            inverse_set = inverse.generate((10, 14))
            assert inverse_set.inverse
            assert compare_filter_sets(forward.generate((10, 14)), inverse_set, atol=1e-12) == 0

    def test_inverse_bank_setter(self) -> None:
        """Test switching the bank direction."""
        generator = WaveletFrequencyFilterBankGenerator()
        generator.inverse_bank = True
        assert generator.mode == "inverse"
        assert generator.generate((8,)).inverse

    def test_sub_band_setter_regenerates(self) -> None:
        """Test changing K changes the next generated set."""
        generator = WaveletFrequencyFilterBankGenerator(size=(16, 16))
        assert len(generator.generate()) == 2
        generator.high_pass_sub_bands = 4
        assert len(generator.generate()) == 5
        assert generator.get_output(4).shape == (16, 16)

    def test_get_output(self) -> None:
        """Test output access and bounds."""
        generator = WaveletFrequencyFilterBankGenerator(high_pass_sub_bands=2, size=(8, 8))
        np.testing.assert_array_equal(generator.get_output(0), generator.generate().low_pass)
        with pytest.raises(IndexOutOfRange):
            generator.get_output(3)

    def test_deterministic(self) -> None:
        """Test repeated generation gives identical masks."""
        generator = WaveletFrequencyFilterBankGenerator("simoncelli", high_pass_sub_bands=3)
        assert compare_filter_sets(generator.generate((11, 13)), generator.generate((11, 13)), atol=0.0) == 0

    def test_workers(self) -> None:
        """Test threaded generation matches serial generation."""
        serial = WaveletFrequencyFilterBankGenerator("held", high_pass_sub_bands=2)
        threaded = WaveletFrequencyFilterBankGenerator("held", high_pass_sub_bands=2, workers=3)
        assert compare_filter_sets(serial.generate((17, 8, 6)), threaded.generate((17, 8, 6)), atol=0.0) == 0

    def test_size_one_axes(self) -> None:
        """Test degenerate axes are accepted."""
        filter_set = WaveletFrequencyFilterBankGenerator().generate((1, 8))
        assert filter_set.low_pass.shape == (1, 8)
        assert partition_of_unity_error(filter_set) < 1e-12

    def test_compare_different_sets(self) -> None:
        """Test sets of different wavelets differ somewhere."""
        a = WaveletFrequencyFilterBankGenerator("held").generate((16, 16))
        b = WaveletFrequencyFilterBankGenerator("simoncelli").generate((16, 16))
        assert compare_filter_sets(a, b) > 0

    def test_run_attaches_filter_bank(self) -> None:
        """Test the system attaches masks sized to the spectrum."""
        world = World(arena_bytes=4 << 20)
        eid = world.spawn_spectrum(np.fft.fftn(np.random.rand(8, 6)))
        generator = WaveletFrequencyFilterBankGenerator(high_pass_sub_bands=2)
        assert generator.required_components() == [Spectrum]
        assert generator.produced_components() == [FilterBank]

        generator.run(world, [eid])

        bank = world.get_component(eid, FilterBank)
        assert bank.high_pass_sub_bands == 2
        assert bank.wavelet == "held"
        assert len(bank.masks) == 3
        np.testing.assert_array_equal(
            world.arena.view(bank.get_output(1)), generator.generate((8, 6)).masks[1]
        )

    def test_run_dimension_mismatch(self) -> None:
        """Test a configured size of another rank is refused."""
        world = World(arena_bytes=1 << 20)
        eid = world.spawn_spectrum(np.zeros((4, 4, 4)))
        generator = WaveletFrequencyFilterBankGenerator(size=(4, 4))
        with pytest.raises(DimensionMismatch):
            generator.run(world, [eid])
        assert not world.has_component(eid, FilterBank)
