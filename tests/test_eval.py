"""Tests for evaluation helpers."""

from __future__ import annotations

import numpy as np
import pytest

from isowave.components.pyramid import WaveletPyramid
from isowave.core.world import World
from isowave.eval import (
    band_energies,
    compare_filter_sets,
    energy_fractions,
    partition_of_unity_error,
    radial_profile,
    spectral_energy,
)
from isowave.systems.filter_bank import WaveletFrequencyFilterBankGenerator
from isowave.systems.wavelet import WaveletFrequencyForward
from isowave.wavelets import make_wavelet


class TestBankHelpers:
    """Tests for filter bank analysis helpers."""

    def test_partition_of_unity_error(self) -> None:
        """Test a tight bank has no deviation and a broken one does."""
        filter_set = WaveletFrequencyFilterBankGenerator(high_pass_sub_bands=2).generate((16, 16))
        assert partition_of_unity_error(filter_set) < 1e-12

        broken = type(filter_set)(
            masks=(filter_set.low_pass * 0.5, *filter_set.high_pass),
            size=filter_set.size,
        )
        assert partition_of_unity_error(broken) == pytest.approx(0.75)

    def test_compare_mismatched_sets(self) -> None:
        """Test sets of different shapes differ everywhere."""
        generator = WaveletFrequencyFilterBankGenerator()
        a = generator.generate((8, 8))
        b = generator.generate((8, 4))
        assert compare_filter_sets(a, b) == 2 * 64 + 2 * 32

    def test_radial_profile(self) -> None:
        """Test tabulated branches over [0, 1/2]."""
        profile = radial_profile(make_wavelet("simoncelli", high_pass_sub_bands=2), samples=65)
        assert profile["frequency"][0] == 0.0
        assert profile["frequency"][-1] == 0.5
        assert profile["low_pass"][0] == 1.0
        assert profile["mother"][-1] == 0.0
        assert len(profile["sub_bands"]) == 2
        np.testing.assert_allclose(
            profile["low_pass"] ** 2 + sum(b**2 for b in profile["sub_bands"]), 1.0, atol=1e-12
        )
        with pytest.raises(ValueError):
            radial_profile(make_wavelet("held"), samples=1)


class TestPyramidHelpers:
    """Tests for pyramid energy statistics."""

    def test_spectral_energy(self) -> None:
        """Test Parseval scaling matches the spatial energy."""
        img = np.random.rand(8, 6)
        np.testing.assert_allclose(spectral_energy(np.fft.fftn(img)), np.sum(img**2))

    def test_band_energies(self) -> None:
        """Test one energy per output, fractions summing to one."""
        world = World(arena_bytes=8 << 20)
        eid = world.spawn_spectrum(np.fft.fftn(np.random.rand(32, 32)))
        WaveletFrequencyForward(levels=2, high_pass_sub_bands=2).run(world, [eid])
        pyramid = world.get_component(eid, WaveletPyramid)

        energies = band_energies(world, pyramid)
        assert len(energies) == 5
        assert all(e >= 0 for e in energies)
        fractions = energy_fractions(energies)
        np.testing.assert_allclose(fractions.sum(), 1.0)

    def test_energy_fractions_zero(self) -> None:
        """Test all-zero energies stay zero."""
        np.testing.assert_array_equal(energy_fractions([0.0, 0.0]), [0.0, 0.0])
