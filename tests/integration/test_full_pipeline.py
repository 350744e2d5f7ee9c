"""Integration tests for the full decomposition pipeline.

Tests the complete flow: Image → FFT → Wavelet pyramid → inverse → FFT⁻¹
"""

from __future__ import annotations

import numpy as np

from isowave.components.image import Image, ReconImage
from isowave.components.pyramid import WaveletPyramid
from isowave.components.spectrum import ReconSpectrum, Spectrum
from isowave.core.world import World
from isowave.systems.fft import ForwardFFT, InverseFFT
from isowave.systems.metrics import MetricMSE, MetricPSNR, MetricSpectralError
from isowave.systems.wavelet import WaveletFrequencyForward, WaveletFrequencyInverse


class TestFullPipeline:
    """Test the full pipeline with metrics."""

    def test_round_trip_3d(self):
        """Test a 3D volume through every stage with metrics."""
        world = World(arena_bytes=64 << 20)
        volume = np.random.rand(32, 32, 16)
        entity = world.spawn_image(volume, spacing=(0.8, 0.8, 2.0), origin=(10.0, 0.0, -5.0))

        # Forward: Image → Spectrum → WaveletPyramid
        ForwardFFT().run(world, [entity])
        WaveletFrequencyForward(levels=2, high_pass_sub_bands=4, wavelet="held").run(world, [entity])
        pyramid = world.get_component(entity, WaveletPyramid)
        assert pyramid.total_outputs == 9
        assert pyramid.output_low_pass().size == (8, 8, 4)
        assert pyramid.output_low_pass().spacing == (3.2, 3.2, 8.0)

        # Inverse: WaveletPyramid → ReconSpectrum → ReconImage
        WaveletFrequencyInverse(levels=2, high_pass_sub_bands=4, wavelet="held").run(world, [entity])
        InverseFFT(source=ReconSpectrum).run(world, [entity])
        assert world.has_component(entity, ReconImage)

        MetricSpectralError().run(world, [entity])
        MetricMSE().run(world, [entity])
        MetricPSNR(data_range=1.0).run(world, [entity])

        assert world.metadata[entity]["spectral_error"] < 1e-10
        assert world.metadata[entity]["mse"] < 1e-20
        assert world.metadata[entity]["psnr"] > 150.0

    def test_band_images_are_real(self):
        """Test each band inverse-transforms to a real image of its level."""
        world = World(arena_bytes=16 << 20)
        entity = world.spawn_image(np.random.rand(24, 30))
        pyramid = (
            world.pipe(entity)
            .to(ForwardFFT())
            .to(WaveletFrequencyForward(levels=2, high_pass_sub_bands=2, wavelet="vow"))
            .out(WaveletPyramid)
        )

        for index, band in enumerate(pyramid.bands):
            band_entity = world.new_entity()
            world.add_component(band_entity, band)
            InverseFFT(source=Spectrum, keep_complex=True).run(world, [band_entity])
            pix = world.arena.view(world.get_component(band_entity, ReconImage).pix)
            level, _ = pyramid.output_index_to_level_band(index)
            assert pix.shape == band.size
            assert np.max(np.abs(pix.imag)) < 1e-12, level

    def test_multiple_entities(self):
        """Test one system run over several entities."""
        world = World(arena_bytes=32 << 20)
        images = [np.random.rand(16, 16), np.random.rand(20, 12), np.random.rand(9, 9, 9)]
        entities = [world.spawn_image(img) for img in images]

        ForwardFFT().run(world, entities)
        WaveletFrequencyForward(levels=1, high_pass_sub_bands=2).run(world, entities)
        WaveletFrequencyInverse(levels=1, high_pass_sub_bands=2).run(world, entities)
        InverseFFT().run(world, entities)

        assert world.query(Image, WaveletPyramid, ReconImage) == entities
        for entity, img in zip(entities, images):
            recon = world.arena.view(world.get_component(entity, ReconImage).pix)
            np.testing.assert_allclose(recon, img, atol=1e-10)
