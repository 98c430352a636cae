import numpy as np
import pytest

from alienshot.colorspaces import split_channels, to_hsv, to_lab
from alienshot.image_buffer import ColorSpace, ImageBuffer
from alienshot.processors import (
    AutoLevelProcessor,
    ClaheProcessor,
    ContrastProcessor,
    DenoiseProcessor,
    ProcessorFactory,
    ProcessorType,
    SaturationProcessor,
    SharpenProcessor,
    TintProcessor,
    UpscaleProcessor,
)
from conftest import gradient_image, noise_image


class TestProcessors:
    def setup_method(self):
        self.image = ImageBuffer(gradient_image())
        self.noisy = ImageBuffer(noise_image(seed=7))

    def test_denoise_processor(self):
        processor = DenoiseProcessor()
        before = self.noisy.copy_pixels()
        result = processor.process(self.noisy)

        assert result.processor_type == "Denoise"
        assert result.image.shape == self.noisy.shape
        assert result.image.pixels.dtype == np.uint8
        assert result.parameters["search_window"] == 21
        np.testing.assert_array_equal(self.noisy.pixels, before)

    @pytest.mark.parametrize(
        "kwargs",
        [{"strength": -1.0}, {"template_window": 6}, {"search_window": 0}],
    )
    def test_denoise_rejects_bad_parameters(self, kwargs):
        with pytest.raises(ValueError):
            DenoiseProcessor().process(self.noisy, **kwargs)

    def test_clahe_processor(self):
        processor = ClaheProcessor()
        result = processor.process(self.image, clip_limit=3.0)

        assert result.processor_type == "CLAHE"
        assert result.image.shape == self.image.shape
        assert result.parameters == {"clip_limit": 3.0, "tile_grid": 8}
        assert "lightness_std_after" in result.statistics

        # Only lightness is equalized; chrominance stays close to the source.
        _, a_before, b_before = split_channels(to_lab(self.image))
        _, a_after, b_after = split_channels(to_lab(result.image))
        for before, after in ((a_before, a_after), (b_before, b_after)):
            diff = np.abs(after.pixels.astype(int) - before.pixels.astype(int))
            assert diff.mean() < 3.0

    def test_clahe_rejects_bad_clip_limit(self):
        with pytest.raises(ValueError):
            ClaheProcessor().process(self.image, clip_limit=0.0)

    def test_auto_level_stretches_low_contrast(self):
        processor = AutoLevelProcessor()
        low_contrast = ImageBuffer((gradient_image() // 4) + 100)
        result = processor.process(low_contrast)

        assert result.processor_type == "Auto Level"
        assert result.statistics["stretched"] is True
        assert result.image.pixels.min() == 0
        assert result.image.pixels.max() == 255

    def test_auto_level_keeps_full_range_input(self):
        result = AutoLevelProcessor().process(self.noisy)

        assert result.statistics["stretched"] is False
        np.testing.assert_array_equal(result.image.pixels, self.noisy.pixels)

    def test_auto_level_keeps_flat_image(self):
        flat = ImageBuffer(np.full((8, 8, 3), 77, dtype=np.uint8))
        result = AutoLevelProcessor().process(flat)

        assert result.statistics["stretched"] is False
        np.testing.assert_array_equal(result.image.pixels, flat.pixels)

    def test_saturation_clamps_instead_of_wrapping(self):
        red = np.zeros((4, 4, 3), dtype=np.uint8)
        red[:, :, 2] = 255
        result = SaturationProcessor().process(ImageBuffer(red), factor=1.2)

        np.testing.assert_array_equal(result.image.pixels, red)

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    @pytest.mark.parametrize("factor", [1.15, 1.20, 0.85])
    def test_saturation_clamps_random_inputs(self, seed, factor):
        pixels = noise_image(seed)
        pixels[::3, :, 2] = 255
        pixels[::4, :, 0] = 0
        saturation = split_channels(to_hsv(ImageBuffer(pixels)))[1].pixels
        assert (saturation == 255).any()

        scaled = SaturationProcessor.scale_saturation(saturation, factor)
        expected = np.minimum(
            255, np.rint(saturation.astype(np.float32) * np.float32(factor))
        )

        assert scaled.dtype == np.uint8
        np.testing.assert_array_equal(scaled, expected.astype(np.uint8))
        if factor > 1:
            # Saturated pixels stay saturated instead of wrapping to small values.
            assert (scaled[saturation == 255] == 255).all()
            assert (scaled >= saturation).all()

    @pytest.mark.parametrize("seed", [0, 1])
    def test_saturated_pixels_survive_boost(self, seed):
        pixels = noise_image(seed)
        pixels[::2, :, 0] = 0
        pixels[::2, :, 2] = 255
        image = ImageBuffer(pixels)
        result = SaturationProcessor().process(image, factor=1.2)

        before = split_channels(to_hsv(image))[1].pixels
        after = split_channels(to_hsv(result.image))[1].pixels
        assert (after[before == 255] == 255).all()

    def test_saturation_scales_mean(self):
        boosted = SaturationProcessor().process(self.image, factor=1.2)
        muted = SaturationProcessor().process(self.image, factor=0.85)

        base = split_channels(to_hsv(self.image))[1].pixels.mean()
        assert boosted.statistics["mean_saturation_after"] > base
        assert muted.statistics["mean_saturation_after"] < base

    def test_saturation_rejects_negative_factor(self):
        with pytest.raises(ValueError):
            SaturationProcessor().process(self.image, factor=-0.5)

    def test_contrast_processor(self):
        pixels = np.full((2, 2, 3), 100, dtype=np.uint8)
        pixels[0, 0] = (0, 5, 250)
        result = ContrastProcessor().process(ImageBuffer(pixels), scale=1.3, offset=-10.0)

        assert result.processor_type == "Contrast"
        assert tuple(result.image.pixels[1, 1]) == (120, 120, 120)
        # Clamped at both ends.
        assert tuple(result.image.pixels[0, 0]) == (0, 0, 255)

    def test_tint_processor(self):
        pixels = np.full((2, 2, 3), 100, dtype=np.uint8)
        pixels[0, 0] = (250, 250, 250)
        result = TintProcessor().process(ImageBuffer(pixels), bias=(5, 10, 15))

        assert tuple(result.image.pixels[1, 1]) == (105, 110, 115)
        assert tuple(result.image.pixels[0, 0]) == (255, 255, 255)

    def test_tint_requires_one_value_per_channel(self):
        with pytest.raises(ValueError):
            TintProcessor().process(self.image, bias=(1, 2))

    def test_sharpen_kernel_preserves_brightness(self):
        kernel = SharpenProcessor.build_kernel(1.8, -0.1)

        assert kernel.shape == (3, 3)
        assert kernel[1, 1] == pytest.approx(1.8)
        assert kernel.sum() == pytest.approx(1.0, abs=1e-5)

    def test_sharpen_leaves_flat_image_unchanged(self):
        flat = ImageBuffer(np.full((8, 8, 3), 100, dtype=np.uint8))
        result = SharpenProcessor().process(flat)

        assert result.processor_type == "Sharpen"
        np.testing.assert_array_equal(result.image.pixels, flat.pixels)

    def test_upscale_changes_geometry(self):
        result = UpscaleProcessor().process(self.image, factor=1.2)

        assert result.image.width == int(64 * 1.2)
        assert result.image.height == int(48 * 1.2)
        assert result.statistics["original_size"] == (64, 48)

    def test_processors_reject_non_device_buffers(self):
        with pytest.raises(ValueError):
            ContrastProcessor().process(to_hsv(self.image))
        with pytest.raises(ValueError):
            ContrastProcessor().process(self.image.pixels)

    def test_processors_do_not_mutate_input(self):
        before = self.image.copy_pixels()
        for processor_type in ProcessorFactory.get_available_processors():
            ProcessorFactory.create_processor(processor_type).process(self.image)

        np.testing.assert_array_equal(self.image.pixels, before)

    def test_last_result(self):
        processor = ContrastProcessor()
        assert processor.get_last_result() is None

        result = processor.process(self.image)
        assert processor.get_last_result() is result


class TestProcessorFactory:
    def test_every_type_is_available(self):
        available = ProcessorFactory.get_available_processors()
        assert set(available) == set(ProcessorType)

    def test_create_returns_fresh_instances(self):
        first = ProcessorFactory.create_processor(ProcessorType.TINT)
        second = ProcessorFactory.create_processor(ProcessorType.TINT)

        assert isinstance(first, TintProcessor)
        assert first is not second

    def test_unknown_type_raises(self):
        with pytest.raises(ValueError):
            ProcessorFactory.create_processor("Tint")
