"""color_space.py のテスト。"""

import numpy as np

from dither_effects.domain.color import RGB, luminance, rgb_to_hsl, rgb_to_lab
from dither_effects.infrastructure.color_space import (
    hsl_to_rgb_batch,
    lab_to_lch_batch,
    lab_to_rgb_batch,
    lch_to_lab_batch,
    lch_to_rgb_batch,
    linear_to_srgb_batch,
    luminance_batch,
    rgb_to_hsl_batch,
    rgb_to_lab_batch,
    rgb_to_lch_batch,
    srgb_to_linear_batch,
    to_uint8,
)


def _random_image(h: int, w: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, (h, w, 3), dtype=np.uint8)


class TestLinearConversion:
    def test_roundtrip(self) -> None:
        values = np.arange(256, dtype=np.float64)
        back = linear_to_srgb_batch(srgb_to_linear_batch(values))
        np.testing.assert_allclose(back, values, atol=1e-6)

    def test_out_of_range_is_clipped(self) -> None:
        result = linear_to_srgb_batch(np.array([-0.5, 1.5]))
        np.testing.assert_allclose(result, [0.0, 255.0])


class TestRgbToLabBatch:
    def test_white(self) -> None:
        lab = rgb_to_lab_batch(np.array([[[255, 255, 255]]], dtype=np.uint8))
        assert abs(lab[0, 0, 0] - 100.0) < 0.5  # L*≈100
        assert abs(lab[0, 0, 1]) < 1.0  # a*≈0
        assert abs(lab[0, 0, 2]) < 1.0  # b*≈0

    def test_batch_shape(self) -> None:
        lab = rgb_to_lab_batch(np.zeros((10, 20, 3), dtype=np.uint8))
        assert lab.shape == (10, 20, 3)
        assert lab.dtype == np.float64

    def test_matches_scalar(self) -> None:
        image = _random_image(8, 8, seed=1)
        lab = rgb_to_lab_batch(image)
        for y in range(8):
            for x in range(8):
                expected = rgb_to_lab(RGB(*(int(c) for c in image[y, x])))
                np.testing.assert_allclose(lab[y, x], expected.to_tuple(), atol=1e-6)

    def test_roundtrip(self) -> None:
        image = _random_image(100, 100, seed=2)
        back = lab_to_rgb_batch(rgb_to_lab_batch(image))
        assert np.abs(back.astype(np.int16) - image.astype(np.int16)).max() <= 1


class TestHslBatch:
    def test_matches_scalar(self) -> None:
        image = _random_image(8, 8, seed=3)
        hsl = rgb_to_hsl_batch(image)
        for y in range(8):
            for x in range(8):
                expected = rgb_to_hsl(RGB(*(int(c) for c in image[y, x])))
                np.testing.assert_allclose(hsl[y, x], expected.to_tuple(), atol=1e-9)

    def test_gray_has_zero_hue_and_saturation(self) -> None:
        hsl = rgb_to_hsl_batch(np.array([[0, 0, 0], [128, 128, 128], [255, 255, 255]]))
        np.testing.assert_array_equal(hsl[:, 0], [0.0, 0.0, 0.0])
        np.testing.assert_array_equal(hsl[:, 1], [0.0, 0.0, 0.0])

    def test_roundtrip(self) -> None:
        image = _random_image(100, 100, seed=4)
        back = hsl_to_rgb_batch(rgb_to_hsl_batch(image))
        assert np.abs(back.astype(np.int16) - image.astype(np.int16)).max() <= 1

    def test_hue_wraps(self) -> None:
        hsl = np.array([[-120.0, 1.0, 0.5], [480.0, 1.0, 0.5]])
        np.testing.assert_array_equal(hsl_to_rgb_batch(hsl), [[0, 0, 255], [0, 255, 0]])


class TestLchBatch:
    def test_lab_lch_roundtrip(self) -> None:
        lab = rgb_to_lab_batch(_random_image(10, 10, seed=5))
        np.testing.assert_allclose(lch_to_lab_batch(lab_to_lch_batch(lab)), lab, atol=1e-9)

    def test_hue_range(self) -> None:
        lch = rgb_to_lch_batch(_random_image(20, 20, seed=6))
        assert lch[..., 2].min() >= 0.0
        assert lch[..., 2].max() <= 360.0
        assert lch[..., 1].min() >= 0.0

    def test_rgb_roundtrip(self) -> None:
        image = _random_image(30, 30, seed=7)
        back = lch_to_rgb_batch(rgb_to_lch_batch(image))
        assert np.abs(back.astype(np.int16) - image.astype(np.int16)).max() <= 1


class TestLuminanceBatch:
    def test_matches_scalar(self) -> None:
        image = _random_image(5, 5, seed=8)
        luma = luminance_batch(image)
        for y in range(5):
            for x in range(5):
                assert luma[y, x] == luminance(RGB(*(int(c) for c in image[y, x])))


class TestToUint8:
    def test_rounds_half_to_even_and_clips(self) -> None:
        result = to_uint8(np.array([-3.0, 2.5, 3.5, 127.4, 300.0]))
        np.testing.assert_array_equal(result, [0, 2, 4, 127, 255])
        assert result.dtype == np.uint8
