"""effects.py のテスト。"""

import numpy as np
import pytest

from dither_effects.application.effects import (
    apply_effects,
    brighten,
    contrast,
    gradient_map,
    invert,
    multiply_hue,
    quantize_hue,
    rotate_hue,
    saturate,
)
from dither_effects.domain.color import BLACK, RGB, WHITE, rgb_to_lch


def _random_image(h: int, w: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, (h, w, 3), dtype=np.uint8)


def _max_diff(a: np.ndarray, b: np.ndarray) -> int:
    return int(np.abs(a.astype(np.int16) - b.astype(np.int16)).max())


def _solid(color: tuple[int, int, int], h: int = 2, w: int = 2) -> np.ndarray:
    return np.full((h, w, 3), color, dtype=np.uint8)


class TestHslEffects:
    def test_rotate_hue_red_to_green(self) -> None:
        result = rotate_hue(_solid((255, 0, 0)), 120.0)
        np.testing.assert_array_equal(result, _solid((0, 255, 0)))

    def test_rotate_full_turn_is_identity(self) -> None:
        image = _random_image(20, 20)
        assert _max_diff(rotate_hue(image, 360.0), image) <= 1

    def test_brighten_extremes(self) -> None:
        image = _random_image(5, 5, seed=1)
        np.testing.assert_array_equal(brighten(image, -1.0), np.zeros_like(image))
        np.testing.assert_array_equal(brighten(image, 1.0), np.full_like(image, 255))

    def test_brighten_zero_is_identity(self) -> None:
        image = _random_image(10, 10, seed=2)
        assert _max_diff(brighten(image, 0.0), image) <= 1

    def test_desaturate_to_gray(self) -> None:
        result = saturate(_random_image(6, 6, seed=3), -1.0)
        assert (result[..., 0] == result[..., 1]).all()
        assert (result[..., 1] == result[..., 2]).all()

    def test_does_not_modify_input(self) -> None:
        image = _random_image(4, 4, seed=4)
        snapshot = image.copy()
        rotate_hue(image, 45.0)
        saturate(image, 0.5)
        np.testing.assert_array_equal(image, snapshot)


class TestContrast:
    def test_identity(self) -> None:
        image = _random_image(8, 8, seed=5)
        np.testing.assert_array_equal(contrast(image, 1.0), image)

    def test_zero_flattens_to_mid_gray(self) -> None:
        np.testing.assert_array_equal(contrast(_random_image(3, 3), 0.0), np.full((3, 3, 3), 128))

    def test_increase_clamps(self) -> None:
        result = contrast(np.array([[[0, 100, 250]]], dtype=np.uint8), 2.0)
        np.testing.assert_array_equal(result, [[[0, 72, 255]]])

    def test_invert(self) -> None:
        result = invert(np.array([[[0, 64, 128]]], dtype=np.uint8))
        np.testing.assert_array_equal(result, [[[255, 192, 128]]])


class TestGradientMap:
    def setup_method(self) -> None:
        self.stops = [(WHITE, 1.0), (BLACK, 0.5)]

    def test_below_first_stop_uses_first_color(self) -> None:
        result = gradient_map(_solid((64, 64, 64)), self.stops)
        np.testing.assert_array_equal(result, _solid((0, 0, 0)))

    def test_between_stops_blends(self) -> None:
        result = gradient_map(_solid((191, 191, 191)), self.stops)
        assert abs(int(result[0, 0, 0]) - 127) <= 1

    def test_at_or_above_last_stop_keeps_original(self) -> None:
        image = _solid((255, 255, 255))
        np.testing.assert_array_equal(gradient_map(image, self.stops), image)

    def test_hex_stops(self) -> None:
        result = gradient_map(_solid((10, 10, 10)), [("#ff0000", 0.5)])
        np.testing.assert_array_equal(result, _solid((255, 0, 0)))

    def test_empty_stops(self) -> None:
        with pytest.raises(ValueError):
            gradient_map(_solid((0, 0, 0)), [])


class TestLchEffects:
    def test_quantize_hue_empty_returns_copy(self) -> None:
        image = _random_image(4, 4, seed=6)
        result = quantize_hue(image, [])
        np.testing.assert_array_equal(result, image)
        assert result is not image

    def test_quantize_hue_to_own_hue(self) -> None:
        red_hue = rgb_to_lch(RGB(200, 30, 30)).h
        image = _solid((200, 30, 30))
        result = quantize_hue(image, [red_hue, (red_hue + 180.0) % 360.0])
        assert _max_diff(result, image) <= 1

    def test_quantize_hue_keeps_grays(self) -> None:
        image = _solid((90, 90, 90))
        assert _max_diff(quantize_hue(image, [10.0, 200.0]), image) <= 1

    def test_multiply_hue_one_is_identity(self) -> None:
        image = _random_image(10, 10, seed=7)
        assert _max_diff(multiply_hue(image, 1.0), image) <= 1


class TestApplyEffects:
    def test_applies_in_order(self) -> None:
        image = _random_image(3, 3, seed=8)
        result = apply_effects(image, [(contrast, {"amount": 0.0}), (brighten, {"amount": -1.0})])
        np.testing.assert_array_equal(result, np.zeros_like(image))

    def test_empty_chain(self) -> None:
        image = _random_image(3, 3, seed=9)
        np.testing.assert_array_equal(apply_effects(image, []), image)
