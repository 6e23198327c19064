"""color.py のテスト。"""

import random

import pytest

from dither_effects.domain.color import (
    BLACK,
    HSL,
    LAB,
    LCH,
    RGB,
    WHITE,
    Mono,
    hsl_to_rgb,
    hsl_to_rgb_float,
    lab_to_lch,
    lab_to_rgb,
    lab_to_rgb_float,
    lch_to_lab,
    lch_to_rgb,
    luminance,
    rgb_to_hsl,
    rgb_to_lab,
    rgb_to_lch,
)


def _random_colors(n: int, seed: int = 1234) -> list[RGB]:
    rng = random.Random(seed)
    return [RGB(rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255)) for _ in range(n)]


class TestRGB:
    def test_to_tuple(self) -> None:
        assert RGB(10, 20, 30).to_tuple() == (10, 20, 30)

    def test_from_floats_rounds_and_clamps(self) -> None:
        assert RGB.from_floats(-12.0, 127.6, 300.0) == RGB(0, 128, 255)

    def test_from_hex(self) -> None:
        assert RGB.from_hex("FF00EE") == RGB(255, 0, 238)
        assert RGB.from_hex("#0088aa") == RGB(0, 136, 170)

    def test_from_hex_rejects_malformed(self) -> None:
        with pytest.raises(ValueError):
            RGB.from_hex("12345")
        with pytest.raises(ValueError):
            RGB.from_hex("GG0000")

    def test_hex_roundtrip(self) -> None:
        assert RGB.from_hex(RGB(1, 2, 3).to_hex()) == RGB(1, 2, 3)


class TestMono:
    def test_from_rgb_uses_luminance(self) -> None:
        assert Mono.from_rgb(WHITE).value == 255
        assert Mono.from_rgb(BLACK).value == 0
        # 緑は赤より明るい
        assert Mono.from_rgb(RGB(0, 255, 0)).value > Mono.from_rgb(RGB(255, 0, 0)).value

    def test_to_rgb(self) -> None:
        assert Mono(77).to_rgb() == RGB(77, 77, 77)


class TestLuminance:
    def test_gray_luminance_equals_channel(self) -> None:
        assert luminance(RGB(128, 128, 128)) == pytest.approx(128.0)


class TestRgbToHsl:
    def test_primary_hues(self) -> None:
        assert rgb_to_hsl(RGB(255, 0, 0)).h == pytest.approx(0.0)
        assert rgb_to_hsl(RGB(0, 255, 0)).h == pytest.approx(120.0)
        assert rgb_to_hsl(RGB(0, 0, 255)).h == pytest.approx(240.0)

    def test_gray_has_no_saturation(self) -> None:
        hsl = rgb_to_hsl(RGB(100, 100, 100))
        assert hsl.s == 0.0
        assert hsl.l == pytest.approx(100 / 255)

    def test_hsl_to_rgb_wraps_hue(self) -> None:
        assert hsl_to_rgb(HSL(-120.0, 1.0, 0.5)) == RGB(0, 0, 255)
        assert hsl_to_rgb(HSL(480.0, 1.0, 0.5)) == RGB(0, 255, 0)

    def test_roundtrip_random(self) -> None:
        """10,000色で RGB→HSL→RGB が1階調以内に戻ることを検証。"""
        for color in _random_colors(10_000):
            back = hsl_to_rgb_float(rgb_to_hsl(color))
            assert abs(back[0] - color.r) <= 1.0
            assert abs(back[1] - color.g) <= 1.0
            assert abs(back[2] - color.b) <= 1.0


class TestRgbToLab:
    def test_white(self) -> None:
        lab = rgb_to_lab(WHITE)
        assert abs(lab.l - 100.0) < 0.5
        assert abs(lab.a) < 1.0
        assert abs(lab.b) < 1.0

    def test_black(self) -> None:
        lab = rgb_to_lab(BLACK)
        assert abs(lab.l) < 0.5

    def test_red_has_positive_a(self) -> None:
        assert rgb_to_lab(RGB(200, 0, 0)).a > 0

    def test_yellow_has_positive_b(self) -> None:
        assert rgb_to_lab(RGB(255, 255, 0)).b > 0

    def test_roundtrip_random(self) -> None:
        """10,000色で RGB→LAB→RGB が1階調以内に戻ることを検証。"""
        for color in _random_colors(10_000, seed=99):
            back = lab_to_rgb_float(rgb_to_lab(color))
            assert abs(back[0] - color.r) <= 1.0
            assert abs(back[1] - color.g) <= 1.0
            assert abs(back[2] - color.b) <= 1.0

    def test_lab_to_rgb_rounds(self) -> None:
        assert lab_to_rgb(rgb_to_lab(RGB(12, 200, 77))) == RGB(12, 200, 77)


class TestLch:
    def test_lab_lch_roundtrip(self) -> None:
        lab = LAB(53.2, 80.1, 67.2)
        back = lch_to_lab(lab_to_lch(lab))
        assert back.l == pytest.approx(lab.l)
        assert back.a == pytest.approx(lab.a)
        assert back.b == pytest.approx(lab.b)

    def test_hue_range(self) -> None:
        lch = lab_to_lch(LAB(50.0, 0.0, -30.0))
        assert lch.h == pytest.approx(270.0)
        assert lch.c == pytest.approx(30.0)

    def test_negative_chroma_treated_as_zero(self) -> None:
        lab = lch_to_lab(LCH(40.0, -5.0, 90.0))
        assert lab.a == 0.0
        assert lab.b == 0.0

    def test_rgb_lch_roundtrip(self) -> None:
        for color in _random_colors(500, seed=7):
            back = lch_to_rgb(rgb_to_lch(color))
            assert abs(back.r - color.r) <= 1
            assert abs(back.g - color.g) <= 1
            assert abs(back.b - color.b) <= 1
