"""色サンプル型と色空間変換。

Pure Pythonで実装（外部ライブラリ依存なし）。
画像全体のバッチ変換は infrastructure/color_space.py を使う。
"""

from __future__ import annotations

import math
from dataclasses import dataclass


def clamp_channel(value: float) -> int:
    """チャンネル値を丸めて 0-255 にクランプ。"""
    return max(0, min(255, int(round(value))))


@dataclass(frozen=True)
class RGB:
    """RGB色空間の色。各チャンネル 0-255。"""

    r: int
    g: int
    b: int

    def to_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @classmethod
    def from_floats(cls, r: float, g: float, b: float) -> RGB:
        """浮動小数点値から丸め・クランプしてRGBを生成。"""
        return cls(clamp_channel(r), clamp_channel(g), clamp_channel(b))

    @classmethod
    def from_hex(cls, value: str) -> RGB:
        """16進文字列 ("FF00EE" / "#ff00ee") からRGBを生成。

        Raises:
            ValueError: 6桁の16進数として解釈できない場合
        """
        text = value.strip().lstrip("#")
        if len(text) != 6:
            raise ValueError(f"invalid hex color {value!r}: expected 6 hex digits")
        try:
            return cls(int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
        except ValueError:
            raise ValueError(f"invalid hex color {value!r}") from None

    def to_hex(self) -> str:
        return f"{self.r:02X}{self.g:02X}{self.b:02X}"


@dataclass(frozen=True)
class Mono:
    """単色（輝度のみ）の色。0-255。"""

    value: int

    @classmethod
    def from_rgb(cls, color: RGB) -> Mono:
        return cls(clamp_channel(luminance(color)))

    def to_rgb(self) -> RGB:
        return RGB(self.value, self.value, self.value)


@dataclass(frozen=True)
class HSL:
    """HSL色空間の色。h: 度 [0, 360), s/l: 0〜1。"""

    h: float
    s: float
    l: float  # noqa: E741

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.h, self.s, self.l)


@dataclass(frozen=True)
class LAB:
    """CIE L*a*b* 色空間の色。"""

    l: float  # noqa: E741
    a: float
    b: float

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.l, self.a, self.b)


@dataclass(frozen=True)
class LCH:
    """CIE LCh(ab) 色空間の色。h: 度 [0, 360)。"""

    l: float  # noqa: E741
    c: float
    h: float

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.l, self.c, self.h)


BLACK = RGB(0, 0, 0)
WHITE = RGB(255, 255, 255)

# BT.709 輝度係数
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722


def luminance(color: RGB) -> float:
    """BT.709 の相対輝度 (0-255 スケール)。"""
    return LUMA_R * color.r + LUMA_G * color.g + LUMA_B * color.b


# --- RGB ↔ HSL ---


def rgb_to_hsl(color: RGB) -> HSL:
    """RGB色をHSLに変換。"""
    r, g, b = color.r / 255.0, color.g / 255.0, color.b / 255.0

    rgb_max = max(r, g, b)
    rgb_min = min(r, g, b)
    chroma = rgb_max - rgb_min

    if chroma == 0.0:
        hue = 0.0
    elif rgb_max == r:
        hue = ((g - b) / chroma) % 6.0
    elif rgb_max == g:
        hue = (b - r) / chroma + 2.0
    else:
        hue = (r - g) / chroma + 4.0

    lightness = (rgb_max + rgb_min) / 2.0
    if lightness == 0.0 or lightness == 1.0:
        saturation = 0.0
    else:
        saturation = chroma / (1.0 - abs(2.0 * lightness - 1.0))

    return HSL((hue * 60.0) % 360.0, saturation, lightness)


def hsl_to_rgb_float(color: HSL) -> tuple[float, float, float]:
    """HSL色を丸め前のRGB (0-255 の浮動小数点) に変換。色相は任意の実数を許容。"""
    chroma = (1.0 - abs(2.0 * color.l - 1.0)) * color.s
    hue_sector = (color.h % 360.0) / 60.0
    x = chroma * (1.0 - abs(hue_sector % 2.0 - 1.0))

    # h % 360 が丸めで 360.0 になるケースは sector 5 で同じ色になる
    sector = min(int(hue_sector), 5)
    if sector == 0:
        r1, g1, b1 = chroma, x, 0.0
    elif sector == 1:
        r1, g1, b1 = x, chroma, 0.0
    elif sector == 2:
        r1, g1, b1 = 0.0, chroma, x
    elif sector == 3:
        r1, g1, b1 = 0.0, x, chroma
    elif sector == 4:
        r1, g1, b1 = x, 0.0, chroma
    else:
        r1, g1, b1 = chroma, 0.0, x

    m = color.l - chroma / 2.0
    return ((r1 + m) * 255.0, (g1 + m) * 255.0, (b1 + m) * 255.0)


def hsl_to_rgb(color: HSL) -> RGB:
    """HSL色をRGBに変換（丸め・クランプ付き）。"""
    return RGB.from_floats(*hsl_to_rgb_float(color))


# --- RGB ↔ LAB ↔ LCH ---

# D65 白色点
WHITE_D65 = (0.95047, 1.00000, 1.08883)

# CIE 標準の定数
LAB_EPSILON = 216.0 / 24389.0
LAB_KAPPA = 24389.0 / 27.0


def _srgb_to_linear(c: float) -> float:
    """sRGBコンポーネント(0-255)をリニアRGBに変換。"""
    v = c / 255.0
    if v <= 0.04045:
        return v / 12.92
    return ((v + 0.055) / 1.055) ** 2.4


def _linear_to_srgb(v: float) -> float:
    """リニアRGBをsRGBコンポーネント(0-255, 浮動小数点)に変換。"""
    v = max(0.0, min(1.0, v))
    if v <= 0.0031308:
        return 12.92 * v * 255.0
    return (1.055 * v ** (1.0 / 2.4) - 0.055) * 255.0


def _lab_f(t: float) -> float:
    """LAB変換の補助関数。"""
    if t > LAB_EPSILON:
        return t ** (1.0 / 3.0)
    return (LAB_KAPPA * t + 16.0) / 116.0


def _lab_f_inv(t: float) -> float:
    """_lab_f の逆関数。"""
    cubed = t**3
    if cubed > LAB_EPSILON:
        return cubed
    return (116.0 * t - 16.0) / LAB_KAPPA


def rgb_to_lab(color: RGB) -> LAB:
    """RGB色をCIE L*a*b*に変換。D65光源基準。"""
    r_lin = _srgb_to_linear(color.r)
    g_lin = _srgb_to_linear(color.g)
    b_lin = _srgb_to_linear(color.b)

    # リニアRGB → XYZ (D65)
    x = 0.4124564 * r_lin + 0.3575761 * g_lin + 0.1804375 * b_lin
    y = 0.2126729 * r_lin + 0.7151522 * g_lin + 0.0721750 * b_lin
    z = 0.0193339 * r_lin + 0.1191920 * g_lin + 0.9503041 * b_lin

    xn, yn, zn = WHITE_D65
    fx = _lab_f(x / xn)
    fy = _lab_f(y / yn)
    fz = _lab_f(z / zn)

    return LAB(116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))


def lab_to_rgb_float(color: LAB) -> tuple[float, float, float]:
    """LAB色を丸め前のRGB (0-255 の浮動小数点) に変換。ガマット外はクリップ。"""
    fy = (color.l + 16.0) / 116.0
    fx = color.a / 500.0 + fy
    fz = fy - color.b / 200.0

    xn, yn, zn = WHITE_D65
    x = xn * _lab_f_inv(fx)
    y = yn * _lab_f_inv(fy)
    z = zn * _lab_f_inv(fz)

    # XYZ → リニアRGB
    r_lin = 3.2404542 * x - 1.5371385 * y - 0.4985314 * z
    g_lin = -0.9692660 * x + 1.8760108 * y + 0.0415560 * z
    b_lin = 0.0556434 * x - 0.2040259 * y + 1.0572252 * z

    return (_linear_to_srgb(r_lin), _linear_to_srgb(g_lin), _linear_to_srgb(b_lin))


def lab_to_rgb(color: LAB) -> RGB:
    """LAB色をRGBに変換（丸め・クランプ付き）。"""
    return RGB.from_floats(*lab_to_rgb_float(color))


def lab_to_lch(color: LAB) -> LCH:
    """LABを円筒座標のLCHに変換。"""
    chroma = math.hypot(color.a, color.b)
    hue = math.degrees(math.atan2(color.b, color.a)) % 360.0
    return LCH(color.l, chroma, hue)


def lch_to_lab(color: LCH) -> LAB:
    """LCHをLABに変換。負のクロマは0として扱う。"""
    chroma = max(0.0, color.c)
    hue = math.radians(color.h)
    return LAB(color.l, chroma * math.cos(hue), chroma * math.sin(hue))


def rgb_to_lch(color: RGB) -> LCH:
    return lab_to_lch(rgb_to_lab(color))


def lch_to_rgb(color: LCH) -> RGB:
    return lab_to_rgb(lch_to_lab(color))
