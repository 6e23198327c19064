"""色空間変換（NumPyベースのバッチ処理）。

RGB↔HSL, RGB↔LAB↔LCH 変換を画像全体に対して高速に実行する。
配列は末尾の軸がチャンネル (..., 3) であれば任意の形状を受け付ける。
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

# D65 白色点
_XN, _YN, _ZN = 0.95047, 1.00000, 1.08883

_LAB_EPSILON = 216.0 / 24389.0
_LAB_KAPPA = 24389.0 / 27.0


def srgb_to_linear_batch(rgb_array: npt.NDArray) -> npt.NDArray[np.float64]:
    """sRGB (0-255) をリニアRGB (0〜1) に一括変換。"""
    rgb_float = np.asarray(rgb_array, dtype=np.float64) / 255.0
    return np.where(rgb_float <= 0.04045, rgb_float / 12.92, ((rgb_float + 0.055) / 1.055) ** 2.4)


def linear_to_srgb_batch(linear: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """リニアRGB (0〜1) を sRGB (0-255, 浮動小数点) に一括変換。範囲外はクリップ。"""
    c = np.clip(linear, 0.0, 1.0)
    return np.where(c <= 0.0031308, 12.92 * c, 1.055 * c ** (1.0 / 2.4) - 0.055) * 255.0


def luminance_batch(rgb_array: npt.NDArray) -> npt.NDArray[np.float64]:
    """BT.709 輝度 (0-255 スケール) を一括計算。"""
    rgb = np.asarray(rgb_array, dtype=np.float64)
    return 0.2126 * rgb[..., 0] + 0.7152 * rgb[..., 1] + 0.0722 * rgb[..., 2]


def rgb_to_lab_batch(rgb_array: npt.NDArray) -> npt.NDArray[np.float64]:
    """RGB配列をLAB色空間に一括変換。

    Args:
        rgb_array: (..., 3) の配列 (RGB, 0-255)

    Returns:
        (..., 3) の float64 配列 (LAB)
    """
    linear = srgb_to_linear_batch(rgb_array)
    r, g, b = linear[..., 0], linear[..., 1], linear[..., 2]

    # リニアRGB → XYZ (D65) を白色点で正規化
    x = (0.4124564 * r + 0.3575761 * g + 0.1804375 * b) / _XN
    y = (0.2126729 * r + 0.7151522 * g + 0.0721750 * b) / _YN
    z = (0.0193339 * r + 0.1191920 * g + 0.9503041 * b) / _ZN

    def f(t: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return np.where(t > _LAB_EPSILON, np.cbrt(t), (_LAB_KAPPA * t + 16.0) / 116.0)

    fx, fy, fz = f(x), f(y), f(z)

    l_star = 116.0 * fy - 16.0
    a_star = 500.0 * (fx - fy)
    b_star = 200.0 * (fy - fz)

    return np.stack([l_star, a_star, b_star], axis=-1)


def lab_to_rgb_float_batch(lab_array: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """LAB配列を丸め前のRGB (0-255, float64) に一括変換。"""
    lab = np.asarray(lab_array, dtype=np.float64)
    fy = (lab[..., 0] + 16.0) / 116.0
    fx = lab[..., 1] / 500.0 + fy
    fz = fy - lab[..., 2] / 200.0

    def f_inv(t: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        cubed = t**3
        return np.where(cubed > _LAB_EPSILON, cubed, (116.0 * t - 16.0) / _LAB_KAPPA)

    x = _XN * f_inv(fx)
    y = _YN * f_inv(fy)
    z = _ZN * f_inv(fz)

    # XYZ → リニアRGB
    r_lin = 3.2404542 * x - 1.5371385 * y - 0.4985314 * z
    g_lin = -0.9692660 * x + 1.8760108 * y + 0.0415560 * z
    b_lin = 0.0556434 * x - 0.2040259 * y + 1.0572252 * z

    return linear_to_srgb_batch(np.stack([r_lin, g_lin, b_lin], axis=-1))


def lab_to_rgb_batch(lab_array: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
    """LAB色空間の配列をRGBに一括変換。

    Args:
        lab_array: (..., 3) の float64 配列 (LAB)

    Returns:
        (..., 3) の uint8 配列 (RGB)
    """
    return to_uint8(lab_to_rgb_float_batch(lab_array))


def lab_to_lch_batch(lab_array: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """LAB → LCH (h: 度 [0, 360))。"""
    lab = np.asarray(lab_array, dtype=np.float64)
    chroma = np.hypot(lab[..., 1], lab[..., 2])
    hue = np.degrees(np.arctan2(lab[..., 2], lab[..., 1])) % 360.0
    return np.stack([lab[..., 0], chroma, hue], axis=-1)


def lch_to_lab_batch(lch_array: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """LCH → LAB。負のクロマは0として扱う。"""
    lch = np.asarray(lch_array, dtype=np.float64)
    chroma = np.maximum(lch[..., 1], 0.0)
    hue = np.radians(lch[..., 2])
    return np.stack([lch[..., 0], chroma * np.cos(hue), chroma * np.sin(hue)], axis=-1)


def rgb_to_hsl_batch(rgb_array: npt.NDArray) -> npt.NDArray[np.float64]:
    """RGB配列をHSL色空間に一括変換。

    Args:
        rgb_array: (..., 3) の配列 (RGB, 0-255)

    Returns:
        (..., 3) の float64 配列 (H: 度 [0, 360), S: 0〜1, L: 0〜1)
    """
    rgb = np.asarray(rgb_array, dtype=np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    max_c = np.maximum(np.maximum(r, g), b)
    min_c = np.minimum(np.minimum(r, g), b)
    d = max_c - min_c

    l = (max_c + min_c) / 2.0  # noqa: E741

    # 標準HSL: 明度で正規化した彩度（l が 0 または 1 のときは 0）
    denom = 1.0 - np.abs(2.0 * l - 1.0)
    s = np.divide(d, denom, out=np.zeros_like(d), where=denom > 0)

    h = np.zeros_like(r)
    mask_nonzero = d > 0
    safe_d = np.where(mask_nonzero, d, 1.0)

    mask_r = mask_nonzero & (max_c == r)
    mask_g = mask_nonzero & (max_c == g) & ~mask_r
    mask_b = mask_nonzero & ~mask_r & ~mask_g

    h = np.where(mask_r, ((g - b) / safe_d) % 6.0, h)
    h = np.where(mask_g, (b - r) / safe_d + 2.0, h)
    h = np.where(mask_b, (r - g) / safe_d + 4.0, h)

    return np.stack([(h * 60.0) % 360.0, s, l], axis=-1)


def hsl_to_rgb_float_batch(hsl_array: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """HSL配列を丸め前のRGB (0-255, float64) に一括変換。色相は任意の実数を許容。"""
    hsl = np.asarray(hsl_array, dtype=np.float64)
    h = hsl[..., 0] % 360.0
    s = hsl[..., 1]
    l = hsl[..., 2]  # noqa: E741

    chroma = (1.0 - np.abs(2.0 * l - 1.0)) * s
    h6 = h / 60.0
    x = chroma * (1.0 - np.abs(h6 % 2.0 - 1.0))
    sector = np.minimum(h6.astype(np.int64), 5)
    zero = np.zeros_like(chroma)

    r1 = np.select([sector == 0, sector == 1, sector == 4, sector == 5], [chroma, x, x, chroma], zero)
    g1 = np.select([sector == 0, sector == 1, sector == 2, sector == 3], [x, chroma, chroma, x], zero)
    b1 = np.select([sector == 2, sector == 3, sector == 4, sector == 5], [x, chroma, chroma, x], zero)

    m = l - chroma / 2.0
    return np.stack([r1 + m, g1 + m, b1 + m], axis=-1) * 255.0


def hsl_to_rgb_batch(hsl_array: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
    """HSL配列をRGB (uint8) に一括変換。"""
    return to_uint8(hsl_to_rgb_float_batch(hsl_array))


def rgb_to_lch_batch(rgb_array: npt.NDArray) -> npt.NDArray[np.float64]:
    return lab_to_lch_batch(rgb_to_lab_batch(rgb_array))


def lch_to_rgb_batch(lch_array: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
    return lab_to_rgb_batch(lch_to_lab_batch(lch_array))


def to_uint8(rgb_float: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
    """0-255 の浮動小数点配列を丸めて uint8 に変換。"""
    return np.clip(np.rint(rgb_float), 0, 255).astype(np.uint8)
