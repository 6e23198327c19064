"""色調整エフェクト。

色相回転・明度・彩度・コントラスト・グラデーションマップ等を
(H, W, 3) uint8 配列に適用する。どの色空間を使うかは各エフェクトが決める。
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

import numpy as np
import numpy.typing as npt

from dither_effects.application.dither_service import ensure_rgb_array
from dither_effects.domain.palette import ColorLike, to_rgb
from dither_effects.infrastructure.color_space import (
    hsl_to_rgb_batch,
    lch_to_rgb_batch,
    rgb_to_hsl_batch,
    rgb_to_lch_batch,
    to_uint8,
)

Effect = Callable[..., npt.NDArray[np.uint8]]


def rotate_hue(rgb_array: npt.ArrayLike, degrees: float) -> npt.NDArray[np.uint8]:
    """HSL色相を degrees だけ回転。"""
    hsl = rgb_to_hsl_batch(ensure_rgb_array(rgb_array))
    hsl[..., 0] = (hsl[..., 0] + degrees) % 360.0
    return hsl_to_rgb_batch(hsl)


def brighten(rgb_array: npt.ArrayLike, amount: float) -> npt.NDArray[np.uint8]:
    """HSL明度に amount (-1.0〜1.0) を加算。-1.0 で黒、1.0 で白。"""
    hsl = rgb_to_hsl_batch(ensure_rgb_array(rgb_array))
    hsl[..., 2] = np.clip(hsl[..., 2] + amount, 0.0, 1.0)
    return hsl_to_rgb_batch(hsl)


def saturate(rgb_array: npt.ArrayLike, amount: float) -> npt.NDArray[np.uint8]:
    """HSL彩度に amount (-1.0〜1.0) を加算。-1.0 でグレースケール。"""
    hsl = rgb_to_hsl_batch(ensure_rgb_array(rgb_array))
    hsl[..., 1] = np.clip(hsl[..., 1] + amount, 0.0, 1.0)
    return hsl_to_rgb_batch(hsl)


def contrast(rgb_array: npt.ArrayLike, amount: float) -> npt.NDArray[np.uint8]:
    """中間値128を軸にコントラストを変更。

    1.0 より大きいと強調、0〜1 で低減、負の値で反転に向かう（-1.0 で反転）。
    """
    rgb = ensure_rgb_array(rgb_array).astype(np.float64)
    return to_uint8((rgb - 128.0) * amount + 128.0)


def invert(rgb_array: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """色を反転。contrast(-1.0) と同じ。"""
    return contrast(rgb_array, -1.0)


def gradient_map(
    rgb_array: npt.ArrayLike,
    stops: Sequence[tuple[ColorLike, float]],
) -> npt.NDArray[np.uint8]:
    """HSL明度に応じてグラデーションの色に置き換える。

    Args:
        rgb_array: (H, W, 3) の uint8 配列
        stops: (色, しきい値 0〜1) のリスト。順不同（しきい値でソートする）

    Returns:
        変換後の (H, W, 3) uint8 配列。最初のしきい値未満は先頭の色、
        隣接する2つのしきい値の間は線形補間、全しきい値以上は元の色のまま。

    Raises:
        ValueError: stops が空の場合
    """
    if not stops:
        raise ValueError("gradient map needs at least one stop")

    ordered = sorted(((to_rgb(color), float(threshold)) for color, threshold in stops), key=lambda s: s[1])
    colors = np.array([c.to_tuple() for c, _ in ordered], dtype=np.float64)
    thresholds = np.array([t for _, t in ordered], dtype=np.float64)

    rgb = ensure_rgb_array(rgb_array)
    lightness = rgb_to_hsl_batch(rgb)[..., 2]

    # l < thresholds[idx] を満たす最初のストップ
    idx = np.searchsorted(thresholds, lightness, side="right")
    unmapped = idx >= len(ordered)
    first = idx == 0

    curr = np.minimum(idx, len(ordered) - 1)
    prev = np.maximum(curr - 1, 0)
    span = thresholds[curr] - thresholds[prev]
    ratio = np.divide(
        lightness - thresholds[prev], span, out=np.ones_like(lightness), where=span > 0
    )
    ratio = np.where(first, 1.0, ratio)[..., np.newaxis]

    blended = colors[prev] * (1.0 - ratio) + colors[curr] * ratio
    result = to_uint8(blended)
    result[unmapped] = rgb[unmapped]
    return result


def quantize_hue(rgb_array: npt.ArrayLike, hues: Sequence[float]) -> npt.NDArray[np.uint8]:
    """LCH色相を最も近い指定色相に揃える。明度と彩度は保つ。

    hues が空なら元の画像をそのまま返す。
    """
    rgb = ensure_rgb_array(rgb_array)
    if not hues:
        return rgb.copy()

    lch = rgb_to_lch_batch(rgb)
    targets = np.asarray(hues, dtype=np.float64) % 360.0
    distance = np.abs(lch[..., 2, np.newaxis] - targets)
    lch[..., 2] = targets[np.argmin(distance, axis=-1)]
    return lch_to_rgb_batch(lch)


def multiply_hue(rgb_array: npt.ArrayLike, factor: float) -> npt.NDArray[np.uint8]:
    """LCH色相に factor を掛ける。"""
    lch = rgb_to_lch_batch(ensure_rgb_array(rgb_array))
    lch[..., 2] = (lch[..., 2] * factor) % 360.0
    return lch_to_rgb_batch(lch)


def apply_effects(
    rgb_array: npt.ArrayLike,
    effects: Iterable[tuple[Effect, dict[str, Any]]],
) -> npt.NDArray[np.uint8]:
    """(エフェクト関数, キーワード引数) の列を順に適用。"""
    result = ensure_rgb_array(rgb_array)
    for effect, kwargs in effects:
        result = effect(result, **kwargs)
    return result
