"""パレット最近傍色のバッチ検索。

Palette.nearest_index と同じ結果（同距離は小さいインデックス優先）を
画像配列全体に対して返す。
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from dither_effects.domain.color import BLACK, RGB, WHITE
from dither_effects.domain.distance import DistanceMetric
from dither_effects.domain.palette import MONO_THRESHOLD, Palette
from dither_effects.infrastructure.color_space import luminance_batch

# 一度に評価する (画素数 × パレット色数) の上限
CHUNK_ELEMENTS = 1 << 22


def palette_array(palette: Palette) -> npt.NDArray[np.uint8]:
    """パレットを (P, 3) の uint8 配列に変換。"""
    return np.array(palette.to_tuples(), dtype=np.uint8).reshape(-1, 3)


def mono_indices(
    luma: npt.NDArray[np.float64],
    palette: Palette,
    threshold: float = MONO_THRESHOLD,
) -> npt.NDArray[np.intp]:
    """輝度がしきい値以上なら白、未満なら黒のインデックス。"""
    white_idx = palette.colors.index(WHITE)
    black_idx = palette.colors.index(BLACK)
    return np.where(luma >= threshold, white_idx, black_idx).astype(np.intp)


def _weighted_euclidean_indices(
    flat: npt.NDArray[np.int64],
    pal: npt.NDArray[np.int64],
) -> npt.NDArray[np.intp]:
    """重み付きユークリッド距離の argmin。整数演算なのでスカラー版と完全に一致する。"""
    n_pal = pal.shape[0]
    step = max(1, CHUNK_ELEMENTS // n_pal)
    out = np.empty(flat.shape[0], dtype=np.intp)

    for start in range(0, flat.shape[0], step):
        px = flat[start:start + step, np.newaxis, :]  # (N, 1, 3)
        diff_sq = (px - pal[np.newaxis, :, :]) ** 2  # (N, P, 3)
        # 平均R < 128 ⇔ R1 + R2 < 256
        low_red = (px[:, :, 0] + pal[np.newaxis, :, 0]) < 256
        w_r = np.where(low_red, 2, 3)
        w_b = np.where(low_red, 3, 2)
        dist_sq = w_r * diff_sq[:, :, 0] + 4 * diff_sq[:, :, 1] + w_b * diff_sq[:, :, 2]
        out[start:start + step] = np.argmin(dist_sq, axis=1)

    return out


def _unique_scalar_indices(
    flat: npt.NDArray[np.int64],
    palette: Palette,
    metric: DistanceMetric,
) -> npt.NDArray[np.intp]:
    """重複を除いた色ごとにスカラー検索を行い、元の画素へ展開。"""
    unique, inverse = np.unique(flat, axis=0, return_inverse=True)
    lookup = np.array(
        [palette.nearest_index(RGB(int(r), int(g), int(b)), metric) for r, g, b in unique],
        dtype=np.intp,
    )
    return lookup[inverse.reshape(-1)]


def nearest_indices(
    rgb_array: npt.NDArray,
    palette: Palette,
    metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
) -> npt.NDArray[np.intp]:
    """各画素の最近傍パレットインデックスを一括計算。

    Args:
        rgb_array: (..., 3) の整数配列 (0-255)
        palette: カラーパレット
        metric: 距離メトリクス

    Returns:
        rgb_array.shape[:-1] 形状のインデックス配列
    """
    rgb = np.asarray(rgb_array)
    shape = rgb.shape[:-1]

    if palette.is_mono:
        return mono_indices(luminance_batch(rgb), palette)

    flat = rgb.reshape(-1, 3).astype(np.int64)
    if flat.shape[0] == 0:
        return np.zeros(shape, dtype=np.intp)

    if metric is DistanceMetric.WEIGHTED_EUCLIDEAN:
        indices = _weighted_euclidean_indices(flat, palette_array(palette).astype(np.int64))
    else:
        # LAB系メトリクスは重い計算なので、ユニーク色だけをスカラー版で評価する
        indices = _unique_scalar_indices(flat, palette, metric)

    return indices.reshape(shape)


def quantize(
    rgb_array: npt.NDArray,
    palette: Palette,
    metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
) -> npt.NDArray[np.uint8]:
    """各画素を最近傍パレット色に置き換えた (..., 3) uint8 配列を返す（ディザなし）。"""
    return palette_array(palette)[nearest_indices(rgb_array, palette, metric)]
