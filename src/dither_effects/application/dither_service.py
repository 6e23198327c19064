"""ディザリング実行ユースケース。

画像配列 (H, W, 3) に対する誤差拡散・組織的ディザを実行するサービス。
パレットと距離メトリクスはインスタンスごとに注入する。
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Union

import numpy as np
import numpy.typing as npt

from dither_effects.domain.bayer import OrderedMatrix
from dither_effects.domain.distance import DistanceMetric
from dither_effects.domain.dithering import (
    ORDERED_COLOR_SPREAD,
    ORDERED_MONO_MIDPOINT,
    ORDERED_MONO_SPREAD,
    DitherAlgorithm,
    ErrorDiffusionDither,
    PaletteLike,
    Pixels,
    as_palette,
)
from dither_effects.domain.errors import InvalidKernelError
from dither_effects.domain.kernel import DiffusionAlgorithm, DiffusionKernel
from dither_effects.domain.palette import MONO_PALETTE, Palette
from dither_effects.infrastructure.color_space import luminance_batch
from dither_effects.infrastructure.palette_search import mono_indices, nearest_indices, palette_array

logger = logging.getLogger(__name__)

AlgorithmLike = Union[DiffusionAlgorithm, DiffusionKernel, str]

# この画素数以上の画像は組織的ディザを行単位でスレッド並列化する
DEFAULT_PARALLEL_THRESHOLD = 512 * 512
# 並列化時の1バンドあたりの行数
BAND_ROWS = 64


def resolve_kernel(algorithm: AlgorithmLike) -> DiffusionKernel:
    """アルゴリズム指定（enum / 名前 / カーネル）をカーネルに解決。

    Raises:
        ValueError: 未知のアルゴリズム名の場合
        InvalidKernelError: いずれの型でもない場合
    """
    if isinstance(algorithm, DiffusionKernel):
        return algorithm
    if isinstance(algorithm, str):
        algorithm = DiffusionAlgorithm.from_name(algorithm)
    if not isinstance(algorithm, DiffusionAlgorithm):
        raise InvalidKernelError(f"expected an algorithm name or DiffusionKernel, got {type(algorithm).__name__}")
    return algorithm.kernel


def ensure_rgb_array(image: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """画像を (H, W, 3) の uint8 配列に正規化。グレースケール (H, W) はRGBに展開。

    Raises:
        ValueError: 形状または値域が不正な場合
    """
    array = np.asarray(image)
    if array.ndim == 2:
        array = np.repeat(array[:, :, np.newaxis], 3, axis=2)
    if array.ndim != 3 or array.shape[2] != 3:
        raise ValueError(f"expected an (H, W, 3) RGB array, got shape {array.shape}")
    if array.dtype != np.uint8:
        if array.size and (array.min() < 0 or array.max() > 255):
            raise ValueError("RGB values must lie within 0-255")
        array = array.astype(np.uint8)
    return array


class DitherService:
    """ディザリングサービス。

    誤差拡散は domain 層の ErrorDiffusionDither で逐次処理し、
    組織的ディザは画素独立なので NumPy で一括処理する。
    """

    def __init__(
        self,
        palette: PaletteLike = MONO_PALETTE,
        metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
        parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
        workers: int | None = None,
    ) -> None:
        self._palette = as_palette(palette)
        self._metric = metric
        self._parallel_threshold = parallel_threshold
        self._workers = workers or os.cpu_count() or 1

    @property
    def palette(self) -> Palette:
        return self._palette

    @property
    def metric(self) -> DistanceMetric:
        return self._metric

    def dither_array(
        self,
        rgb_array: npt.ArrayLike,
        algorithm: AlgorithmLike = DiffusionAlgorithm.FLOYD_STEINBERG,
    ) -> npt.NDArray[np.uint8]:
        """NumPy配列に対して誤差拡散ディザリングを実行。

        Args:
            rgb_array: (H, W, 3) の uint8 配列
            algorithm: アルゴリズム名 / DiffusionAlgorithm / DiffusionKernel

        Returns:
            ディザリング済みの (H, W, 3) uint8 配列
        """
        kernel = resolve_kernel(algorithm)
        ditherer: DitherAlgorithm = ErrorDiffusionDither(kernel, self._palette, self._metric)
        array = ensure_rgb_array(rgb_array)
        h, w = array.shape[:2]

        logger.debug(
            "error diffusion: %dx%d kernel=%s palette=%d metric=%s",
            w, h, kernel.name, len(self._palette), self._metric.value,
        )
        started = time.perf_counter()

        # NumPy配列 → Pure Pythonリスト（domain層のインターフェース）
        pixels: Pixels = [[tuple(px) for px in row] for row in array.tolist()]
        result = ditherer.dither(pixels, w, h)

        logger.debug("error diffusion finished in %.3fs", time.perf_counter() - started)
        return np.array(result, dtype=np.uint8).reshape(h, w, 3)

    def ordered_array(
        self,
        rgb_array: npt.ArrayLike,
        matrix_size: int = 4,
    ) -> npt.NDArray[np.uint8]:
        """NumPy配列に対してBayer行列の組織的ディザリングを実行。

        出力は domain.dithering.ordered_pixel を全画素に適用した結果と一致する。
        大きな画像は行バンドに分けてスレッドで並列処理する。

        Args:
            rgb_array: (H, W, 3) の uint8 配列
            matrix_size: Bayer行列のサイズ (2, 4, 8, 16)

        Returns:
            ディザリング済みの (H, W, 3) uint8 配列
        """
        matrix = OrderedMatrix.bayer(matrix_size)
        array = ensure_rgb_array(rgb_array)
        h, w = array.shape[:2]
        indices = np.empty((h, w), dtype=np.intp)

        bands = [(y0, min(h, y0 + BAND_ROWS)) for y0 in range(0, h, BAND_ROWS)]
        parallel = h * w >= self._parallel_threshold and self._workers > 1 and len(bands) > 1

        logger.debug(
            "ordered dither: %dx%d matrix=%d palette=%d metric=%s parallel=%s",
            w, h, matrix_size, len(self._palette), self._metric.value, parallel,
        )
        started = time.perf_counter()

        def run_band(band: tuple[int, int]) -> tuple[int, int, npt.NDArray[np.intp]]:
            y0, y1 = band
            return y0, y1, self._ordered_band(array[y0:y1], y0, matrix)

        if parallel:
            with ThreadPoolExecutor(max_workers=self._workers) as executor:
                for y0, y1, band_indices in executor.map(run_band, bands):
                    indices[y0:y1] = band_indices
        else:
            for band in bands:
                y0, y1, band_indices = run_band(band)
                indices[y0:y1] = band_indices

        logger.debug("ordered dither finished in %.3fs", time.perf_counter() - started)
        return palette_array(self._palette)[indices]

    def _ordered_band(
        self,
        band: npt.NDArray[np.uint8],
        y_offset: int,
        matrix: OrderedMatrix,
    ) -> npt.NDArray[np.intp]:
        """行バンド1つ分のパレットインデックスを計算。"""
        rows, cols = band.shape[:2]
        n = matrix.size
        thresholds = np.array(matrix.thresholds, dtype=np.float64)
        ys = (np.arange(y_offset, y_offset + rows) % n)[:, np.newaxis]
        xs = (np.arange(cols) % n)[np.newaxis, :]
        bias = thresholds[ys, xs] - 0.5

        if self._palette.is_mono:
            return mono_indices(
                luminance_batch(band) + bias * ORDERED_MONO_SPREAD, self._palette, ORDERED_MONO_MIDPOINT
            )

        offset = bias * ORDERED_COLOR_SPREAD
        biased = np.clip(np.rint(band.astype(np.float64) + offset[:, :, np.newaxis]), 0, 255)
        return nearest_indices(biased.astype(np.int64), self._palette, self._metric)


def dither_error_diffusion(
    image: npt.ArrayLike,
    algorithm: AlgorithmLike,
    palette: PaletteLike,
    metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
) -> npt.NDArray[np.uint8]:
    """誤差拡散ディザリング。

    Raises:
        EmptyPaletteError: パレットが空の場合
        InvalidKernelError: カーネルが不正な場合
    """
    return DitherService(palette, metric).dither_array(image, algorithm)


def dither_ordered(
    image: npt.ArrayLike,
    matrix_size: int,
    palette: PaletteLike,
    metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
) -> npt.NDArray[np.uint8]:
    """Bayer行列による組織的ディザリング。

    Raises:
        EmptyPaletteError: パレットが空の場合
        UnsupportedMatrixSizeError: 行列サイズが 2, 4, 8, 16 以外の場合
    """
    return DitherService(palette, metric).ordered_array(image, matrix_size)
