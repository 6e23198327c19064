"""ディザリングアルゴリズム定義。

Protocol + 汎用誤差拡散 + 組織的ディザの Pure Python 実装。
domain層のためNumPyに依存しない。
画像配列に対する実行は application/dither_service.py が担当する。
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Protocol, Union

from dither_effects.domain.bayer import OrderedMatrix
from dither_effects.domain.color import BLACK, RGB, WHITE, luminance
from dither_effects.domain.distance import DistanceMetric
from dither_effects.domain.errors import EmptyPaletteError, InvalidKernelError
from dither_effects.domain.kernel import FLOYD_STEINBERG, DiffusionKernel
from dither_effects.domain.palette import MONO_PALETTE, ColorLike, Palette

Pixels = list[list[tuple[int, int, int]]]
"""画像のピクセルデータ [y][x] = (r, g, b)"""

PaletteLike = Union[Palette, Iterable[ColorLike]]

# カラーパレットでの組織的ディザのバイアス幅（チャンネル範囲の1/3）
ORDERED_COLOR_SPREAD = 255.0 / 3.0
# モノクロでの組織的ディザのバイアス幅
ORDERED_MONO_SPREAD = 255.0
# モノクロでの組織的ディザの比較値。一様な白・黒は全行列サイズで不変
ORDERED_MONO_MIDPOINT = 127.5


class DitherAlgorithm(Protocol):
    """ディザリングアルゴリズムのProtocol。"""

    def dither(self, pixels: Pixels, width: int, height: int) -> Pixels:
        """2D画像データにディザリングを適用。

        Args:
            pixels: 画像のピクセルデータ [y][x] = (r, g, b)
            width: 画像の幅
            height: 画像の高さ

        Returns:
            ディザリング済みのピクセルデータ（全画素がパレットの色）
        """
        ...


class DitherState(Enum):
    """誤差拡散ディザラーの状態。"""

    IDLE = "idle"
    SCANNING = "scanning"
    DONE = "done"


def as_palette(palette: PaletteLike | None) -> Palette:
    """Palette 以外の色リストを Palette に変換。

    Raises:
        EmptyPaletteError: 色が1つもない場合
    """
    if palette is None:
        raise EmptyPaletteError()
    if isinstance(palette, Palette):
        return palette
    return Palette.custom(palette)


def _clamp(value: float) -> float:
    """累積値を 0.0-255.0 にクランプ。"""
    if value < 0.0:
        return 0.0
    if value > 255.0:
        return 255.0
    return value


def diffuse_error(
    work: list[list[list[float]]],
    x: int,
    y: int,
    width: int,
    height: int,
    error: tuple[float, float, float],
    weights: list[tuple[int, int, float]],
) -> None:
    """(x, y) の量子化誤差を重みに従って後続画素に加算。

    画像外を指すオフセットの分は捨てる（他の画素に再配分しない）。
    """
    err_r, err_g, err_b = error
    for dx, dy, weight in weights:
        nx = x + dx
        ny = y + dy
        if 0 <= nx < width and 0 <= ny < height:
            cell = work[ny][nx]
            cell[0] += err_r * weight
            cell[1] += err_g * weight
            cell[2] += err_b * weight


class ErrorDiffusionDither:
    """汎用誤差拡散ディザリング。

    カーネル（データ表）を差し替えることで Floyd-Steinberg, Atkinson,
    Sierra 等すべての誤差拡散アルゴリズムを実行する。
    走査は上から下、左から右（蛇行なし）。
    """

    def __init__(
        self,
        kernel: DiffusionKernel = FLOYD_STEINBERG,
        palette: PaletteLike = MONO_PALETTE,
        metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
    ) -> None:
        if not isinstance(kernel, DiffusionKernel):
            raise InvalidKernelError(f"expected a DiffusionKernel, got {type(kernel).__name__}")
        self._kernel = kernel
        self._palette = as_palette(palette)
        self._metric = metric
        self._state = DitherState.IDLE

    @property
    def kernel(self) -> DiffusionKernel:
        return self._kernel

    @property
    def palette(self) -> Palette:
        return self._palette

    @property
    def state(self) -> DitherState:
        return self._state

    def dither(self, pixels: Pixels, width: int, height: int) -> Pixels:
        self._state = DitherState.SCANNING

        # 浮動小数点で作業用コピーを作成（誤差バッファ込み）
        work: list[list[list[float]]] = [
            [[float(c) for c in pixel] for pixel in row] for row in pixels
        ]
        result: Pixels = [[(0, 0, 0)] * width for _ in range(height)]

        weights = self._kernel.weights()
        palette = self._palette
        colors = palette.colors
        metric = self._metric
        # 同じ量子化入力に対する最近傍検索を使い回す（結果は変わらない）
        nearest_cache: dict[tuple[int, int, int], int] = {}

        for y in range(height):
            work_row = work[y]
            out_row = result[y]
            for x in range(width):
                acc = work_row[x]
                old_r = _clamp(acc[0])
                old_g = _clamp(acc[1])
                old_b = _clamp(acc[2])

                key = (int(round(old_r)), int(round(old_g)), int(round(old_b)))
                idx = nearest_cache.get(key)
                if idx is None:
                    idx = palette.nearest_index(RGB(*key), metric)
                    nearest_cache[key] = idx
                nearest = colors[idx]
                out_row[x] = nearest.to_tuple()

                # 量子化誤差
                error = (old_r - nearest.r, old_g - nearest.g, old_b - nearest.b)
                diffuse_error(work, x, y, width, height, error, weights)

        self._state = DitherState.DONE
        return result


def ordered_pixel(
    x: int,
    y: int,
    color: RGB,
    matrix: OrderedMatrix,
    palette: Palette,
    metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
) -> tuple[int, RGB]:
    """組織的ディザの1画素分。(x, y) と入力色としきい値行列のみで決まる。

    Returns:
        (パレットインデックス, 色)
    """
    bias = matrix.at(x, y) - 0.5

    if palette.is_mono:
        target = WHITE if luminance(color) + bias * ORDERED_MONO_SPREAD >= ORDERED_MONO_MIDPOINT else BLACK
        idx = palette.colors.index(target)
        return idx, target

    offset = bias * ORDERED_COLOR_SPREAD
    biased = RGB.from_floats(color.r + offset, color.g + offset, color.b + offset)
    return palette.nearest(biased, metric)


class OrderedDither:
    """Bayer行列による組織的ディザリング。画素間で誤差を持ち越さない。"""

    def __init__(
        self,
        matrix_size: int = 4,
        palette: PaletteLike = MONO_PALETTE,
        metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
    ) -> None:
        self._matrix = OrderedMatrix.bayer(matrix_size)
        self._palette = as_palette(palette)
        self._metric = metric

    @property
    def matrix(self) -> OrderedMatrix:
        return self._matrix

    @property
    def palette(self) -> Palette:
        return self._palette

    def dither(self, pixels: Pixels, width: int, height: int) -> Pixels:
        matrix = self._matrix
        palette = self._palette
        metric = self._metric
        return [
            [
                ordered_pixel(x, y, RGB(*pixels[y][x]), matrix, palette, metric)[1].to_tuple()
                for x in range(width)
            ]
            for y in range(height)
        ]
