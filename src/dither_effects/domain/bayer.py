"""Bayer（組織的ディザ）しきい値行列。"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from dither_effects.domain.errors import UnsupportedMatrixSizeError

SUPPORTED_SIZES = (2, 4, 8, 16)


def bayer_index_matrix(size: int) -> list[list[int]]:
    """整数のBayerインデックス行列 (0 〜 size²-1) を再帰的に構築。

    M(2n) = [[4M, 4M+2],
             [4M+3, 4M+1]]
    """
    if size == 1:
        return [[0]]
    half = size // 2
    nested = bayer_index_matrix(half)
    quadrant = ((0, 2), (3, 1))
    return [
        [4 * nested[y % half][x % half] + quadrant[y // half][x // half] for x in range(size)]
        for y in range(size)
    ]


@dataclass(frozen=True)
class OrderedMatrix:
    """正規化済みしきい値行列。各値は (index + 0.5) / N² で (0, 1) に収まる。"""

    size: int
    thresholds: tuple[tuple[float, ...], ...]

    def at(self, x: int, y: int) -> float:
        """画像座標 (x, y) のしきい値。行列は画像全体にタイル状に敷き詰める。"""
        return self.thresholds[y % self.size][x % self.size]

    @classmethod
    def bayer(cls, size: int) -> OrderedMatrix:
        """Raises: UnsupportedMatrixSizeError: size が 2, 4, 8, 16 以外の場合"""
        if size not in SUPPORTED_SIZES:
            raise UnsupportedMatrixSizeError(size)
        return _bayer_cached(size)


@lru_cache(maxsize=None)
def _bayer_cached(size: int) -> OrderedMatrix:
    cells = size * size
    index = bayer_index_matrix(size)
    thresholds = tuple(tuple((v + 0.5) / cells for v in row) for row in index)
    return OrderedMatrix(size, thresholds)
