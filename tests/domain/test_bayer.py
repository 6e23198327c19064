"""bayer.py のテスト。"""

import pytest

from dither_effects.domain.bayer import SUPPORTED_SIZES, OrderedMatrix, bayer_index_matrix
from dither_effects.domain.errors import UnsupportedMatrixSizeError


class TestBayerIndexMatrix:
    def test_size_2(self) -> None:
        assert bayer_index_matrix(2) == [[0, 2], [3, 1]]

    def test_size_4(self) -> None:
        assert bayer_index_matrix(4) == [
            [0, 8, 2, 10],
            [12, 4, 14, 6],
            [3, 11, 1, 9],
            [15, 7, 13, 5],
        ]

    @pytest.mark.parametrize("size", SUPPORTED_SIZES)
    def test_is_permutation(self, size: int) -> None:
        values = sorted(v for row in bayer_index_matrix(size) for v in row)
        assert values == list(range(size * size))


class TestOrderedMatrix:
    @pytest.mark.parametrize("size", SUPPORTED_SIZES)
    def test_thresholds_in_open_unit_interval(self, size: int) -> None:
        matrix = OrderedMatrix.bayer(size)
        assert matrix.size == size
        for row in matrix.thresholds:
            assert len(row) == size
            for t in row:
                assert 0.0 < t < 1.0

    def test_normalization(self) -> None:
        matrix = OrderedMatrix.bayer(2)
        assert matrix.thresholds == ((0.125, 0.625), (0.875, 0.375))

    def test_tiles_across_image(self) -> None:
        matrix = OrderedMatrix.bayer(4)
        for y in range(4):
            for x in range(4):
                assert matrix.at(x, y) == matrix.at(x + 4, y) == matrix.at(x, y + 8)

    def test_at_uses_row_then_column(self) -> None:
        matrix = OrderedMatrix.bayer(4)
        # index[0][1] = 8, index[1][0] = 12
        assert matrix.at(1, 0) == pytest.approx(8.5 / 16)
        assert matrix.at(0, 1) == pytest.approx(12.5 / 16)

    def test_cached_instance(self) -> None:
        assert OrderedMatrix.bayer(8) is OrderedMatrix.bayer(8)

    @pytest.mark.parametrize("size", [0, 1, 3, 5, 32])
    def test_unsupported_size(self, size: int) -> None:
        with pytest.raises(UnsupportedMatrixSizeError) as excinfo:
            OrderedMatrix.bayer(size)
        assert excinfo.value.size == size
