"""ディザリング処理の例外定義。

すべて構築時に同期的に送出される。走査中に失敗する経路はない。
"""

from __future__ import annotations


class DitherError(Exception):
    """dither_effects の例外の基底クラス。"""


class EmptyPaletteError(DitherError, ValueError):
    """パレットに色が1つもない。"""

    def __init__(self) -> None:
        super().__init__("palette must contain at least one color")


class InvalidKernelError(DitherError, ValueError):
    """誤差拡散カーネルが前方向のみ・重み合計の条件を満たさない。"""


class UnsupportedMatrixSizeError(DitherError, ValueError):
    """Bayer行列のサイズが 2, 4, 8, 16 以外。"""

    def __init__(self, size: int) -> None:
        super().__init__(f"unsupported Bayer matrix size {size}; expected one of 2, 4, 8, 16")
        self.size = size
