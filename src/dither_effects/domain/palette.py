"""カラーパレット定義と最近傍色検索。

Pure Pythonで実装（外部ライブラリ依存なし）。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from dither_effects.domain.color import BLACK, RGB, WHITE, luminance
from dither_effects.domain.distance import DistanceMetric
from dither_effects.domain.errors import EmptyPaletteError

ColorLike = Union[RGB, str, tuple[int, int, int]]

# モノクロ判定のしきい値（BT.709輝度, 0-255スケール）
MONO_THRESHOLD = 128.0


def to_rgb(value: ColorLike) -> RGB:
    """RGB / 16進文字列 / (r, g, b) タプルをRGBに変換。"""
    if isinstance(value, RGB):
        return value
    if isinstance(value, str):
        return RGB.from_hex(value)
    r, g, b = value
    return RGB(int(r), int(g), int(b))


@dataclass(frozen=True)
class Palette:
    """順序付きの出力色集合。少なくとも1色を持つ。

    不変オブジェクトのため、並行する検索からロックなしで共有できる。
    """

    colors: tuple[RGB, ...]

    def __post_init__(self) -> None:
        colors = tuple(to_rgb(c) for c in self.colors)
        if not colors:
            raise EmptyPaletteError()
        object.__setattr__(self, "colors", colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)

    def __getitem__(self, index: int) -> RGB:
        return self.colors[index]

    def __contains__(self, color: object) -> bool:
        return color in self.colors

    @property
    def is_mono(self) -> bool:
        """黒と白の2色だけで構成されるか（順序は問わない）。"""
        return len(self.colors) == 2 and set(self.colors) == {BLACK, WHITE}

    def to_tuples(self) -> list[tuple[int, int, int]]:
        return [c.to_tuple() for c in self.colors]

    # --- ファクトリ ---

    @classmethod
    def custom(cls, colors: Iterable[ColorLike]) -> Palette:
        """任意の色リストからパレットを生成。

        Raises:
            EmptyPaletteError: 色が1つもない場合
            ValueError: 16進文字列が不正な場合
        """
        return cls(tuple(to_rgb(c) for c in colors))

    @classmethod
    def from_hex(cls, *values: str) -> Palette:
        return cls.custom(values)

    @classmethod
    def mono(cls) -> Palette:
        """1bit (黒・白) パレット。"""
        return cls((BLACK, WHITE))

    @classmethod
    def web_safe(cls) -> Palette:
        """Webセーフ216色。各チャンネル 0, 51, ..., 255 の組み合わせ（赤が最上位）。"""
        levels = range(0, 256, 51)
        return cls(tuple(RGB(r, g, b) for r in levels for g in levels for b in levels))

    @classmethod
    def eight_bit(cls) -> Palette:
        """8bit (3-3-2) カラー256色。赤・緑8段階、青4段階。"""
        levels8 = [round(i * 255 / 7) for i in range(8)]
        levels4 = [round(i * 255 / 3) for i in range(4)]
        return cls(tuple(RGB(r, g, b) for r in levels8 for g in levels8 for b in levels4))

    @classmethod
    def from_name(cls, name: str) -> Palette:
        """"mono" / "web-safe" / "eight-bit" または カンマ区切りの16進リストから生成。"""
        key = name.strip().lower().replace("_", "-")
        if key in ("mono", "1bit", "1-bit", "bw"):
            return cls.mono()
        if key in ("web-safe", "websafe", "web"):
            return cls.web_safe()
        if key in ("eight-bit", "8bit", "8-bit"):
            return cls.eight_bit()
        return cls.custom(part for part in name.split(",") if part.strip())

    # --- 最近傍検索 ---

    def nearest_index(
        self,
        color: RGB,
        metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
    ) -> int:
        """最も近い色のインデックスを線形探索で返す。

        同距離の場合は先に宣言された（小さいインデックスの）色を選ぶ。
        モノクロパレットでは距離計算をせず輝度しきい値で決める。
        """
        if self.is_mono:
            target = WHITE if luminance(color) >= MONO_THRESHOLD else BLACK
            return self.colors.index(target)

        distance = metric.function
        best_idx = 0
        best_dist = float("inf")
        for i, candidate in enumerate(self.colors):
            dist = distance(color, candidate)
            if dist < best_dist:
                best_dist = dist
                best_idx = i
        return best_idx

    def nearest(
        self,
        color: RGB,
        metric: DistanceMetric = DistanceMetric.WEIGHTED_EUCLIDEAN,
    ) -> tuple[int, RGB]:
        """最も近い色の (インデックス, 色) を返す。"""
        idx = self.nearest_index(color, metric)
        return idx, self.colors[idx]


MONO_PALETTE = Palette.mono()
WEB_SAFE_PALETTE = Palette.web_safe()
EIGHT_BIT_PALETTE = Palette.eight_bit()
