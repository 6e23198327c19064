"""誤差拡散カーネルの定義。

各アルゴリズムは1つの固定 DiffusionKernel（データ表）で表現し、
拡散処理そのものは dithering.ErrorDiffusionDither が共通で行う。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from dither_effects.domain.errors import InvalidKernelError

Offset = tuple[int, int, int]
"""(dx, dy, numerator)"""


@dataclass(frozen=True)
class DiffusionKernel:
    """誤差拡散パターン。offsets の各分子を divisor で割った割合を隣接画素に配る。

    不変条件:
        - 全オフセットが走査順で現在画素より後ろ (dy > 0 または dy == 0 かつ dx > 0)
        - 分子の合計 <= divisor（残りは捨てられる）
    """

    offsets: tuple[Offset, ...]
    divisor: int
    name: str = "custom"

    def __post_init__(self) -> None:
        offsets = tuple((int(dx), int(dy), int(n)) for dx, dy, n in self.offsets)
        object.__setattr__(self, "offsets", offsets)
        _validate(offsets, self.divisor, self.name)

    @classmethod
    def custom(cls, offsets: Iterable[Offset], divisor: int, name: str = "custom") -> DiffusionKernel:
        """ユーザー定義カーネルを検証付きで生成。

        Raises:
            InvalidKernelError: 不変条件を満たさない場合
        """
        try:
            entries = tuple(tuple(o) for o in offsets)
        except TypeError as e:
            raise InvalidKernelError(f"kernel {name!r}: offsets must be (dx, dy, numerator) triples") from e
        if any(len(o) != 3 for o in entries):
            raise InvalidKernelError(f"kernel {name!r}: offsets must be (dx, dy, numerator) triples")
        return cls(entries, divisor, name)  # type: ignore[arg-type]

    @property
    def total(self) -> int:
        return sum(n for _, _, n in self.offsets)

    @property
    def ratio(self) -> float:
        """拡散される誤差の割合 (sum(numerator) / divisor)。"""
        return self.total / self.divisor

    @property
    def reach(self) -> tuple[int, int]:
        """(最大 |dx|, 最大 dy)。"""
        return (
            max(abs(dx) for dx, _, _ in self.offsets),
            max(dy for _, dy, _ in self.offsets),
        )

    def weights(self) -> list[tuple[int, int, float]]:
        """(dx, dy, numerator / divisor) のリスト。"""
        return [(dx, dy, n / self.divisor) for dx, dy, n in self.offsets]


def _validate(offsets: tuple[Offset, ...], divisor: int, name: str) -> None:
    if isinstance(divisor, bool) or not isinstance(divisor, int) or divisor <= 0:
        raise InvalidKernelError(f"kernel {name!r}: divisor must be a positive integer, got {divisor!r}")
    if not offsets:
        raise InvalidKernelError(f"kernel {name!r}: at least one offset is required")
    for dx, dy, n in offsets:
        if not (dy > 0 or (dy == 0 and dx > 0)):
            raise InvalidKernelError(
                f"kernel {name!r}: offset ({dx}, {dy}) does not lie after the current pixel in scan order"
            )
        if n < 0:
            raise InvalidKernelError(f"kernel {name!r}: numerator must be non-negative, got {n}")
    total = sum(n for _, _, n in offsets)
    if total > divisor:
        raise InvalidKernelError(
            f"kernel {name!r}: numerators sum to {total}, which exceeds divisor {divisor}"
        )


# --- 既定カーネル ---
#
#   [*] は現在の画素。数値は分子。
#
#   Floyd-Steinberg (/16):        Atkinson (/8):
#           [*]  7                     [*]  1  1
#        3   5   1                  1   1   1
#                                       1

BASIC = DiffusionKernel(((1, 0, 1),), 1, "basic")

FLOYD_STEINBERG = DiffusionKernel(
    (
        (1, 0, 7),
        (-1, 1, 3), (0, 1, 5), (1, 1, 1),
    ),
    16,
    "floyd-steinberg",
)

JARVIS_JUDICE_NINKE = DiffusionKernel(
    (
        (1, 0, 7), (2, 0, 5),
        (-2, 1, 3), (-1, 1, 5), (0, 1, 7), (1, 1, 5), (2, 1, 3),
        (-2, 2, 1), (-1, 2, 3), (0, 2, 5), (1, 2, 3), (2, 2, 1),
    ),
    48,
    "jarvis-judice-ninke",
)

STUCKI = DiffusionKernel(
    (
        (1, 0, 8), (2, 0, 4),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
        (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
    ),
    42,
    "stucki",
)

ATKINSON = DiffusionKernel(
    (
        (1, 0, 1), (2, 0, 1),
        (-1, 1, 1), (0, 1, 1), (1, 1, 1),
        (0, 2, 1),
    ),
    8,
    "atkinson",
)

BURKES = DiffusionKernel(
    (
        (1, 0, 8), (2, 0, 4),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
    ),
    32,
    "burkes",
)

SIERRA = DiffusionKernel(
    (
        (1, 0, 5), (2, 0, 3),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 5), (1, 1, 4), (2, 1, 2),
        (-1, 2, 2), (0, 2, 3), (1, 2, 2),
    ),
    32,
    "sierra",
)

SIERRA_TWO_ROW = DiffusionKernel(
    (
        (1, 0, 4), (2, 0, 3),
        (-2, 1, 1), (-1, 1, 2), (0, 1, 3), (1, 1, 2), (2, 1, 1),
    ),
    16,
    "sierra-two-row",
)

SIERRA_LITE = DiffusionKernel(
    (
        (1, 0, 2),
        (-1, 1, 1), (0, 1, 1),
    ),
    4,
    "sierra-lite",
)


class DiffusionAlgorithm(Enum):
    """名前付き誤差拡散アルゴリズム。値はユーザー向けの名前。"""

    BASIC = "basic"
    FLOYD_STEINBERG = "floyd-steinberg"
    JARVIS_JUDICE_NINKE = "jarvis-judice-ninke"
    STUCKI = "stucki"
    ATKINSON = "atkinson"
    BURKES = "burkes"
    SIERRA = "sierra"
    SIERRA_TWO_ROW = "sierra-two-row"
    SIERRA_LITE = "sierra-lite"

    @property
    def kernel(self) -> DiffusionKernel:
        return _KERNELS[self]

    @classmethod
    def from_name(cls, name: str) -> DiffusionAlgorithm:
        """"Floyd_Steinberg" / "floyd steinberg" 等の表記ゆれを許容して解決。"""
        key = name.strip().lower().replace("_", "-").replace(" ", "-")
        for algorithm in cls:
            if algorithm.value == key:
                return algorithm
        choices = ", ".join(a.value for a in cls)
        raise ValueError(f"unknown diffusion algorithm {name!r}; choose from {choices}")


_KERNELS: dict[DiffusionAlgorithm, DiffusionKernel] = {
    DiffusionAlgorithm.BASIC: BASIC,
    DiffusionAlgorithm.FLOYD_STEINBERG: FLOYD_STEINBERG,
    DiffusionAlgorithm.JARVIS_JUDICE_NINKE: JARVIS_JUDICE_NINKE,
    DiffusionAlgorithm.STUCKI: STUCKI,
    DiffusionAlgorithm.ATKINSON: ATKINSON,
    DiffusionAlgorithm.BURKES: BURKES,
    DiffusionAlgorithm.SIERRA: SIERRA,
    DiffusionAlgorithm.SIERRA_TWO_ROW: SIERRA_TWO_ROW,
    DiffusionAlgorithm.SIERRA_LITE: SIERRA_LITE,
}
