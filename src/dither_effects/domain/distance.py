"""色距離メトリクス。

すべて (RGB, RGB) -> float の純粋関数。パレット検索やディザラーの
ロジックを変えずに差し替えられる。
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable

from dither_effects.domain.color import LAB, RGB, rgb_to_lab

DistanceFunction = Callable[[RGB, RGB], float]


# --- RGB 重み付きユークリッド距離 ---


def weighted_euclidean(color1: RGB, color2: RGB) -> float:
    """赤の平均値で重みを切り替えるRGBユークリッド距離。

    平均R < 128 なら (2, 4, 3)、それ以外は (3, 4, 2)。
    """
    mean_r = (color1.r + color2.r) / 2.0
    if mean_r < 128.0:
        w_r, w_g, w_b = 2, 4, 3
    else:
        w_r, w_g, w_b = 3, 4, 2

    dr = color1.r - color2.r
    dg = color1.g - color2.g
    db = color1.b - color2.b
    return math.sqrt(w_r * dr * dr + w_g * dg * dg + w_b * db * db)


# --- LAB 系の色差 ---


def delta_e76(lab1: LAB, lab2: LAB) -> float:
    """CIE76 色差（LAB空間のユークリッド距離）。"""
    return math.sqrt((lab1.l - lab2.l) ** 2 + (lab1.a - lab2.a) ** 2 + (lab1.b - lab2.b) ** 2)


def delta_e94(lab1: LAB, lab2: LAB) -> float:
    """CIE94 色差（グラフィックアーツ定数）。

    教科書の式は基準色のクロマを重みに使うため非対称になる。
    ここでは両者の幾何平均クロマを使い、d(a, b) == d(b, a) を保つ。
    """
    k1, k2 = 0.045, 0.015

    c1 = math.hypot(lab1.a, lab1.b)
    c2 = math.hypot(lab2.a, lab2.b)

    delta_l = lab1.l - lab2.l
    delta_c = c1 - c2
    delta_a = lab1.a - lab2.a
    delta_b = lab1.b - lab2.b
    delta_h_sq = max(0.0, delta_a**2 + delta_b**2 - delta_c**2)

    c_mean = math.sqrt(c1 * c2)
    sc = 1.0 + k1 * c_mean
    sh = 1.0 + k2 * c_mean

    return math.sqrt(delta_l**2 + (delta_c / sc) ** 2 + delta_h_sq / sh**2)


def delta_e2000(lab1: LAB, lab2: LAB) -> float:
    """CIEDE2000色差を計算。

    参考: "The CIEDE2000 Color-Difference Formula" (Sharma et al., 2005)
    """
    l1, a1, b1 = lab1.l, lab1.a, lab1.b
    l2, a2, b2 = lab2.l, lab2.a, lab2.b

    # Step 1: a' と C', h'
    c1_ab = math.sqrt(a1**2 + b1**2)
    c2_ab = math.sqrt(a2**2 + b2**2)
    c_ab_mean = (c1_ab + c2_ab) / 2.0

    c_ab_mean_7 = c_ab_mean**7
    g = 0.5 * (1.0 - math.sqrt(c_ab_mean_7 / (c_ab_mean_7 + 25.0**7)))

    a1_prime = a1 * (1.0 + g)
    a2_prime = a2 * (1.0 + g)

    c1_prime = math.sqrt(a1_prime**2 + b1**2)
    c2_prime = math.sqrt(a2_prime**2 + b2**2)

    h1_prime = math.degrees(math.atan2(b1, a1_prime)) % 360.0
    h2_prime = math.degrees(math.atan2(b2, a2_prime)) % 360.0

    # Step 2: Delta値
    delta_l_prime = l2 - l1
    delta_c_prime = c2_prime - c1_prime

    if c1_prime * c2_prime == 0.0:
        delta_h_prime = 0.0
    elif abs(h2_prime - h1_prime) <= 180.0:
        delta_h_prime = h2_prime - h1_prime
    elif h2_prime - h1_prime > 180.0:
        delta_h_prime = h2_prime - h1_prime - 360.0
    else:
        delta_h_prime = h2_prime - h1_prime + 360.0

    delta_H_prime = 2.0 * math.sqrt(c1_prime * c2_prime) * math.sin(
        math.radians(delta_h_prime / 2.0)
    )

    # Step 3: 重み関数と回転項
    l_prime_mean = (l1 + l2) / 2.0
    c_prime_mean = (c1_prime + c2_prime) / 2.0

    if c1_prime * c2_prime == 0.0:
        h_prime_mean = h1_prime + h2_prime
    elif abs(h1_prime - h2_prime) <= 180.0:
        h_prime_mean = (h1_prime + h2_prime) / 2.0
    elif h1_prime + h2_prime < 360.0:
        h_prime_mean = (h1_prime + h2_prime + 360.0) / 2.0
    else:
        h_prime_mean = (h1_prime + h2_prime - 360.0) / 2.0

    t = (
        1.0
        - 0.17 * math.cos(math.radians(h_prime_mean - 30.0))
        + 0.24 * math.cos(math.radians(2.0 * h_prime_mean))
        + 0.32 * math.cos(math.radians(3.0 * h_prime_mean + 6.0))
        - 0.20 * math.cos(math.radians(4.0 * h_prime_mean - 63.0))
    )

    sl = 1.0 + 0.015 * (l_prime_mean - 50.0) ** 2 / math.sqrt(
        20.0 + (l_prime_mean - 50.0) ** 2
    )
    sc = 1.0 + 0.045 * c_prime_mean
    sh = 1.0 + 0.015 * c_prime_mean * t

    c_prime_mean_7 = c_prime_mean**7
    rc = 2.0 * math.sqrt(c_prime_mean_7 / (c_prime_mean_7 + 25.0**7))
    delta_theta = 30.0 * math.exp(
        -(((h_prime_mean - 275.0) / 25.0) ** 2)
    )
    rt = -math.sin(math.radians(2.0 * delta_theta)) * rc

    return math.sqrt(
        (delta_l_prime / sl) ** 2
        + (delta_c_prime / sc) ** 2
        + (delta_H_prime / sh) ** 2
        + rt * (delta_c_prime / sc) * (delta_H_prime / sh)
    )


def cie76(color1: RGB, color2: RGB) -> float:
    return delta_e76(rgb_to_lab(color1), rgb_to_lab(color2))


def cie94(color1: RGB, color2: RGB) -> float:
    return delta_e94(rgb_to_lab(color1), rgb_to_lab(color2))


def ciede2000(color1: RGB, color2: RGB) -> float:
    return delta_e2000(rgb_to_lab(color1), rgb_to_lab(color2))


class DistanceMetric(Enum):
    """差し替え可能な距離メトリクス。"""

    WEIGHTED_EUCLIDEAN = "weighted-euclidean"
    CIE76 = "cie76"
    CIE94 = "cie94"
    CIEDE2000 = "ciede2000"

    @property
    def function(self) -> DistanceFunction:
        return _METRIC_FUNCTIONS[self]

    @property
    def uses_lab(self) -> bool:
        return self is not DistanceMetric.WEIGHTED_EUCLIDEAN

    def __call__(self, color1: RGB, color2: RGB) -> float:
        return _METRIC_FUNCTIONS[self](color1, color2)

    @classmethod
    def from_name(cls, name: str) -> DistanceMetric:
        """"CIEDE2000" / "weighted_euclidean" 等の表記ゆれを許容して解決。"""
        key = name.strip().lower().replace("_", "-").replace(" ", "-")
        for metric in cls:
            if metric.value == key:
                return metric
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"unknown distance metric {name!r}; choose from {choices}")


_METRIC_FUNCTIONS: dict[DistanceMetric, DistanceFunction] = {
    DistanceMetric.WEIGHTED_EUCLIDEAN: weighted_euclidean,
    DistanceMetric.CIE76: cie76,
    DistanceMetric.CIE94: cie94,
    DistanceMetric.CIEDE2000: ciede2000,
}
