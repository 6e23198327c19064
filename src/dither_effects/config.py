"""環境変数ベースの設定とロギング設定。"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from dither_effects.application.dither_service import DEFAULT_PARALLEL_THRESHOLD
from dither_effects.domain.bayer import OrderedMatrix
from dither_effects.domain.distance import DistanceMetric
from dither_effects.domain.kernel import DiffusionAlgorithm
from dither_effects.domain.palette import Palette

ORDERED_ALGORITHM = "bayer"


@dataclass(frozen=True)
class DitherSettings:
    algorithm: str
    matrix_size: int
    palette_name: str
    metric_name: str
    parallel_threshold: int
    workers: int
    log_level: str

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "DitherSettings":
        env = os.environ if env is None else env
        return cls(
            algorithm=env.get("DITHER_ALGORITHM", "floyd-steinberg").lower(),
            matrix_size=int(env.get("DITHER_MATRIX_SIZE", "4")),
            palette_name=env.get("DITHER_PALETTE", "mono"),
            metric_name=env.get("DITHER_METRIC", "weighted-euclidean"),
            parallel_threshold=int(env.get("DITHER_PARALLEL_THRESHOLD", str(DEFAULT_PARALLEL_THRESHOLD))),
            workers=int(env.get("DITHER_WORKERS", "0")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def is_ordered(self) -> bool:
        return self.algorithm == ORDERED_ALGORITHM

    def diffusion_algorithm(self) -> DiffusionAlgorithm:
        return DiffusionAlgorithm.from_name(self.algorithm)

    def ordered_matrix(self) -> OrderedMatrix:
        return OrderedMatrix.bayer(self.matrix_size)

    def palette(self) -> Palette:
        return Palette.from_name(self.palette_name)

    def metric(self) -> DistanceMetric:
        return DistanceMetric.from_name(self.metric_name)

    def validate(self) -> None:
        """設定値をすべて解決し、不正なら例外を送出する。"""
        if self.is_ordered:
            self.ordered_matrix()
        else:
            self.diffusion_algorithm()
        self.palette()
        self.metric()


def configure_logging(level: str = "INFO") -> logging.Logger:
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return logging.getLogger("dither_effects")
