"""エントリーポイント: uv run python -m dither_effects INPUT OUTPUT [options]"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Any, Sequence

from dither_effects.application import effects
from dither_effects.application.dither_service import DitherService
from dither_effects.config import DitherSettings, configure_logging
from dither_effects.domain.errors import DitherError
from dither_effects.infrastructure.image_io import load_image, save_image

logger = logging.getLogger("dither_effects")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dither_effects",
        description="Dither an image against a palette, optionally adjusting its colors first.",
    )
    parser.add_argument("input", help="source image path")
    parser.add_argument("output", help="destination image path")
    parser.add_argument("--algorithm", "-a", help="diffusion algorithm name, or 'bayer' for ordered dithering")
    parser.add_argument("--matrix-size", "-n", type=int, help="Bayer matrix size (2, 4, 8, 16)")
    parser.add_argument("--palette", "-p", help="mono, web-safe, eight-bit, or comma separated hex colors")
    parser.add_argument("--metric", "-m", help="weighted-euclidean, cie76, cie94, ciede2000")
    parser.add_argument("--rotate-hue", type=float, help="rotate hue by degrees before dithering")
    parser.add_argument("--brighten", type=float, help="lightness offset (-1.0 to 1.0)")
    parser.add_argument("--saturate", type=float, help="saturation offset (-1.0 to 1.0)")
    parser.add_argument("--contrast", type=float, help="contrast factor around mid gray")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    return parser


def settings_from_args(args: argparse.Namespace, base: DitherSettings) -> DitherSettings:
    """コマンドライン引数で環境変数の設定を上書き。"""
    overrides: dict[str, Any] = {}
    if args.algorithm:
        overrides["algorithm"] = args.algorithm.lower()
    if args.matrix_size is not None:
        overrides["matrix_size"] = args.matrix_size
    if args.palette:
        overrides["palette_name"] = args.palette
    if args.metric:
        overrides["metric_name"] = args.metric
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return dataclasses.replace(base, **overrides)


def effect_chain(args: argparse.Namespace) -> list[tuple[effects.Effect, dict[str, Any]]]:
    chain: list[tuple[effects.Effect, dict[str, Any]]] = []
    if args.rotate_hue is not None:
        chain.append((effects.rotate_hue, {"degrees": args.rotate_hue}))
    if args.brighten is not None:
        chain.append((effects.brighten, {"amount": args.brighten}))
    if args.saturate is not None:
        chain.append((effects.saturate, {"amount": args.saturate}))
    if args.contrast is not None:
        chain.append((effects.contrast, {"amount": args.contrast}))
    return chain


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_args(args, DitherSettings.from_env())
        configure_logging(settings.log_level)
        settings.validate()

        service = DitherService(
            settings.palette(),
            settings.metric(),
            parallel_threshold=settings.parallel_threshold,
            workers=settings.workers or None,
        )

        image = load_image(args.input)
        logger.info("Loaded %s (%dx%d)", args.input, image.shape[1], image.shape[0])

        image = effects.apply_effects(image, effect_chain(args))

        if settings.is_ordered:
            logger.info("Ordered dithering with %dx%d Bayer matrix", settings.matrix_size, settings.matrix_size)
            result = service.ordered_array(image, settings.matrix_size)
        else:
            algorithm = settings.diffusion_algorithm()
            logger.info("Error diffusion with %s", algorithm.value)
            result = service.dither_array(image, algorithm)

        save_image(result, args.output)
        logger.info("Saved %s", args.output)
    except (DitherError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
