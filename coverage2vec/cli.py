"""Command-line entry point: coverage raster in, polygon layer out."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from coverage2vec.config import settings
from coverage2vec.engine.config import SCHEDULE_CONVERGE, SCHEDULE_FIXED, PipelineConfig
from coverage2vec.errors import Coverage2VecError

logger = logging.getLogger("coverage2vec")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coverage2vec",
        description="Convert an antialiased coverage raster into sub-pixel accurate polygons",
    )
    parser.add_argument("-i", "--input", required=True, help="Input coverage raster (band 1, 8 bit)")
    parser.add_argument("-o", "--output", required=True, help="Output vector file")
    parser.add_argument("-c", "--combined", help="Combined coverage raster for partial-pixel blending")
    parser.add_argument("-l", "--layer", default=settings.coverage2vec_layer, help="Output layer name")
    parser.add_argument("--driver", default=settings.coverage2vec_driver, help="Output vector driver")
    for name in ("x", "y", "z"):
        parser.add_argument(
            f"-{name}",
            dest=name,
            type=int,
            default=-1,
            help=f"Value of the integer '{name}' field (omitted when negative)",
        )
    parser.add_argument(
        "--complement",
        action="store_true",
        help="Vectorize the combined coverage minus the input",
    )
    parser.add_argument("--append", action="store_true", help="Append to an existing layer")
    parser.add_argument(
        "--max-error",
        type=float,
        default=settings.coverage2vec_max_error,
        help="Error tolerance of the final tuning pass (fraction of 255)",
    )
    parser.add_argument(
        "--schedule",
        choices=[SCHEDULE_FIXED, SCHEDULE_CONVERGE],
        default=settings.coverage2vec_schedule,
        help="Pass schedule",
    )
    parser.add_argument(
        "--log-level",
        default=settings.coverage2vec_log_level,
        help="Logging level (debug, info, warning, error)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    from coverage2vec.driver import vectorize
    from coverage2vec.io.raster import read_source
    from coverage2vec.io.vector import LayerSink

    attributes = {name: getattr(args, name) for name in ("x", "y", "z") if getattr(args, name) >= 0}
    config = PipelineConfig(flush_rows=settings.coverage2vec_flush_rows)

    try:
        config.schedule(args.schedule)
        source = read_source(args.input, combined=args.combined, complement=args.complement)
        with LayerSink(
            args.output,
            layer=args.layer,
            driver=args.driver,
            crs=source.crs,
            append=args.append,
        ) as sink:
            vectorize(
                source,
                sink,
                max_error=args.max_error,
                schedule=args.schedule,
                attributes=attributes,
                config=config,
            )
    except Coverage2VecError as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
