"""Command line entry point for the peering renderer."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from bird_peering.exceptions import CompileError, RenderError
from bird_peering.generator import ConfigGenerator
from bird_peering.templating import TemplateEngine

from .config import load_config

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render BIRD and keepalived configuration")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/bird-peering.yml"),
        help="Path to the peering configuration file",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for generated BIRD files (defaults to bird-directory)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render and print configuration without writing files",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of threads used to render peers",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue past template render failures",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        LOG.error("loading config %s: %s", args.config, exc)
        return 1
    LOG.debug("loaded %d peer(s) from %s", len(config.peers), args.config)

    engine = TemplateEngine()
    try:
        engine.load()
    except CompileError as exc:
        LOG.error("%s", exc)
        return 1

    generator = ConfigGenerator(
        engine,
        config,
        args.output_dir or Path(config.bird_directory),
        dry_run=args.dry_run,
        workers=args.workers,
        keep_going=args.keep_going,
    )
    try:
        result = generator.generate()
    except (RenderError, ValueError) as exc:
        LOG.error("%s", exc)
        return 1

    if args.dry_run:
        for rendered in result.rendered:
            sys.stdout.write(f"# ---- {rendered.output_path} ----\n")
            sys.stdout.write(rendered.config_text)

    return 0 if result.ok else 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
