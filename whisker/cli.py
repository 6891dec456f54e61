from __future__ import annotations

import argparse
import logging
import sys

import yaml

from .config import RendererConfig, load_config, load_view
from .errors import WhiskerError
from .renderer import Renderer

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="whisker", description="Render a Mustache template with a YAML or JSON view.")
    parser.add_argument("template", type=str, help="Template file path or '-' for stdin")
    parser.add_argument("view", type=str, nargs="?", default=None, help="YAML/JSON file holding the data view")
    parser.add_argument("-o", "--output", type=str, default="-", help="Output file path or '-' for stdout")
    parser.add_argument("-c", "--config", type=str, default=None, help="Path to YAML renderer configuration")
    parser.add_argument(
        "-p", "--partial", dest="partials", action="append", default=[], metavar="NAME=PATH",
        help="Read partial NAME from PATH (repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_partial_args(values: list[str]) -> dict[str, str]:
    """Turn NAME=PATH arguments into a partial name to template text mapping."""
    partials: dict[str, str] = {}
    for value in values:
        name, sep, path = value.partition("=")
        if not sep or not name or not path:
            raise ValueError(f"Partial must be given as NAME=PATH, got {value!r}")
        with open(path, "r", encoding="utf-8") as f:
            partials[name] = f.read()
    return partials


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    try:
        cfg: RendererConfig = load_config(args.config) if args.config else RendererConfig()
        partials = {**cfg.partials, **parse_partial_args(args.partials)}
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    try:
        if args.template == "-":
            template = sys.stdin.read()
        else:
            with open(args.template, "r", encoding="utf-8") as f:
                template = f.read()
        view = load_view(args.view) if args.view else {}
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Invalid input: %s", e)
        return 2

    renderer = Renderer(config=cfg)
    try:
        output = renderer.render(template, view, partials)
    except WhiskerError as e:
        logger.error("Failed to render %s: %s", args.template, e)
        return 1

    if args.output == "-":
        sys.stdout.write(output)
    else:
        with open(args.output, "w", encoding="utf-8") as dst:
            dst.write(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
