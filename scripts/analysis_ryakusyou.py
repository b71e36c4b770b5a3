#!/usr/bin/env python3
"""Extract abbreviation definitions (「…」という。/ …をいう。) from law sentences.

Usage:
  python3 scripts/analysis_ryakusyou.py \
    --input data/sentences.jsonl \
    --output output.json \
    --py-path path/to/parse_japanese_dependency.py \
    --tmp-directory tmp/

The sentence file holds one record per sentence:
  {"num": <law number>, "chapter": {"article": ..., "paragraph": ...,
   "item": ..., "sub_item": [...], "suppl_provision_title": ...},
   "text": <plain sentence>}

Intermediate files are reused from --tmp-directory unless
--do-not-use-cache is given.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ryakusyou.law_types import DependencyParserError, InputError, UnitNotFoundError
from ryakusyou.pipeline import PipelineConfig, run_pipeline

log = logging.getLogger("analysis_ryakusyou")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract abbreviation/formal-term pairs from law sentences.",
    )
    parser.add_argument(
        "-i", "--input",
        type=Path,
        required=True,
        help="Sentence records (JSON array, or JSON Lines with .jsonl suffix)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Output JSON file for the extracted pairs",
    )
    parser.add_argument(
        "-p", "--py-path",
        type=Path,
        required=True,
        help="Path to the dependency parser script (parse_japanese_dependency.py)",
    )
    parser.add_argument(
        "-t", "--tmp-directory",
        type=Path,
        default=Path("."),
        help="Directory for intermediate files (default: .)",
    )
    parser.add_argument(
        "-d", "--do-not-use-cache",
        action="store_true",
        help="Regenerate intermediate files even if they exist",
    )
    parser.add_argument(
        "--python",
        default=sys.executable,
        help="Python interpreter used to run the parser script",
    )
    parser.add_argument(
        "-w", "--workers",
        type=int,
        default=1,
        help="Threads used to resolve units (default: 1)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose logging",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        input_path=args.input,
        output_path=args.output,
        parser_script=args.py_path,
        tmp_directory=args.tmp_directory,
        python_executable=args.python,
        use_cache=not args.do_not_use_cache,
        workers=max(1, args.workers),
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = config_from_args(args)
    if not config.cache_is_usable():
        if not config.input_path.exists():
            log.error("input file not found: %s", config.input_path)
            return 2
        if not config.parser_script.exists():
            log.error("parser script not found: %s", config.parser_script)
            return 2

    try:
        results = run_pipeline(config)
    except InputError as exc:
        log.error("bad input: %s", exc)
        return 2
    except DependencyParserError as exc:
        log.error("%s", exc)
        if exc.stderr:
            log.error("parser stderr:\n%s", exc.stderr.rstrip())
        return 2
    except UnitNotFoundError as exc:
        log.error("parser output does not match unit cache: %s", exc)
        return 2

    log.info("done: %d unit(s) with definitions", len(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
