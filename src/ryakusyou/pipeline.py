"""End-to-end abbreviation extraction over a batch of law sentences.

Stages:
  1. load sentence records and segment them into units (cached)
  2. run the external dependency parser over the paren-removed texts (cached)
  3. resolve every unit against its token map and write the non-empty results
"""
from __future__ import annotations

import concurrent.futures
import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from ryakusyou.io_utils import (
    load_dependency_data,
    load_records,
    load_units,
    save_parser_input,
    save_units,
    write_json_array,
)
from ryakusyou.law_types import (
    DependencyParserError,
    DependencyToken,
    RyakusyouInfo,
    SentenceRecord,
    SentenceUnit,
    UnitNotFoundError,
)
from ryakusyou.pair_assembler import find_ryakusyou
from ryakusyou.paren_segmenter import segment

log = logging.getLogger(__name__)

INFO_TMP_FILENAME = "analysis_ryakusyou_tmp_info.json"
INPUT_TMP_FILENAME = "analysis_ryakusyou_tmp_input.json"
OUTPUT_TMP_FILENAME = "analysis_ryakusyou_tmp_output.json"


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Paths and switches for one extraction run."""

    input_path: Path
    output_path: Path
    parser_script: Path
    tmp_directory: Path = Path(".")
    python_executable: str = sys.executable
    use_cache: bool = True
    workers: int = 1

    @property
    def info_tmp_path(self) -> Path:
        return self.tmp_directory / INFO_TMP_FILENAME

    @property
    def input_tmp_path(self) -> Path:
        return self.tmp_directory / INPUT_TMP_FILENAME

    @property
    def output_tmp_path(self) -> Path:
        return self.tmp_directory / OUTPUT_TMP_FILENAME

    def cache_is_usable(self) -> bool:
        return (
            self.use_cache
            and self.info_tmp_path.exists()
            and self.output_tmp_path.exists()
        )


# ---------------------------------------------------------------------------
# Stage 1: units
# ---------------------------------------------------------------------------

def build_units(records: Iterable[SentenceRecord]) -> dict[int, SentenceUnit]:
    """Segment every top-level sentence; ids count from 1 in input order."""
    units: dict[int, SentenceUnit] = {}
    counter = 0
    for record in records:
        if record.is_child:
            continue
        for result in segment(record.text):
            counter += 1
            units[counter] = SentenceUnit(
                unit_id=counter,
                law_number=record.law_number,
                clause_locator=record.clause_locator,
                raw_text=result.raw_text,
                remove_paren_text=result.remove_paren_text,
                clauses=result.clauses,
            )
    return units


def load_sentence_records(path: Path) -> list[SentenceRecord]:
    return [SentenceRecord.from_dict(row) for row in load_records(path)]


# ---------------------------------------------------------------------------
# Stage 2: dependency parser
# ---------------------------------------------------------------------------

def run_dependency_parser(
    parser_script: Path,
    input_path: Path,
    output_path: Path,
    *,
    python_executable: str = sys.executable,
) -> None:
    """Invoke the parser script; it reads ``input_path`` and writes ``output_path``.

    A leftover ``output_path`` from an earlier run is removed first so that a
    parser which writes nothing is reported instead of reusing stale ids.
    """
    output_path.unlink(missing_ok=True)
    cmd = [
        python_executable,
        str(parser_script),
        "--input",
        str(input_path),
        "--output",
        str(output_path),
    ]
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise DependencyParserError(f"failed to start dependency parser: {exc}") from exc
    if proc.returncode != 0:
        raise DependencyParserError(
            f"dependency parser exited with status {proc.returncode}",
            returncode=proc.returncode,
            stderr=proc.stderr,
        )
    if not output_path.exists():
        raise DependencyParserError(
            f"dependency parser did not write {output_path}",
            returncode=proc.returncode,
            stderr=proc.stderr,
        )


# ---------------------------------------------------------------------------
# Stage 3: resolution
# ---------------------------------------------------------------------------

def _result_sort_key(item: tuple[int, RyakusyouInfo]) -> tuple[object, ...]:
    unit_id, info = item
    return (info.law_number, info.clause_locator.sort_key(), unit_id)


def analyze_units(
    units: Mapping[int, SentenceUnit],
    dependency_data: Mapping[int, Mapping[int, DependencyToken]],
    *,
    workers: int = 1,
) -> list[RyakusyouInfo]:
    """Resolve every parsed unit and keep those that yielded pairs.

    Raises UnitNotFoundError when the parser output names an unknown unit.
    Units the parser produced nothing for are skipped.
    """
    jobs: list[tuple[int, SentenceUnit, Mapping[int, DependencyToken]]] = []
    for unit_id, tokens in dependency_data.items():
        unit = units.get(unit_id)
        if unit is None:
            raise UnitNotFoundError(f"no sentence unit with id {unit_id}")
        jobs.append((unit_id, unit, tokens))

    missing = sorted(set(units) - set(dependency_data))
    if missing:
        log.warning("%d unit(s) missing from parser output: %s", len(missing), missing[:20])

    found: list[tuple[int, RyakusyouInfo]] = []
    if workers <= 1:
        for unit_id, unit, tokens in jobs:
            found.append((unit_id, find_ryakusyou(tokens, unit)))
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
            futures = {
                ex.submit(find_ryakusyou, tokens, unit): unit_id
                for unit_id, unit, tokens in jobs
            }
            for fut in concurrent.futures.as_completed(futures):
                found.append((futures[fut], fut.result()))

    found = [item for item in found if item[1].pairs]
    found.sort(key=_result_sort_key)
    return [info for _, info in found]


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

def prepare_units(config: PipelineConfig) -> dict[int, SentenceUnit]:
    """Build units and parser output, or reuse them from the temp directory."""
    if config.cache_is_usable():
        log.info("[START] read info tmp file: %s", config.info_tmp_path)
        units = load_units(config.info_tmp_path)
        log.info("[END] read info tmp file: %s (%d units)", config.info_tmp_path, len(units))
        return units

    log.info("[START] get sentences: %s", config.input_path)
    records = load_sentence_records(config.input_path)
    log.info("[END] get sentences: %s (%d records)", config.input_path, len(records))

    units = build_units(records)
    log.info("segmented %d unit(s) with definitional clauses", len(units))
    save_units(units, config.info_tmp_path)
    save_parser_input(units, config.input_tmp_path)

    log.info("[START] run dependency parser: %s", config.parser_script)
    run_dependency_parser(
        config.parser_script,
        config.input_tmp_path,
        config.output_tmp_path,
        python_executable=config.python_executable,
    )
    log.info("[END] run dependency parser: %s", config.parser_script)
    return units


def run_pipeline(config: PipelineConfig) -> list[RyakusyouInfo]:
    """Run all stages and write the result array to ``config.output_path``."""
    units = prepare_units(config)
    dependency_data = load_dependency_data(config.output_tmp_path)
    results = analyze_units(units, dependency_data, workers=config.workers)
    count = write_json_array((r.to_dict() for r in results), config.output_path)
    log.info("wrote %d record(s) to %s", count, config.output_path)
    return results
