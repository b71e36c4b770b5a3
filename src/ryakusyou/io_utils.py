"""orjson-backed I/O for sentence inputs, the unit cache and parser output.

JSON object keys are always strings on disk; the integer unit and token ids
used in memory are converted at this boundary.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import orjson

from ryakusyou.law_types import DependencyToken, InputError, SentenceUnit


def load_json(path: Path) -> Any:
    """Load one JSON document."""
    try:
        return orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        raise InputError(f"invalid JSON in {path}: {exc}") from exc


def save_json(obj: Any, path: Path, *, pretty: bool = False) -> None:
    """Write *obj* as JSON, creating parent directories.

    Integer dict keys are written as strings.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_NON_STR_KEYS
    if pretty:
        opts |= orjson.OPT_INDENT_2
    path.write_bytes(orjson.dumps(obj, option=opts))


def load_jsonl(path: Path) -> list[dict[str, Any]]:
    """Load a JSON Lines file (one JSON object per line). Blank lines skipped."""
    records: list[dict[str, Any]] = []
    for lineno, line in enumerate(path.read_bytes().split(b"\n"), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(orjson.loads(line))
        except orjson.JSONDecodeError as exc:
            raise InputError(f"{path}:{lineno}: invalid JSON line: {exc}") from exc
    return records


def load_records(path: Path) -> list[dict[str, Any]]:
    """Load records from a JSON array file or, for ``.jsonl``, JSON Lines."""
    if path.suffix == ".jsonl":
        return load_jsonl(path)
    data = load_json(path)
    if not isinstance(data, list):
        raise InputError(f"{path}: expected a JSON array of records")
    return data


def write_json_array(records: Iterable[dict[str, Any]], path: Path) -> int:
    """Write records as a JSON array with one record per line.

    Returns the number of records written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [orjson.dumps(r) for r in records]
    if lines:
        body = b"[\n" + b",\n".join(lines) + b"\n]\n"
    else:
        body = b"[]\n"
    path.write_bytes(body)
    return len(lines)


# ---------------------------------------------------------------------------
# Cache / parser payloads
# ---------------------------------------------------------------------------

def save_units(units: dict[int, SentenceUnit], path: Path) -> None:
    save_json({uid: unit.to_dict() for uid, unit in units.items()}, path)


def load_units(path: Path) -> dict[int, SentenceUnit]:
    raw = load_json(path)
    if not isinstance(raw, dict):
        raise InputError(f"{path}: expected an object keyed by unit id")
    return {int(uid): SentenceUnit.from_dict(data) for uid, data in raw.items()}


def save_parser_input(units: dict[int, SentenceUnit], path: Path) -> None:
    """Write ``{unit_id: remove_paren_text}`` for the dependency parser."""
    save_json({uid: unit.remove_paren_text for uid, unit in units.items()}, path)


def load_dependency_data(path: Path) -> dict[int, dict[int, DependencyToken]]:
    """Read parser output ``{unit_id: {token_id: token}}``."""
    raw = load_json(path)
    if not isinstance(raw, dict):
        raise InputError(f"{path}: expected an object keyed by unit id")
    data: dict[int, dict[int, DependencyToken]] = {}
    for uid, tokens in raw.items():
        try:
            data[int(uid)] = {
                int(tid): DependencyToken.from_dict(tok)
                for tid, tok in (tokens or {}).items()
            }
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise InputError(f"{path}: malformed tokens for unit {uid}: {exc}") from exc
    return data
