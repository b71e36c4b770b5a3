"""Recursive removal of full-width parentheticals from legal sentences.

``segment`` walks a sentence one character at a time. Characters at depth 0
are kept and advance the running offset; everything between a depth-0 ``（``
and its matching ``）`` is buffered as one clause. The offset therefore lives
in the paren-removed text, which is also the text handed to the dependency
parser, so clause offsets and token spans share one coordinate space.

Closed clauses are segmented again so that a definition nested inside another
parenthetical is found too. Nested results are emitted before the result for
the enclosing text.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ryakusyou.clause_patterns import is_definitional
from ryakusyou.law_types import Clause, SegmentationResult


OPEN_PAREN = "（"
CLOSE_PAREN = "）"


@dataclass(frozen=True, slots=True)
class ScanState:
    """Result of scanning one text at depth 0."""

    depth: int
    offset: int
    kept: str
    buffer: str
    clauses: tuple[Clause, ...]
    nested: tuple[SegmentationResult, ...]


@dataclass(slots=True)
class _ScanAccumulator:
    """Working state of a single ``scan`` call; never escapes it."""

    depth: int = 0
    offset: int = 0
    kept: list[str] = field(default_factory=list)
    buffer: list[str] = field(default_factory=list)
    clauses: list[Clause] = field(default_factory=list)
    nested: list[SegmentationResult] = field(default_factory=list)

    def close_clause(self) -> None:
        raw = "".join(self.buffer)
        if is_definitional(raw):
            self.nested.extend(
                r for r in segment(raw)
                if r.raw_text != r.remove_paren_text
            )
        self.clauses.append(Clause(offset=self.offset, raw=raw))
        self.buffer.clear()

    def step(self, char: str) -> None:
        if char == OPEN_PAREN:
            if self.depth != 0:
                self.buffer.append(char)
            self.depth += 1
        elif char == CLOSE_PAREN:
            self.depth -= 1
            if self.depth == 0:
                self.close_clause()
            else:
                self.buffer.append(char)
        elif self.depth == 0:
            self.offset += 1
            self.kept.append(char)
        else:
            self.buffer.append(char)

    def freeze(self) -> ScanState:
        return ScanState(
            depth=self.depth,
            offset=self.offset,
            kept="".join(self.kept),
            buffer="".join(self.buffer),
            clauses=tuple(self.clauses),
            nested=tuple(self.nested),
        )


def scan(text: str) -> ScanState:
    """Run the character scan over *text* and return the final state.

    An unterminated ``（`` leaves its content in ``buffer``; it never reaches
    ``kept`` and is not reported as a clause.
    """
    acc = _ScanAccumulator()
    for char in text:
        acc.step(char)
    return acc.freeze()


def segment(text: str) -> list[SegmentationResult]:
    """Split *text* into paren-removed text plus definitional clauses.

    Returns an empty list when *text* has no top-level parenthetical or none
    of them is definitional.
    """
    state = scan(text)
    results = list(state.nested)
    clauses = tuple(c for c in state.clauses if is_definitional(c.raw))
    if text != state.kept and clauses:
        results.append(
            SegmentationResult(
                raw_text=text,
                remove_paren_text=state.kept,
                clauses=clauses,
            )
        )
    return results


def reinsert_clauses(result: SegmentationResult) -> str:
    """Rebuild the original text by putting each clause back at its offset.

    Exact only when every top-level parenthetical of the original was
    definitional; non-definitional ones are not recorded.
    """
    parts: list[str] = []
    cursor = 0
    text = result.remove_paren_text
    for clause in sorted(result.clauses, key=lambda c: c.offset):
        parts.append(text[cursor:clause.offset])
        parts.append(f"{OPEN_PAREN}{clause.raw}{CLOSE_PAREN}")
        cursor = clause.offset
    parts.append(text[cursor:])
    return "".join(parts)
