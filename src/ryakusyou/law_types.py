"""Core types shared by the segmentation, resolution and pipeline layers.

All character offsets are positions in the *paren-removed* sentence text
(code points, not bytes). Every dataclass is frozen; records that travel
through the intermediate cache expose ``to_dict()`` / ``from_dict()``.

Type hierarchy:
  Clause              : one excised parenthetical and its offset
  SegmentationResult  : a sentence with its definitional clauses removed
  DependencyToken     : one parser token (span + optional head span)
  ClauseLocator       : article/paragraph/item address inside a law
  SentenceRecord      : one plain sentence delivered by the text extractor
  SentenceUnit        : one SegmentationResult bound to its provenance
  Ryakusyou           : an (alias, formal term) pair
  RyakusyouInfo       : all pairs found for one (law, clause) unit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class InputError(ValueError):
    """Raised when an input record does not follow the sentence contract."""


class UnitNotFoundError(LookupError):
    """Raised when parser output references a unit id with no known sentence."""


class DependencyParserError(RuntimeError):
    """Raised when the external dependency parser process fails."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Clause:
    """A parenthetical excised from its parent text."""

    offset: int   # position in the paren-removed parent text
    raw: str      # clause text, nested parens included

    def to_dict(self) -> dict[str, Any]:
        return {"offset": self.offset, "raw": self.raw}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Clause:
        return cls(offset=int(data["offset"]), raw=str(data["raw"]))


@dataclass(frozen=True, slots=True)
class SegmentationResult:
    """Sentence text with its top-level parentheticals removed."""

    raw_text: str
    remove_paren_text: str
    clauses: tuple[Clause, ...]


# ---------------------------------------------------------------------------
# Dependency parser contract
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DependencyToken:
    """One token of the dependency parse.

    ``start``/``end`` index the paren-removed text. ``head_start``/``head_end``
    is the span of the governing token, absent for the root.
    """

    start: int
    end: int
    head_start: int | None = None
    head_end: int | None = None
    text: str = ""

    def head_covers(self, position: int) -> bool:
        """True if the head span contains *position*."""
        if self.head_start is None or self.head_end is None:
            return False
        return self.head_start <= position < self.head_end

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DependencyToken:
        head_start = data.get("head_start")
        head_end = data.get("head_end")
        return cls(
            start=int(data["start"]),
            end=int(data["end"]),
            head_start=int(head_start) if head_start is not None else None,
            head_end=int(head_end) if head_end is not None else None,
            text=str(data.get("text") or ""),
        )


# ---------------------------------------------------------------------------
# Provenance
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ClauseLocator:
    """Where in a law a sentence occurs (条・項・号・号の細分・附則)."""

    article: str
    paragraph: str | None = None
    item: str | None = None
    sub_item: tuple[str, ...] | None = None
    suppl_provision_title: str | None = None

    def sort_key(self) -> tuple[str, str, str, str, tuple[str, ...]]:
        return (
            self.suppl_provision_title or "",
            self.article,
            self.paragraph or "",
            self.item or "",
            self.sub_item or (),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "article": self.article,
            "paragraph": self.paragraph,
            "item": self.item,
            "sub_item": list(self.sub_item) if self.sub_item is not None else None,
            "suppl_provision_title": self.suppl_provision_title,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClauseLocator:
        if not isinstance(data, dict):
            raise InputError(f"clause locator must be an object, got {type(data).__name__}")
        article = data.get("article")
        if article is None:
            raise InputError("clause locator is missing 'article'")
        sub_item = data.get("sub_item")
        if isinstance(sub_item, str):
            sub_item = [sub_item]
        return cls(
            article=str(article),
            paragraph=_opt_str(data.get("paragraph")),
            item=_opt_str(data.get("item")),
            sub_item=tuple(str(s) for s in sub_item) if sub_item is not None else None,
            suppl_provision_title=_opt_str(data.get("suppl_provision_title")),
        )


def _opt_str(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass(frozen=True, slots=True)
class SentenceRecord:
    """Plain sentence text for one law location."""

    law_number: str
    clause_locator: ClauseLocator
    text: str
    is_child: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SentenceRecord:
        try:
            law_number = data["num"]
            chapter = data["chapter"]
            text = data["text"]
        except (KeyError, TypeError) as exc:
            raise InputError(f"sentence record is missing field: {exc}") from exc
        if not isinstance(text, str):
            raise InputError(f"sentence text must be a string (law {law_number})")
        return cls(
            law_number=str(law_number),
            clause_locator=ClauseLocator.from_dict(chapter),
            text=text,
            is_child=bool(data.get("is_child", False)),
        )


@dataclass(frozen=True, slots=True)
class SentenceUnit:
    """A segmented sentence awaiting dependency resolution."""

    unit_id: int
    law_number: str
    clause_locator: ClauseLocator
    raw_text: str
    remove_paren_text: str
    clauses: tuple[Clause, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "unit_id": self.unit_id,
            "num": self.law_number,
            "chapter": self.clause_locator.to_dict(),
            "raw_text": self.raw_text,
            "remove_paren_text": self.remove_paren_text,
            "paren": [c.to_dict() for c in self.clauses],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SentenceUnit:
        return cls(
            unit_id=int(data["unit_id"]),
            law_number=str(data["num"]),
            clause_locator=ClauseLocator.from_dict(data["chapter"]),
            raw_text=str(data["raw_text"]),
            remove_paren_text=str(data["remove_paren_text"]),
            clauses=tuple(Clause.from_dict(c) for c in data.get("paren") or ()),
        )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Ryakusyou:
    """An abbreviation and the formal term it stands for."""

    alias: str        # 略称
    formal_term: str  # 正式名称

    def to_dict(self) -> dict[str, str]:
        return {"alias": self.alias, "formal_term": self.formal_term}


@dataclass(frozen=True, slots=True)
class RyakusyouInfo:
    """Pairs found in one (law, clause) unit, in discovery order."""

    law_number: str
    clause_locator: ClauseLocator
    pairs: tuple[Ryakusyou, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "law_number": self.law_number,
            "clause_locator": self.clause_locator.to_dict(),
            "pairs": [p.to_dict() for p in self.pairs],
        }
