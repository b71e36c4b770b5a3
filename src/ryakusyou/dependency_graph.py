"""Dependency-guided resolution of the span a parenthetical refers to.

A clause such as ``（以下「法」という。）`` is excised right after the phrase
it names. Given the dependency tokens of the paren-removed sentence, two
estimates of that phrase are computed:

- superset: from the end of the last earlier token whose head lies beyond
  the anchor, up to the clause. It certainly contains the referent but may
  run across several clauses of the sentence.
- subset: from the leftmost token that (transitively) depends on the anchor,
  up to the clause. At least this much belongs to the referent.

The superset is preferred when it holds no 。 or 、.

Note: the closure compares token *ids* against head spans, which are
character offsets. Extraction results depend on this; keep it.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Mapping

from ryakusyou.law_types import DependencyToken

log = logging.getLogger(__name__)

CLAUSE_DELIMITERS: tuple[str, ...] = ("。", "、")


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------

class DependencyGraph:
    """Token map of one sentence, ids ascending, with reverse head edges."""

    def __init__(self, tokens: Mapping[int, DependencyToken]) -> None:
        self._tokens = dict(tokens)
        self.ids: tuple[int, ...] = tuple(sorted(self._tokens))
        self._dependents: dict[int, tuple[int, ...]] = {
            target: tuple(
                tid for tid in self.ids
                if self._tokens[tid].head_covers(target)
            )
            for target in self.ids
        }

    def __len__(self) -> int:
        return len(self.ids)

    def get(self, token_id: int) -> DependencyToken | None:
        return self._tokens.get(token_id)

    def dependents_of(self, token_id: int) -> tuple[int, ...]:
        """Ids of tokens whose head span covers *token_id*."""
        return self._dependents.get(token_id, ())

    def find_anchor(self, offset: int) -> int | None:
        """Id of the first token with ``start < offset <= end``."""
        for tid in self.ids:
            token = self._tokens[tid]
            if token.start < offset <= token.end:
                return tid
        return None

    def dependent_closure(self, anchor_id: int) -> list[int]:
        """All ids reachable from *anchor_id* over dependents, sorted."""
        seen = {anchor_id}
        queue = deque([anchor_id])
        while queue:
            current = queue.popleft()
            for tid in self.dependents_of(current):
                if tid not in seen:
                    seen.add(tid)
                    queue.append(tid)
        return sorted(seen)

    def boundary_before(self, anchor_id: int) -> int:
        """Left edge of the superset span for *anchor_id*."""
        start = 0
        for tid in self.ids:
            if tid == anchor_id:
                break
            token = self._tokens[tid]
            if token.head_start is not None and anchor_id < token.head_start:
                start = max(0, token.end)
        return start


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SpanCandidates:
    """Both span estimates for one excised clause."""

    anchor_id: int
    closure: tuple[int, ...]
    superset_start: int
    subset_start: int
    end: int
    superset: str
    subset: str

    @property
    def preferred(self) -> str:
        if any(d in self.superset for d in CLAUSE_DELIMITERS):
            return self.subset
        return self.superset


def resolve_spans(
    tokens: Mapping[int, DependencyToken] | DependencyGraph,
    removed_text: str,
    offset: int,
) -> SpanCandidates | None:
    """Estimate the text that a clause excised at *offset* refers to.

    Returns None when no token ends at the clause position.
    """
    graph = tokens if isinstance(tokens, DependencyGraph) else DependencyGraph(tokens)
    anchor_id = graph.find_anchor(offset)
    if anchor_id is None:
        return None

    superset_start = graph.boundary_before(anchor_id)
    closure = graph.dependent_closure(anchor_id)
    if not closure:
        return None
    head_token = graph.get(closure[0])
    if head_token is None:
        return None
    subset_start = max(0, min(head_token.start, offset))

    candidates = SpanCandidates(
        anchor_id=anchor_id,
        closure=tuple(closure),
        superset_start=superset_start,
        subset_start=subset_start,
        end=offset,
        superset=removed_text[superset_start:offset],
        subset=removed_text[subset_start:offset],
    )
    log.debug(
        "offset=%d anchor=%d superset=%r subset=%r",
        offset, anchor_id, candidates.superset, candidates.subset,
    )
    return candidates


def resolve_span(
    tokens: Mapping[int, DependencyToken] | DependencyGraph,
    removed_text: str,
    offset: int,
) -> str | None:
    """The preferred span text for a clause, or None on a resolution miss."""
    candidates = resolve_spans(tokens, removed_text, offset)
    if candidates is None:
        return None
    return candidates.preferred
