"""Assemble (alias, formal term) pairs for one segmented sentence."""

from __future__ import annotations

import logging
from typing import Mapping

from ryakusyou.clause_patterns import AliasQuote, FormalTerm, NoMatch, classify_clause
from ryakusyou.dependency_graph import DependencyGraph, resolve_span
from ryakusyou.law_types import Clause, DependencyToken, Ryakusyou, RyakusyouInfo, SentenceUnit
from ryakusyou.paren_segmenter import CLOSE_PAREN, OPEN_PAREN

log = logging.getLogger(__name__)


def is_paren_balanced(text: str) -> bool:
    """True if *text* has as many ``（`` as ``）``."""
    depth = 0
    for char in text:
        if char == OPEN_PAREN:
            depth += 1
        elif char == CLOSE_PAREN:
            depth -= 1
    return depth == 0


def assemble_pair(clause_text: str, resolved_span: str) -> Ryakusyou | None:
    """Combine a clause with the span it refers to.

    The resolved span fills whichever half of the pair the clause does not
    spell out. A span that cuts through a parenthetical is rejected.
    """
    match classify_clause(clause_text):
        case AliasQuote(alias=alias):
            pair = Ryakusyou(alias=alias, formal_term=resolved_span)
        case FormalTerm(prefix=prefix):
            pair = Ryakusyou(alias=resolved_span, formal_term=prefix)
        case NoMatch():
            return None
    if not is_paren_balanced(resolved_span):
        log.debug("unbalanced span rejected: %r", resolved_span)
        return None
    return pair


def find_pairs(
    tokens: Mapping[int, DependencyToken] | DependencyGraph,
    remove_paren_text: str,
    clauses: tuple[Clause, ...] | list[Clause],
) -> list[Ryakusyou]:
    """Resolve and assemble every clause of one sentence, in clause order."""
    graph = tokens if isinstance(tokens, DependencyGraph) else DependencyGraph(tokens)
    pairs: list[Ryakusyou] = []
    for clause in clauses:
        span = resolve_span(graph, remove_paren_text, clause.offset)
        if span is None:
            log.debug("no anchor token at offset %d: %s", clause.offset, clause.raw)
            continue
        pair = assemble_pair(clause.raw, span)
        if pair is not None:
            pairs.append(pair)
    return pairs


def find_ryakusyou(
    tokens: Mapping[int, DependencyToken] | DependencyGraph,
    unit: SentenceUnit,
) -> RyakusyouInfo:
    """All pairs of one unit with their provenance (pairs may be empty)."""
    pairs = find_pairs(tokens, unit.remove_paren_text, unit.clauses)
    return RyakusyouInfo(
        law_number=unit.law_number,
        clause_locator=unit.clause_locator,
        pairs=tuple(pairs),
    )
