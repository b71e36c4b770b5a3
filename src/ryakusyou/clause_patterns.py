"""Classification of parenthetical clauses into definition forms.

Two forms introduce an abbreviation in Japanese statutes:

1. Alias-quote:  …「略称」という。…   (hereinafter called "X")
2. Formal-term:  …正式名称をいう。…    (means Y)

The alternatives are tried in that order; the first match wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


# Loose filter used while segmenting: any quoted segment qualifies.
_DEFINITIONAL_RE = re.compile(r"([^「（]+「.+」という。.*)|(.+をいう。.*)")

# Capturing variant: the quoted alias may not itself contain a closing quote.
_CAPTURE_RE = re.compile(
    r"([^「（]+「(?P<alias>[^」]+)」という。.*)|((?P<formal_term>.+)をいう。.*)"
)


@dataclass(frozen=True, slots=True)
class AliasQuote:
    """``…「alias」という。`` : the alias is quoted inside the clause."""

    alias: str


@dataclass(frozen=True, slots=True)
class FormalTerm:
    """``…prefixをいう。`` : the clause spells out the formal term."""

    prefix: str


@dataclass(frozen=True, slots=True)
class NoMatch:
    """Clause is not definitional."""


ClauseMatch = AliasQuote | FormalTerm | NoMatch


def is_definitional(text: str) -> bool:
    """Return True if *text* contains either definition form."""
    return _DEFINITIONAL_RE.search(text) is not None


def classify_clause(text: str) -> ClauseMatch:
    """Classify one clause and extract its captured alias or formal term."""
    m = _CAPTURE_RE.search(text)
    if m is None:
        return NoMatch()
    alias = m.group("alias")
    if alias is not None:
        return AliasQuote(alias=alias)
    return FormalTerm(prefix=m.group("formal_term"))
