"""
Forbidden-word removal.

All terms are compiled into one case-insensitive alternation and removed in a
single left-to-right pass per value, so the result never depends on the order
in which terms are applied.
"""

from __future__ import annotations

import re
from typing import AbstractSet, List, Pattern, Sequence, Union

from .codec import Record
from .errors import CompileError

# Matches nothing, anywhere.
NEVER_MATCHES = "(?!)"


def compile_matcher(terms: AbstractSet[str]) -> Pattern[str]:
    """
    Build one pattern matching any term as a literal substring, ignoring case.

    Longer terms come first so that where terms overlap at the same position
    the longest one is removed; ties are broken lexicographically.
    """
    ordered = sorted(terms, key=lambda term: (-len(term), term))
    source = "|".join(re.escape(term) for term in ordered) or NEVER_MATCHES

    try:
        return re.compile(source, re.IGNORECASE)
    except re.error as exc:
        raise CompileError(f"Could not compile forbidden-word pattern: {exc}") from exc


def clean_value(value: str, matcher: Pattern[str]) -> str:
    # Only the ends are trimmed; gaps left inside the value are kept.
    return matcher.sub("", value).strip()


def sanitize(
    records: Sequence[Record],
    terms: Union[AbstractSet[str], Pattern[str]],
    source_field: str,
    derived_field: str,
) -> List[Record]:
    """
    Return new records with `derived_field` set to the cleaned `source_field`.

    Input records are not modified. Row order and every other field are
    preserved. A missing or empty source value yields "".
    """
    matcher = terms if isinstance(terms, re.Pattern) else compile_matcher(terms)

    out: List[Record] = []
    for record in records:
        value = record.get(source_field) or ""
        out.append({**record, derived_field: clean_value(value, matcher)})
    return out
