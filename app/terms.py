from __future__ import annotations

import logging
from typing import FrozenSet

from .codec import Table

logger = logging.getLogger(__name__)

TermSet = FrozenSet[str]


def build_term_set(table: Table) -> TermSet:
    """
    Collect the forbidden words from the first column of a table.

    The column is chosen by position, the header text is arbitrary.
    Values are stripped; blank or missing values are skipped.
    """
    if not table.fields:
        return frozenset()

    column = table.fields[0]
    terms = set()
    for record in table.records:
        word = (record.get(column) or "").strip()
        if word:
            terms.add(word)

    logger.info("Built %d forbidden terms from column %r", len(terms), column)
    return frozenset(terms)
