"""
The caller-facing operations: load the two inputs, process, export.

State lives in an immutable SessionState snapshot. Each successful operation
builds a new snapshot and swaps it in; a failing operation leaves the current
snapshot untouched and only fills the error slot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple, TypeVar

from .codec import Record, Table, decode_table, encode_table, export_filename
from .errors import CompileError, DecodeError, SanitizerError, ValidationError
from .rules import DERIVED_FIELD, SOURCE_FIELD
from .sanitize import compile_matcher, sanitize
from .terms import TermSet, build_term_set

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SessionState:
    forbidden: Optional[Table] = None
    terms: TermSet = frozenset()
    products: Optional[Table] = None
    processed: Optional[Tuple[Record, ...]] = None

    @property
    def product_records(self) -> Tuple[Record, ...]:
        return self.products.records if self.products is not None else ()


class Session:
    def __init__(self, max_upload_bytes: Optional[int] = None):
        self.max_upload_bytes = max_upload_bytes
        self.state = SessionState()
        self.error: Optional[str] = None

    def _run(self, operation: str, func: Callable[[], T]) -> T:
        self.error = None
        try:
            return func()
        except CompileError as exc:
            logger.exception("%s failed with a pattern compile error", operation)
            self.error = exc.message
            raise
        except SanitizerError as exc:
            logger.warning("%s failed: %s", operation, exc.message)
            self.error = exc.message
            raise

    def _decode(self, raw: bytes, filename: Optional[str]) -> Table:
        if self.max_upload_bytes is not None and len(raw) > self.max_upload_bytes:
            raise DecodeError(
                f"File is too large ({len(raw)} bytes, limit {self.max_upload_bytes})"
            )
        return decode_table(raw, filename)

    # --- inputs ---

    def set_forbidden_source(self, table: Table) -> TermSet:
        self.error = None
        terms = build_term_set(table)
        self.state = replace(self.state, forbidden=table, terms=terms)
        return terms

    def set_product_source(self, table: Table) -> Table:
        self.error = None
        self.state = replace(self.state, products=table, processed=None)
        return table

    def load_forbidden(self, raw: bytes, filename: Optional[str] = None) -> Table:
        def load() -> Table:
            try:
                table = self._decode(raw, filename)
            except DecodeError as exc:
                raise DecodeError(f"Error parsing forbidden words file: {exc.message}") from exc
            self.set_forbidden_source(table)
            return table

        return self._run("load_forbidden", load)

    def load_products(self, raw: bytes, filename: Optional[str] = None) -> Table:
        def load() -> Table:
            try:
                table = self._decode(raw, filename)
            except DecodeError as exc:
                raise DecodeError(f"Error parsing product data file: {exc.message}") from exc
            return self.set_product_source(table)

        return self._run("load_products", load)

    def reset(self) -> None:
        self.state = SessionState()
        self.error = None

    # --- process / export ---

    def process(self) -> Tuple[Record, ...]:
        def run() -> Tuple[Record, ...]:
            state = self.state

            problems = []
            if not state.terms:
                problems.append("the forbidden word list is empty")
            if not state.product_records:
                problems.append("the product data is empty")
            if problems:
                raise ValidationError(
                    "Please upload both files and ensure they contain data: "
                    + "; ".join(problems)
                )

            matcher = compile_matcher(state.terms)
            processed = tuple(
                sanitize(state.product_records, matcher, SOURCE_FIELD, DERIVED_FIELD)
            )
            self.state = replace(state, processed=processed)
            logger.info(
                "Processed %d product rows against %d forbidden terms",
                len(processed), len(state.terms),
            )
            return processed

        return self._run("process", run)

    def export(self) -> Tuple[str, bytes]:
        def run() -> Tuple[str, bytes]:
            state = self.state
            if not state.processed:
                raise ValidationError("No processed data to download.")

            filename = export_filename(state.products.filename if state.products else None)
            content = encode_table(state.processed)
            logger.info("Exported %d rows as %s", len(state.processed), filename)
            return filename, content

        return self._run("export", run)

    def preview(self, limit: Optional[int] = None) -> List[Tuple[str, str]]:
        """
        (original, cleaned) product names for the first `limit` rows.

        Before processing, the cleaned value is the untouched original.
        """
        state = self.state
        if state.processed is not None:
            rows = state.processed
        else:
            rows = state.product_records
        if limit is not None:
            rows = rows[:limit]

        return [
            (
                row.get(SOURCE_FIELD) or "",
                row.get(DERIVED_FIELD, row.get(SOURCE_FIELD) or ""),
            )
            for row in rows
        ]
