"""
CSV decoding and encoding for the forbidden-word and product tables.

Decoding:
- encoding detection (UTF-8 / UTF-8 BOM first, charset-normalizer otherwise)
- newline normalization to LF
- delimiter detection
- header row -> field names, data rows -> records
- blank rows dropped, ragged rows reported

Encoding always emits comma-delimited UTF-8 with BOM.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from charset_normalizer import from_bytes

from .errors import DecodeError
from .rules import (
    DEFAULT_EXPORT_STEM,
    EXPORT_PREFIX,
    NORMALIZED_DELIMITER,
    SNIFF_DELIMITERS,
    TARGET_ENCODING,
)

logger = logging.getLogger(__name__)

Record = Dict[str, str]

UTF8_BOM = b"\xef\xbb\xbf"


@dataclass(frozen=True)
class Table:
    """A decoded CSV file: header order plus one record per data row."""

    fields: Tuple[str, ...] = ()
    records: Tuple[Record, ...] = ()
    filename: Optional[str] = None
    encoding: Optional[str] = None
    warnings: Tuple[dict, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.records)


def _decode_text(raw: bytes) -> tuple[str, str, list[dict]]:
    warnings: list[dict] = []

    if raw.startswith(UTF8_BOM):
        decode_used = "utf-8-sig"
    else:
        decode_used = "utf-8"

    try:
        return raw.decode(decode_used), decode_used, warnings
    except UnicodeDecodeError:
        pass

    # Not UTF-8: legacy exports (cp949, euc-kr, latin-1 ...) go through detection.
    match = from_bytes(raw).best()
    if match is not None:
        decode_used = match.encoding
        try:
            return raw.decode(decode_used), decode_used, warnings
        except (UnicodeDecodeError, LookupError):
            pass

    # Last resort: decode with replacement so the load can continue deterministically
    warnings.append({
        "row": None,
        "column": None,
        "issue": "undecodable_bytes",
        "value": decode_used,
        "action": "decoded_utf8_with_replacement",
    })
    logger.warning("Could not detect encoding; decoding as UTF-8 with replacement")
    return raw.decode("utf-8", errors="replace"), "utf-8", warnings


def _detect_delimiter(text: str) -> str:
    header_line = next((line for line in text.split("\n") if line.strip()), "")
    if NORMALIZED_DELIMITER in header_line:
        return NORMALIZED_DELIMITER
    # A single-column header: values may legitimately contain ";" or "|".
    if not any(d in header_line for d in SNIFF_DELIMITERS):
        return NORMALIZED_DELIMITER

    try:
        dialect = csv.Sniffer().sniff(text[:4096], delimiters=SNIFF_DELIMITERS)
        return dialect.delimiter
    except csv.Error:
        return NORMALIZED_DELIMITER


def _is_blank(row: Sequence[str]) -> bool:
    return all(not value.strip() for value in row)


def _unique_fields(header: Sequence[str], line: int, warnings: list[dict]) -> Tuple[str, ...]:
    """Rename repeated header names to name_1, name_2 ... so no column is lost."""
    fields: list[str] = []
    seen = set(header)
    used: set[str] = set()
    for name in header:
        unique = name
        if name in used:
            n = 1
            while f"{name}_{n}" in seen or f"{name}_{n}" in used:
                n += 1
            unique = f"{name}_{n}"
            warnings.append({
                "row": line,
                "column": name,
                "issue": "duplicate_header",
                "value": name,
                "action": f"renamed_to_{unique}",
            })
        used.add(unique)
        fields.append(unique)
    return tuple(fields)


def decode_table(raw: bytes, filename: Optional[str] = None) -> Table:
    """
    Decode CSV bytes into a Table.

    Rules:
    - The first row is the header; its cells are the field names in order.
    - A short row yields a record without the trailing fields.
    - A long row keeps the first len(header) values; the rest are dropped.
    - Rows whose values are all empty or whitespace are discarded, including
      blank lines before the header.
    - Repeated header names are renamed name_1, name_2 ... with a warning.
    - A leading UTF-8 BOM never ends up in the first field name.
    """
    if filename is not None and not filename.lower().endswith(".csv"):
        raise DecodeError("Only CSV files are supported")

    text, decode_used, warnings = _decode_text(raw)

    # --- Newline normalization: CRLF/CR -> LF ---
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    # A BOM can survive when a non-UTF-8 codec was detected
    text = text.lstrip("\ufeff")

    delimiter = _detect_delimiter(text)

    try:
        rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=delimiter))
    except csv.Error as exc:
        raise DecodeError(f"Could not parse CSV: {exc}") from exc

    # Blank rows are dropped before the header is taken; keep 1-based row numbers.
    rows = [(i, row) for i, row in enumerate(rows, start=1) if not _is_blank(row)]

    if not rows:
        return Table(filename=filename, encoding=decode_used, warnings=tuple(warnings))

    header_line, header = rows[0]
    fields = _unique_fields(header, header_line, warnings)
    width = len(fields)
    records: list[Record] = []

    for i, row in rows[1:]:
        if len(row) < width:
            warnings.append({
                "row": i,
                "column": None,
                "issue": "row_too_short",
                "value": str(len(row)),
                "action": "missing_fields_left_out",
            })
        elif len(row) > width:
            warnings.append({
                "row": i,
                "column": None,
                "issue": "row_too_long",
                "value": str(len(row)),
                "action": f"truncated_to_{width}",
            })

        records.append(dict(zip(fields, row)))

    logger.info(
        "Decoded %s: %d fields, %d records (encoding=%s, delimiter=%r)",
        filename or "<upload>", width, len(records), decode_used, delimiter,
    )

    return Table(
        fields=fields,
        records=tuple(records),
        filename=filename,
        encoding=decode_used,
        warnings=tuple(warnings),
    )


def collect_fields(records: Iterable[Record]) -> List[str]:
    """Union of field names across all records, in first-seen order."""
    seen: Dict[str, None] = {}
    for record in records:
        for name in record:
            seen.setdefault(name, None)
    return list(seen)


def encode_table(records: Sequence[Record], fields: Optional[Sequence[str]] = None) -> bytes:
    """Serialize records to comma-delimited CSV bytes in UTF-8 with BOM."""
    if fields is None:
        fields = collect_fields(records)

    outp = io.StringIO(newline="")
    writer = csv.DictWriter(
        outp,
        fieldnames=list(fields),
        delimiter=NORMALIZED_DELIMITER,
        lineterminator="\n",
        restval="",
        extrasaction="ignore",
    )
    writer.writeheader()
    writer.writerows(records)

    return outp.getvalue().encode(TARGET_ENCODING)


def export_filename(product_filename: Optional[str]) -> str:
    stem = DEFAULT_EXPORT_STEM
    if product_filename:
        stem = product_filename
        if stem.lower().endswith(".csv"):
            stem = stem[:-4]
        stem = stem or DEFAULT_EXPORT_STEM
    return f"{EXPORT_PREFIX}{stem}.csv"
