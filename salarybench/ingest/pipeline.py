# salarybench/ingest/pipeline.py
import io
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .classifier import RowClassifier
from .errors import CsvStructureError
from .loader import DEFAULT_BATCH_SIZE, BatchLoader, LoadResult
from .rules import DEFAULT_RULES
from .stats import summarize

logger = logging.getLogger(__name__)

ERROR_LIMIT = 10
MIN_YEAR, MAX_YEAR = 1900, 2100


@dataclass
class IngestionReport:
    year: int
    total_rows: int
    valid_rows: int
    skipped: Dict[str, int] = field(default_factory=dict)
    load: Optional[LoadResult] = None
    summary: Dict[str, float] = field(default_factory=dict)
    error_limit: int = ERROR_LIMIT

    @property
    def inserted(self) -> int:
        return self.load.inserted if self.load else 0

    @property
    def skipped_rows(self) -> int:
        return sum(self.skipped.values())

    @property
    def errors(self) -> List[str]:
        return self.load.errors if self.load else []

    @property
    def message(self) -> str:
        if self.errors:
            return f"Upload completed with {len(self.errors)} errors. {self.inserted} records inserted."
        return f"Successfully uploaded {self.inserted} survey responses for {self.year}"

    def to_result(self):
        batches = self.load.batches if self.load else []
        return {
            "success": True,
            "message": self.message,
            "stats": {
                "year": self.year,
                "total_rows": self.total_rows,
                "valid_rows": self.valid_rows,
                "skipped_rows": self.skipped_rows,
                "skipped": dict(self.skipped),
                "deleted": self.load.deleted if self.load else 0,
                "inserted": self.inserted,
                "batches": len(batches),
                "failed_batches": sum(1 for b in batches if not b.ok),
                "errors": len(self.errors),
                "unique_roles": self.summary.get("unique_roles", 0),
                "sectors": self.summary.get("sectors", 0),
                "average_salary": self.summary.get("average_salary", 0.0),
            },
            "errors": self.errors[: self.error_limit],
        }


def failure_result(message):
    return {"success": False, "message": message}


def coerce_year(value) -> int:
    if value is None or isinstance(value, bool) or str(value).strip() == "":
        raise CsvStructureError("Year is required")
    try:
        year = int(str(value).strip())
    except ValueError:
        raise CsvStructureError(f"Invalid year: {value!r}") from None
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise CsvStructureError(f"Invalid year: {year}")
    return year


def read_csv_text(text) -> List[dict]:
    """CSV text -> list of {header: cell} with every cell kept as a string."""
    if not text or not str(text).strip():
        raise CsvStructureError("CSV content is empty")
    text = str(text).lstrip("\ufeff")
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise CsvStructureError(f"CSV parsing errors: {e}") from e

    # repeated headers arrive as "X", "X.1"; HeaderResolver folds them back
    df.columns = [str(c).strip() for c in df.columns]
    if not df.empty:
        filled = df.astype(str).apply(lambda s: s.str.strip().ne("")).any(axis=1)
        df = df[filled]
    if df.empty:
        raise CsvStructureError("CSV must contain headers and at least one data row")
    return df.to_dict(orient="records")


def classify_rows(rows, classifier):
    records, skipped = [], Counter()
    for i, row in enumerate(rows, 1):
        c = classifier.classify(row)
        if c.include:
            records.append(c.record)
        else:
            skipped[c.reason] += 1
            logger.debug("Skipping row %s: %s", i, c.reason)
    return records, skipped


def ingest_csv(text, year, rules=None, batch_size=None, per_record_fallback=False,
               on_progress=None, session=None, error_limit=ERROR_LIMIT) -> IngestionReport:
    """
    CSV text -> classified records -> whole-year replace -> report.

    Raises CsvStructureError before the year is touched, YearReplaceError
    if clearing the year fails. Batch failures end up in the report.
    """
    year = coerce_year(year)
    rules = rules or DEFAULT_RULES
    rows = read_csv_text(text)
    classifier = RowClassifier(rules)

    if not classifier.resolver.has_role_column(rows[0].keys()):
        raise CsvStructureError("Missing required column: role")

    records, skipped = classify_rows(rows, classifier)
    logger.info("Parsed %s rows for %s: %s valid, %s skipped", len(rows), year, len(records), sum(skipped.values()))
    if not records:
        raise CsvStructureError("No valid roles found in data")

    loader = BatchLoader(
        session=session,
        batch_size=batch_size or DEFAULT_BATCH_SIZE,
        per_record_fallback=per_record_fallback,
    )
    load = loader.replace_year(records, year, on_progress=on_progress)

    report = IngestionReport(
        year=year,
        total_rows=len(rows),
        valid_rows=len(records),
        skipped=dict(skipped),
        load=load,
        summary=summarize(records),
        error_limit=error_limit,
    )
    logger.info(report.message)
    return report


def ingest_file(path, year, **kwargs) -> IngestionReport:
    p = Path(path)
    if not p.exists():
        raise CsvStructureError(f"File not found: {p}")
    if p.suffix.lower() != ".csv":
        raise CsvStructureError(f"Unsupported file type: {p.suffix}")
    return ingest_csv(p.read_text(encoding="utf-8-sig"), year, **kwargs)
