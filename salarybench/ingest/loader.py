# salarybench/ingest/loader.py
"""
Whole-year replace: delete every row for the year, then insert the new
records batch by batch.

A failing batch does not stop the run and nothing already committed is
rolled back, so a year can end up partially loaded. Each batch reports
its own outcome as a BatchResult.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import SurveyResponse
from .errors import YearReplaceError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


@dataclass
class BatchResult:
    number: int                 # 1-based
    attempted: int
    inserted: int = 0
    error: Optional[str] = None
    record_errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LoadResult:
    year: int
    deleted: int
    batches: List[BatchResult] = field(default_factory=list)

    @property
    def inserted(self) -> int:
        return sum(b.inserted for b in self.batches)

    @property
    def errors(self) -> List[str]:
        out = []
        for b in self.batches:
            if b.error:
                out.append(b.error)
            out.extend(b.record_errors)
        return out


def chunked(items, size):
    for i in range(0, len(items), size):
        yield items[i:i + size]


def _reason(e):
    # DBAPI errors carry the driver message on .orig
    orig = getattr(e, "orig", None)
    return str(orig if orig is not None else e).strip()


class BatchLoader:

    def __init__(self, session=None, batch_size=DEFAULT_BATCH_SIZE, per_record_fallback=False):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.session = session if session is not None else db.session
        self.batch_size = batch_size
        self.per_record_fallback = per_record_fallback

    def delete_year(self, year) -> int:
        try:
            n = self.session.query(SurveyResponse).filter(
                SurveyResponse.year == year
            ).delete(synchronize_session=False)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Error deleting existing data for %s: %s", year, e)
            raise YearReplaceError(year, _reason(e)) from e
        logger.info("Cleared %s existing responses for %s", n, year)
        return n

    def insert_batch(self, number, records, year) -> BatchResult:
        result = BatchResult(number=number, attempted=len(records))
        try:
            self.session.add_all([SurveyResponse(year=year, **r) for r in records])
            self.session.commit()
            result.inserted = len(records)
            return result
        except (SQLAlchemyError, TypeError) as e:
            self.session.rollback()
            result.error = f"Batch {number}: {_reason(e)}"
            logger.warning("Batch insert error: %s", result.error)

        if self.per_record_fallback:
            self._insert_one_by_one(result, records, year)
        return result

    def _insert_one_by_one(self, result, records, year):
        for i, r in enumerate(records, 1):
            try:
                self.session.add(SurveyResponse(year=year, **r))
                self.session.commit()
                result.inserted += 1
            except (SQLAlchemyError, TypeError) as e:
                self.session.rollback()
                result.record_errors.append(f"Batch {result.number}, record {i}: {_reason(e)}")

    def replace_year(self, records, year, on_progress=None) -> LoadResult:
        """
        Delete then insert. A delete failure raises YearReplaceError before
        anything is inserted; insert failures are reported per batch.
        """
        deleted = self.delete_year(year)
        out = LoadResult(year=year, deleted=deleted)
        records = list(records)
        total = len(records)
        done = 0
        for number, batch in enumerate(chunked(records, self.batch_size), 1):
            res = self.insert_batch(number, batch, year)
            out.batches.append(res)
            done += len(batch)
            logger.info("Batch %s: %s/%s inserted", number, res.inserted, res.attempted)
            if on_progress:
                on_progress(done * 100 / total)
        return out
