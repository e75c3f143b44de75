from .errors import CsvStructureError, IngestError, YearReplaceError
from .pipeline import IngestionReport, ingest_csv, ingest_file
from .rules import DEFAULT_RULES, IngestionRules

__all__ = [
    "CsvStructureError",
    "IngestError",
    "YearReplaceError",
    "IngestionReport",
    "ingest_csv",
    "ingest_file",
    "DEFAULT_RULES",
    "IngestionRules",
]
