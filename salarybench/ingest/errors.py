class IngestError(Exception):
    """Base class for failures that abort an upload."""


class CsvStructureError(IngestError):
    """The file cannot be ingested at all: parse failure, no role column, no usable rows.

    Raised before the target year is touched.
    """


class YearReplaceError(IngestError):
    """Clearing the existing rows for a year failed; nothing was inserted."""

    def __init__(self, year, reason):
        self.year = year
        self.reason = reason
        super().__init__(f"Failed to clear existing data for {year}: {reason}")
