import logging
from dataclasses import dataclass
from typing import Optional

from .mapper import HeaderResolver, cell_text, normalize_row
from .rules import DEFAULT_RULES

logger = logging.getLogger(__name__)

HEADER_ROW = "header_row"
NO_ROLE = "no_role"
IMPLAUSIBLE_ROLE = "implausible_role"
LEAKED_HEADER_TEXT = "leaked_header_text"


@dataclass
class Classification:
    include: bool
    reason: Optional[str] = None
    record: Optional[dict] = None


class RowClassifier:
    """Decides whether a parsed CSV row is a real response and builds its record."""

    def __init__(self, rules=DEFAULT_RULES):
        self.rules = rules
        self.resolver = HeaderResolver(rules, role_check=self.is_plausible_role)

    def is_header_row(self, values) -> bool:
        """
        Survey exports sometimes repeat the question row mid-file. Look at the
        first few non-empty cells; if more than one (and over the ratio) read
        like questions, or every one of them does, the row is a stray header.
        A lone question fragment in a free-text answer is not enough.
        """
        cells = [s for s in (cell_text(v) for v in values) if s]
        examined = cells[: self.rules.header_scan_cells]
        if not examined:
            return False
        hits = 0
        for s in examined:
            low = s.lower()
            if any(ind in low for ind in self.rules.header_indicators):
                hits += 1
        if hits == len(examined):
            return True
        return hits > max(1, len(examined) * self.rules.header_ratio)

    def is_plausible_role(self, text) -> bool:
        s = cell_text(text)
        if not s or len(s) > self.rules.max_role_length:
            return False
        low = s.lower()
        if any(bad in low for bad in self.rules.role_deny):
            return False
        return any(word in low for word in self.rules.role_allow)

    def has_leaked_header_text(self, record) -> bool:
        salary = record.get("base_salary")
        sector = record.get("sector")
        if isinstance(salary, str) and len(salary) > self.rules.max_salary_text:
            return True
        if isinstance(sector, str) and len(sector) > self.rules.max_sector_text:
            return True
        return False

    def classify(self, row) -> Classification:
        if self.is_header_row(row.values()):
            return Classification(False, HEADER_ROW)

        raw = self.resolver.resolve(row)
        role = raw.get("role")
        if role is None:
            has_text = any(
                cell_text(row.get(h))
                for h in self.resolver.resolve_columns(row.keys()).get("role", ())
            )
            return Classification(False, IMPLAUSIBLE_ROLE if has_text else NO_ROLE)

        record = normalize_row(raw, self.rules)
        if self.has_leaked_header_text(record):
            return Classification(False, LEAKED_HEADER_TEXT)
        return Classification(True, record=record)
