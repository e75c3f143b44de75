import re

import pandas as pd

from .rules import DEFAULT_RULES, RATING, SALARY, TEXT

INT_RE = re.compile(r'^\d+$')
CURRENCY_RE = re.compile(r'^\$?[\d,]+\.?\d*$')
_NON_ALNUM = re.compile(r'[^a-z0-9]')
# pandas renames repeated headers 'X', 'X' -> 'X', 'X.1'
_DUPE_SUFFIX = re.compile(r'^(.*)\.\d+$')


def norm_key(s):
    """'Base Salary' / 'base_salary' / 'BASE-SALARY' -> 'basesalary'"""
    return _NON_ALNUM.sub('', str(s).lower())


def cell_text(v):
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return ''
    return str(v).strip()


def unmangle_header(header, present):
    """'Role.1' -> 'Role' when 'Role' is also a header; otherwise the trimmed header."""
    h = str(header).strip()
    m = _DUPE_SUFFIX.match(h)
    if m and m.group(1) in present:
        return m.group(1)
    return h


def parse_number(s):
    """Bare integer -> int, currency-looking -> float, else None."""
    if INT_RE.fullmatch(s):
        return int(s)
    if CURRENCY_RE.fullmatch(s):
        digits = s.replace('$', '').replace(',', '')
        if not digits or digits == '.':
            return None
        return float(digits)
    return None


def likert_value(s, rules=DEFAULT_RULES):
    return rules.likert.get(' '.join(s.lower().split()))


def normalize_value(raw, kind=None, rules=DEFAULT_RULES):
    """
    Raw cell -> None / number / trimmed string.
    - salary: currency only, must sit inside (0, salary_max)
    - rating: integer or Likert phrase, must sit inside [rating_min, rating_max]
    - text: trimmed string, never coerced
    - no kind: opportunistic number / Likert, otherwise the string as-is
    """
    s = cell_text(raw)
    if s.lower() in rules.null_tokens:
        return None
    if kind == TEXT:
        return s

    if kind == SALARY:
        n = parse_number(s)
        if n is None or not (0 < n < rules.salary_max):
            return None
        return float(n)

    if kind == RATING:
        n = parse_number(s)
        if n is None:
            n = likert_value(s, rules)
        if n is None or not (rules.rating_min <= n <= rules.rating_max):
            return None
        if isinstance(n, float):
            return int(n) if n.is_integer() else None
        return n

    n = parse_number(s)
    if n is not None:
        return n
    lk = likert_value(s, rules)
    if lk is not None:
        return lk
    return s


def normalize_row(raw, rules=DEFAULT_RULES):
    """{field: raw cell} -> {field: cleaned value}, dropping empties."""
    out = {}
    for name, v in raw.items():
        cleaned = normalize_value(v, rules.kind_of(name), rules)
        if cleaned is not None:
            out[name] = cleaned
    return out


class HeaderResolver:
    """
    Maps one row's column names onto canonical fields.

    Lookup order per header: exact question text, then a case/punctuation
    insensitive match against the question table, field names and aliases.
    Role additionally probes rules.role_columns, and as a last resort the
    first plausible cell anywhere in the row. Without a role_check any
    non-empty role cell is taken and the row scan is skipped.
    """

    def __init__(self, rules=DEFAULT_RULES, role_check=None):
        self.rules = rules
        self.role_check = role_check
        self._exact = {k.strip(): v for k, v in rules.header_map.items()}
        self._normalized = {}
        for k, v in rules.header_map.items():
            self._normalized.setdefault(norm_key(k), v)
        for name in rules.fields:
            self._normalized.setdefault(norm_key(name), name)
        for name, aliases in rules.field_aliases.items():
            for a in aliases:
                self._normalized.setdefault(norm_key(a), name)
        self._role_keys = [norm_key(c) for c in rules.role_columns]
        self._cache = {}

    def resolve_header(self, header):
        h = str(header).strip()
        if h in self._exact:
            return self._exact[h]
        return self._normalized.get(norm_key(h))

    def resolve_columns(self, headers):
        """field -> ordered candidate headers. Cached per header tuple."""
        headers = tuple(headers)
        if headers in self._cache:
            return self._cache[headers]

        present = {str(h).strip() for h in headers}
        base = {h: unmangle_header(h, present) for h in headers}

        columns = {}
        loose = []
        for h in headers:
            name = self._exact.get(base[h])
            if name:
                columns.setdefault(name, []).append(h)
            else:
                loose.append(h)
        for h in loose:
            name = self._normalized.get(norm_key(base[h]))
            if name:
                columns.setdefault(name, []).append(h)

        by_key = {}
        for h in headers:
            by_key.setdefault(norm_key(base[h]), []).append(h)
        role = columns.setdefault('role', [])
        for key in self._role_keys:
            for h in by_key.get(key, ()):
                if h not in role:
                    role.append(h)
        if not role:
            del columns['role']

        self._cache[headers] = columns
        return columns

    def has_role_column(self, headers):
        return 'role' in self.resolve_columns(headers)

    def resolve(self, row):
        """row (header -> cell) -> {field: raw trimmed text} for non-empty cells."""
        columns = self.resolve_columns(row.keys())
        out = {}
        for name, candidates in columns.items():
            if name == 'role':
                continue
            for h in candidates:
                v = cell_text(row.get(h))
                if v:
                    out[name] = v
                    break

        check = self.role_check or bool
        role = None
        for h in columns.get('role', ()):
            v = cell_text(row.get(h))
            if v and check(v):
                role = v
                break
        if role is None and self.role_check is not None:
            role = self._scan_for_role(row)
        if role is not None:
            out['role'] = role
        return out

    def _scan_for_role(self, row):
        for v in row.values():
            s = cell_text(v)
            if s and self.role_check(s):
                return s
        return None
