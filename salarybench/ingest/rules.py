# salarybench/ingest/rules.py
"""
Heuristic tables used to turn a survey export into SurveyResponse rows.

Everything lives on one frozen IngestionRules object so a survey version
can ship its own tables and tests can build a resolver/classifier in
isolation. DEFAULT_RULES matches the NFP salary survey exports.
"""
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

SALARY = "salary"
RATING = "rating"
TEXT = "text"

# literal question text as exported by the survey tool
HEADER_MAP = {
    "What area of the Not for Profit sector would be the most appropriate to describe your organisation?": "sector",
    "If selected Multidisciplinary or Other, please specify:": "specialisation",
    "What is your organisation's total operating budget for this financial year?": "operating_budget",
    "How many employees (full time equivalent) are in your organisation?": "organisation_size_fte",
    "What geographical area does your organisation cover?": "geographic_reach",
    "What is the location of your organisation or the National head office?": "state_territory",
    "What is your gender?": "gender",
    "What is your age group?": "age_group",
    "Limited mental health support or wellbeing initiatives": "mental_health_support",
    "I feel my organisation develops me to do my job.": "workplace_development",
    "How often do you consider leaving this organisation to work somewhere else?": "likelihood_to_leave",
    "How likely are you to leave your present employment in 2025?": "likelihood_to_leave_2025",
    "How likely are you to recommend this organisation to a friend seeking employment?": "likelihood_to_recommend",
    "What is your current role?": "role",
    "What is your Position Title?": "role",
    "Role": "role",
    "Base Salary": "base_salary",
    "What is your base salary (excluding superannuation)?": "base_salary",
    "Total Package": "total_package",
    "What is your total salary package (including superannuation)?": "total_package",
    "Respondent ID": "respondent_id",
}

# short names seen in hand-prepared files; matched after normalization
FIELD_ALIASES = {
    "base_salary": ("basesalary", "salary"),
    "total_package": ("totalpackage", "totalcompensation"),
    "sector": ("sector", "industry"),
    "specialisation": ("specialisation", "specialization"),
    "operating_budget": ("operatingbudget", "budget"),
    "organisation_size_fte": ("organisationsizefte", "organizationsize", "organisationsize"),
    "geographic_reach": ("geographicreach", "location"),
    "state_territory": ("stateterritory", "state"),
    "gender": ("gender",),
    "age_group": ("agegroup", "age"),
    "mental_health_support": ("mentalhealthsupport",),
    "workplace_development": ("workplacedevelopment",),
    "likelihood_to_leave": ("likelihoodtoleave",),
    "likelihood_to_leave_2025": ("likelihoodtoleave2025",),
    "likelihood_to_recommend": ("likelihoodtorecommend",),
    "respondent_id": ("respondentid", "id"),
}

ROLE_COLUMNS = (
    "Role",
    "Job Title",
    "Position",
    "Position Title",
    "Current Role",
    "What is your current role?",
    "What is your Position Title?",
    "Title",
)

FIELD_KINDS = {
    "base_salary": SALARY,
    "total_package": SALARY,
    "mental_health_support": RATING,
    "workplace_development": RATING,
    "likelihood_to_recommend": RATING,
    "role": TEXT,
    "sector": TEXT,
    "specialisation": TEXT,
    "operating_budget": TEXT,
    "organisation_size_fte": TEXT,
    "geographic_reach": TEXT,
    "state_territory": TEXT,
    "gender": TEXT,
    "age_group": TEXT,
    "likelihood_to_leave": TEXT,
    "likelihood_to_leave_2025": TEXT,
    "respondent_id": TEXT,
}

# agreement / frequency / likelihood wording, all on the same 1-5 scale
LIKERT = {
    "strongly agree": 5,
    "agree": 4,
    "somewhat agree": 4,
    "neutral": 3,
    "neither agree nor disagree": 3,
    "somewhat disagree": 2,
    "disagree": 2,
    "strongly disagree": 1,
    "always": 5,
    "very often": 5,
    "often": 4,
    "sometimes": 3,
    "rarely": 2,
    "never": 1,
    "extremely likely": 5,
    "very likely": 5,
    "likely": 4,
    "unsure": 3,
    "neither likely nor unlikely": 3,
    "unlikely": 2,
    "very unlikely": 1,
    "not at all likely": 1,
}

HEADER_INDICATORS = (
    "what is your",
    "position title",
    "how many",
    "how often",
    "how likely",
    "what area",
    "what geographical",
    "please specify",
    "if selected",
    "i feel my organisation",
    "respondent id",
)

ROLE_DENY = (
    "are you a",
    "please",
    "grade",
    "level",
    "what is",
    "which",
    "select",
    "specify",
    "?",
)

ROLE_ALLOW = (
    "manager",
    "director",
    "officer",
    "coordinator",
    "specialist",
    "assistant",
    "lead",
    "head",
    "chief",
    "executive",
    "ceo",
    "cfo",
    "coo",
    "tier",
    "report",
)

NULL_TOKENS = ("", "n/a", "na")


def _frozen(d):
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class IngestionRules:
    header_map: Mapping[str, str] = field(default_factory=lambda: _frozen(HEADER_MAP))
    field_aliases: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: _frozen(FIELD_ALIASES))
    role_columns: Tuple[str, ...] = ROLE_COLUMNS
    field_kinds: Mapping[str, str] = field(default_factory=lambda: _frozen(FIELD_KINDS))
    likert: Mapping[str, int] = field(default_factory=lambda: _frozen(LIKERT))
    header_indicators: Tuple[str, ...] = HEADER_INDICATORS
    role_deny: Tuple[str, ...] = ROLE_DENY
    role_allow: Tuple[str, ...] = ROLE_ALLOW
    null_tokens: Tuple[str, ...] = NULL_TOKENS

    salary_max: float = 2_000_000
    rating_min: int = 1
    rating_max: int = 10
    header_scan_cells: int = 10
    header_ratio: float = 0.3
    max_role_length: int = 100
    max_salary_text: int = 50
    max_sector_text: int = 100

    def kind_of(self, field_name: str) -> Optional[str]:
        return self.field_kinds.get(field_name)

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(self.field_kinds)

    def with_overrides(self, **changes) -> "IngestionRules":
        """Copy with some tables swapped, e.g. a survey year with new question text."""
        for key in ("header_map", "field_aliases", "field_kinds", "likert"):
            if key in changes:
                changes[key] = _frozen(changes[key])
        return replace(self, **changes)


DEFAULT_RULES = IngestionRules()
