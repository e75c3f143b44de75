import pytest

from salarybench.ingest.classifier import (
    HEADER_ROW,
    IMPLAUSIBLE_ROLE,
    LEAKED_HEADER_TEXT,
    NO_ROLE,
    RowClassifier,
)
from salarybench.ingest.rules import DEFAULT_RULES, FIELD_KINDS, TEXT


@pytest.fixture
def classifier():
    return RowClassifier()


class TestHeaderRow:
    def test_repeated_question_row_is_excluded(self, classifier):
        row = {
            "Role": "What is your Position Title?",
            "Base Salary": "What is your base salary (excluding superannuation)?",
            "Sector": "",
        }
        result = classifier.classify(row)
        assert not result.include
        assert result.reason == HEADER_ROW

    def test_single_question_cell(self, classifier):
        # every non-empty cell is question text
        assert classifier.is_header_row(["", "How many employees (full time equivalent) are in your organisation?"])

    def test_two_question_cells_among_data(self, classifier):
        values = ["What is your Position Title?", "What is your age group?", "Health", "VIC", "85000"]
        assert classifier.is_header_row(values)

    def test_question_in_a_comment_is_not_a_header(self, classifier):
        values = ["Program Manager", "85000", "How often do we get reviews? Rarely"]
        assert not classifier.is_header_row(values)
        row = {"Role": "Program Manager", "Base Salary": "85000", "Comments": "How often do we get reviews? Rarely"}
        assert classifier.classify(row).include

    def test_one_stray_fragment_among_data_is_not_a_header(self, classifier):
        values = ["Program Manager", "85000", "Health", "VIC", "Female", "35-44",
                  "Agree", "Sometimes", "8", "what is your question"]
        assert not classifier.is_header_row(values)

    def test_only_first_cells_are_examined(self, classifier):
        values = ["x"] * 10 + ["What is your gender?"] * 5
        assert not classifier.is_header_row(values)

    def test_empty_row(self, classifier):
        assert not classifier.is_header_row(["", None, "  "])


class TestRolePlausibility:
    @pytest.mark.parametrize("role", [
        "Finance Officer",
        "Program Manager",
        "Chief Executive Officer",
        "CEO",
        "Team Leader",
        "Head of Fundraising",
        "Executive Assistant",
        "Tier 2 - Reports to CEO",
    ])
    def test_accepted(self, classifier, role):
        assert classifier.is_plausible_role(role)

    @pytest.mark.parametrize("role", [
        "Grade 8",
        "Level 5 Manager",
        "Are you a manager?",
        "Please select your role",
        "",
        "Manager " * 20,
    ])
    def test_rejected(self, classifier, role):
        assert not classifier.is_plausible_role(role)

    def test_titles_without_a_keyword_are_rejected(self, classifier):
        # closed allow-list; see DESIGN.md
        assert not classifier.is_plausible_role("Bookkeeper")

    def test_allow_list_is_configurable(self):
        rules = DEFAULT_RULES.with_overrides(role_allow=DEFAULT_RULES.role_allow + ("bookkeeper",))
        assert RowClassifier(rules).is_plausible_role("Bookkeeper")


class TestClassify:
    def test_good_row(self, classifier):
        result = classifier.classify({"Role": "Finance Officer", "Base Salary": "$72,000"})
        assert result.include
        assert result.record == {"role": "Finance Officer", "base_salary": 72000.0}

    def test_missing_role(self, classifier):
        result = classifier.classify({"Role": "", "Base Salary": "72000"})
        assert not result.include
        assert result.reason == NO_ROLE

    def test_implausible_role(self, classifier):
        result = classifier.classify({"Role": "Grade 8", "Base Salary": "72000"})
        assert not result.include
        assert result.reason == IMPLAUSIBLE_ROLE

    def test_leaked_header_text(self):
        kinds = dict(FIELD_KINDS, base_salary=TEXT)
        classifier = RowClassifier(DEFAULT_RULES.with_overrides(field_kinds=kinds))
        result = classifier.classify({
            "Role": "Program Manager",
            "Base Salary": "Annual base salary before tax and superannuation, in dollars",
        })
        assert not result.include
        assert result.reason == LEAKED_HEADER_TEXT

    def test_long_sector_text(self, classifier):
        assert classifier.has_leaked_header_text({"sector": "x" * 101})
        assert not classifier.has_leaked_header_text({"sector": "x" * 100, "base_salary": 90000.0})
