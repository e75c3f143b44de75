"""
End-to-end ingestion: CSV text in, rows in the database, report out.
"""
import csv
import io

import pytest

from salarybench.ingest.errors import CsvStructureError
from salarybench.ingest.loader import BatchResult, LoadResult
from salarybench.ingest.pipeline import (
    IngestionReport,
    coerce_year,
    ingest_csv,
    ingest_file,
    read_csv_text,
)
from salarybench.models import SurveyResponse

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SURVEY_HEADER = [
    "Respondent ID",
    "What is your current role?",
    "Base Salary",
    "Total Package",
    "What area of the Not for Profit sector would be the most appropriate to describe your organisation?",
    "What is your age group?",
    "I feel my organisation develops me to do my job.",
    "How often do you consider leaving this organisation to work somewhere else?",
    "How likely are you to recommend this organisation to a friend seeking employment?",
]


def to_csv(header, rows):
    buf = io.StringIO()
    w = csv.writer(buf)
    w.writerow(header)
    w.writerows(rows)
    return buf.getvalue()


def survey_export():
    return to_csv(SURVEY_HEADER, [
        ["R1", "Program Manager", "$95,000", "$104,500", "Health", "35-44", "Agree", "Sometimes", "8"],
        ["R2", "Finance Officer", "72000", "", "Disability", "25-34", "Strongly Agree", "Never", "10"],
        # survey tool repeats the question row
        SURVEY_HEADER,
        ["R3", "Chief Executive Officer", "$3,000,000", "n/a", "Health", "45-54", "Disagree", "Often", "12"],
        ["R4", "Grade 8", "65000", "", "Aged Care", "", "", "", ""],
    ])


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------

class TestIngestCsv:
    def test_minimal_file(self, session):
        report = ingest_csv("Role,Base Salary\nProgram Manager,85000\n", 2024)
        rows = session.query(SurveyResponse).all()
        assert len(rows) == 1
        assert rows[0].role == "Program Manager"
        assert rows[0].base_salary == 85000
        assert rows[0].year == 2024

        result = report.to_result()
        assert result["success"] is True
        assert result["stats"]["inserted"] == 1
        assert result["stats"]["unique_roles"] == 1
        assert result["errors"] == []
        assert result["message"] == "Successfully uploaded 1 survey responses for 2024"

    def test_full_survey_export(self, session):
        report = ingest_csv(survey_export(), 2024)
        assert report.total_rows == 5
        assert report.valid_rows == 3
        assert report.skipped == {"header_row": 1, "implausible_role": 1}

        rows = {r.respondent_id: r for r in session.query(SurveyResponse).all()}
        assert set(rows) == {"R1", "R2", "R3"}
        assert rows["R1"].total_package == 104500.0
        assert rows["R1"].sector == "Health"
        assert rows["R1"].workplace_development == 4
        assert rows["R1"].likelihood_to_leave == "Sometimes"
        assert rows["R1"].likelihood_to_recommend == 8
        assert rows["R2"].workplace_development == 5
        assert rows["R2"].total_package is None
        # out-of-range values are dropped, the row is kept
        assert rows["R3"].base_salary is None
        assert rows["R3"].likelihood_to_recommend is None

        stats = report.to_result()["stats"]
        assert stats["unique_roles"] == 3
        assert stats["sectors"] == 2
        assert stats["average_salary"] == 83500.0

    def test_same_file_twice_gives_same_count(self, count_year):
        ingest_csv(survey_export(), 2024)
        first = count_year(2024)
        report = ingest_csv(survey_export(), 2024)
        assert count_year(2024) == first == 3
        assert report.load.deleted == 3

    def test_progress_callback(self, session):
        text = to_csv(["Role"], [[f"Manager {i}"] for i in range(5)])
        seen = []
        ingest_csv(text, 2024, batch_size=2, on_progress=seen.append)
        assert seen == [40.0, 80.0, 100.0]

    def test_alternate_role_column(self, session):
        ingest_csv("Job Title,Salary\nOperations Coordinator,\"$81,000\"\n", 2025)
        row = session.query(SurveyResponse).one()
        assert (row.role, row.base_salary) == ("Operations Coordinator", 81000.0)

    def test_free_text_comment_with_question_wording_is_kept(self, session):
        text = (
            "Role,Base Salary,Comments\n"
            "Program Manager,85000,How often do we get reviews? Rarely\n"
            "Finance Officer,70000,fine\n"
        )
        report = ingest_csv(text, 2024)
        assert report.valid_rows == 2
        assert report.skipped == {}
        roles = sorted(r.role for r in session.query(SurveyResponse).all())
        assert roles == ["Finance Officer", "Program Manager"]

    def test_bom_is_ignored(self, session):
        ingest_csv("\ufeffRole,Base Salary\nProgram Manager,85000\n", 2024)
        assert session.query(SurveyResponse).count() == 1


class TestStructuralErrors:
    """Structural problems abort before the year is cleared."""

    @pytest.fixture(autouse=True)
    def existing(self, count_year):
        ingest_csv("Role\nProgram Manager\nFinance Officer\n", 2024)
        assert count_year(2024) == 2

    def _assert_untouched(self, count_year):
        assert count_year(2024) == 2

    def test_missing_role_column(self, count_year):
        with pytest.raises(CsvStructureError, match="role"):
            ingest_csv("Sector,Base Salary\nHealth,85000\n", 2024)
        self._assert_untouched(count_year)

    def test_no_valid_rows(self, count_year):
        with pytest.raises(CsvStructureError, match="No valid roles"):
            ingest_csv("Role,Base Salary\nGrade 8,85000\n,90000\n", 2024)
        self._assert_untouched(count_year)

    def test_header_only(self, count_year):
        with pytest.raises(CsvStructureError, match="at least one data row"):
            ingest_csv("Role,Base Salary\n", 2024)
        self._assert_untouched(count_year)

    def test_unparseable(self, count_year):
        with pytest.raises(CsvStructureError, match="CSV parsing errors"):
            ingest_csv("Role,Base Salary\nManager,1\nManager,1,2,3\n", 2024)
        self._assert_untouched(count_year)

    def test_empty(self, count_year):
        with pytest.raises(CsvStructureError):
            ingest_csv("   ", 2024)
        self._assert_untouched(count_year)


class TestCoerceYear:
    @pytest.mark.parametrize("value", [2024, "2024", " 2024 "])
    def test_valid(self, value):
        assert coerce_year(value) == 2024

    @pytest.mark.parametrize("value", [None, "", "twenty", True, 1066, 3000])
    def test_invalid(self, value):
        with pytest.raises(CsvStructureError):
            coerce_year(value)


class TestReadCsvText:
    def test_headers_trimmed_and_blank_rows_dropped(self):
        rows = read_csv_text(" Role , Base Salary \nProgram Manager,85000\n,\n\n")
        assert rows == [{"Role": "Program Manager", "Base Salary": "85000"}]

    def test_cells_stay_strings(self):
        rows = read_csv_text("Role,Respondent ID\nManager,007\n")
        assert rows[0]["Respondent ID"] == "007"

    def test_repeated_header_keeps_both_columns(self):
        rows = read_csv_text("Role,Role\n,Program Manager\n")
        assert rows == [{"Role": "", "Role.1": "Program Manager"}]


class TestRepeatedHeaders:
    def test_second_copy_of_a_column_is_used(self, session):
        report = ingest_csv("Role,Base Salary,Base Salary\nProgram Manager,,85000\n", 2024)
        assert report.valid_rows == 1
        row = session.query(SurveyResponse).one()
        assert (row.role, row.base_salary) == ("Program Manager", 85000.0)

    def test_second_role_column(self, session):
        ingest_csv("Role,Role\n,Program Manager\n", 2024)
        assert session.query(SurveyResponse).one().role == "Program Manager"


class TestReport:
    def test_errors_capped_at_ten(self):
        load = LoadResult(year=2024, deleted=0, batches=[
            BatchResult(number=i, attempted=1, error=f"Batch {i}: boom") for i in range(1, 13)
        ])
        report = IngestionReport(year=2024, total_rows=12, valid_rows=12, load=load)
        result = report.to_result()
        assert len(result["errors"]) == 10
        assert result["stats"]["errors"] == 12
        assert result["stats"]["failed_batches"] == 12
        assert result["message"] == "Upload completed with 12 errors. 0 records inserted."


class TestIngestFile:
    def test_reads_from_disk(self, tmp_path, session):
        p = tmp_path / "survey.csv"
        p.write_text("Role,Base Salary\nProgram Manager,85000\n", encoding="utf-8-sig")
        assert ingest_file(p, 2024).inserted == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(CsvStructureError, match="File not found"):
            ingest_file(tmp_path / "nope.csv", 2024)

    def test_wrong_type(self, tmp_path):
        p = tmp_path / "survey.xlsx"
        p.write_bytes(b"")
        with pytest.raises(CsvStructureError, match="Unsupported"):
            ingest_file(p, 2024)
