import io
import logging
from datetime import datetime

import pandas as pd
from flask import Blueprint, jsonify, request, send_file

from ..extensions import db
from ..ingest.stats import salary_stats, summarize
from ..models import SurveyResponse

logger = logging.getLogger(__name__)

bp = Blueprint("analytics", __name__)

FILTER_FIELDS = (
    "role",
    "sector",
    "operating_budget",
    "organisation_size_fte",
    "state_territory",
    "gender",
    "age_group",
)

EXPORT_COLUMNS = {
    "role": "Role",
    "base_salary": "Base Salary",
    "total_package": "Total Package",
    "sector": "Sector",
    "operating_budget": "Operating Budget",
    "organisation_size_fte": "Organisation Size",
    "state_territory": "State/Territory",
    "year": "Year",
}


def _split(name):
    raw = request.args.get(name)
    if not raw:
        return []
    return [v.strip() for v in raw.split(",") if v.strip()]


def _years():
    out = []
    for v in _split("year"):
        try:
            out.append(int(v))
        except ValueError:
            raise ValueError(f"Invalid year filter: {v}") from None
    return out


def apply_filters(q):
    years = _years()
    if years:
        q = q.filter(SurveyResponse.year.in_(years))
    for name in FILTER_FIELDS:
        values = _split(name)
        if values:
            q = q.filter(getattr(SurveyResponse, name).in_(values))
    return q


@bp.get("/salary")
def salary():
    field = request.args.get("field", "base_salary")
    if field not in ("base_salary", "total_package"):
        return jsonify({"error": f"unsupported field: {field}"}), 400
    col = getattr(SurveyResponse, field)
    try:
        q = apply_filters(db.session.query(col).filter(col.isnot(None)))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(salary_stats(v for (v,) in q.all()))


@bp.get("/filters")
def filters():
    """Distinct values per filter field, for the filter panel."""
    try:
        years = _years()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    out = {}
    for name in FILTER_FIELDS:
        col = getattr(SurveyResponse, name)
        q = db.session.query(col).filter(col.isnot(None))
        if years:
            q = q.filter(SurveyResponse.year.in_(years))
        out[name] = sorted(v for (v,) in q.distinct().all())
    out["year"] = sorted(y for (y,) in db.session.query(SurveyResponse.year).distinct().all())
    return jsonify(out)


@bp.get("/summary")
def summary():
    try:
        q = apply_filters(SurveyResponse.query)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    rows = [{"role": r.role, "sector": r.sector, "base_salary": r.base_salary} for r in q.all()]
    return jsonify(summarize(rows))


@bp.get("/export")
def export():
    """Filtered responses as a CSV download."""
    try:
        q = apply_filters(SurveyResponse.query).order_by(SurveyResponse.year, SurveyResponse.role)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    rows = [{k: getattr(r, k) for k in EXPORT_COLUMNS} for r in q.all()]
    if not rows:
        return jsonify({"error": "No data to export"}), 404

    df = pd.DataFrame(rows, columns=list(EXPORT_COLUMNS)).rename(columns=EXPORT_COLUMNS)
    output = io.BytesIO(df.to_csv(index=False).encode("utf-8"))
    filename = f"salary_benchmark_export_{datetime.now().strftime('%Y%m%d')}.csv"
    logger.info("Exporting %s rows", len(rows))
    return send_file(output, mimetype="text/csv", as_attachment=True, download_name=filename)
