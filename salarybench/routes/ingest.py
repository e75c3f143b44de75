import logging
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request

from ..ingest.errors import CsvStructureError, YearReplaceError
from ..ingest.pipeline import failure_result, ingest_csv

logger = logging.getLogger(__name__)

bp = Blueprint("ingest", __name__)
ALLOWED = {".csv"}


def _read_upload():
    """(csv_text, year) from either a JSON body or a multipart form."""
    if request.is_json:
        body = request.get_json(silent=True)
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise CsvStructureError("Request body must be a JSON object")
        return body.get("csvContent"), body.get("year")

    f = request.files.get("file")
    if f is None or not f.filename:
        return None, request.form.get("year")
    if Path(f.filename).suffix.lower() not in ALLOWED:
        raise CsvStructureError("invalid format")
    try:
        text = f.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        raise CsvStructureError("File is not valid UTF-8 text") from None
    return text, request.form.get("year")


@bp.post("/upload")
def upload():
    # always JSON
    try:
        text, year = _read_upload()
    except CsvStructureError as e:
        return jsonify(failure_result(str(e))), 400
    if not text or not year:
        return jsonify(failure_result("CSV content and year are required")), 400

    cfg = current_app.config
    try:
        report = ingest_csv(
            text,
            year,
            batch_size=cfg["INGEST_BATCH_SIZE"],
            per_record_fallback=cfg["INGEST_PER_RECORD_FALLBACK"],
            error_limit=cfg["INGEST_ERROR_LIMIT"],
        )
    except CsvStructureError as e:
        logger.info("Rejected upload: %s", e)
        return jsonify(failure_result(str(e))), 400
    except YearReplaceError as e:
        return jsonify(failure_result(f"Failed to clear existing data: {e.reason}")), 500
    except Exception as e:
        logger.exception("Upload error")
        return jsonify(failure_result(f"Upload failed: {e}")), 500
    return jsonify(report.to_result()), 200
