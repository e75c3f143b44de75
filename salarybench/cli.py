"""
Command line ingestion:

    flask --app salarybench ingest-csv survey_2024.csv --year 2024
    flask --app salarybench init-db
"""
import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .ingest.errors import IngestError
from .ingest.pipeline import failure_result, ingest_file


@click.command("ingest-csv")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--year", type=int, required=True, help="Survey year to replace.")
@click.option("--batch-size", type=int, default=None, help="Records per insert batch.")
@click.option("--per-record-fallback/--no-per-record-fallback", default=None,
              help="Retry a failed batch one record at a time.")
@with_appcontext
def ingest_csv_command(path, year, batch_size, per_record_fallback):
    """Replace all survey responses for YEAR with the rows in PATH."""
    cfg = current_app.config
    if per_record_fallback is None:
        per_record_fallback = cfg["INGEST_PER_RECORD_FALLBACK"]

    def progress(pct):
        click.echo(f"Progress: {pct:.1f}%")

    try:
        report = ingest_file(
            path,
            year,
            batch_size=batch_size or cfg["INGEST_BATCH_SIZE"],
            per_record_fallback=per_record_fallback,
            on_progress=progress,
            error_limit=cfg["INGEST_ERROR_LIMIT"],
        )
    except IngestError as e:
        click.echo(json.dumps(failure_result(str(e)), indent=2), err=True)
        raise SystemExit(1)

    result = report.to_result()
    click.echo(result["message"])
    click.echo("Statistics: " + json.dumps(result["stats"], indent=2))
    for err in result["errors"]:
        click.echo(f"  - {err}", err=True)


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create the survey_responses table."""
    db.create_all()
    click.echo("Database tables created")


def register_commands(app):
    app.cli.add_command(ingest_csv_command)
    app.cli.add_command(init_db_command)
