from flask import Blueprint
from sqlalchemy import func

from ..extensions import db
from ..models import SurveyResponse

bp = Blueprint("years", __name__)


@bp.get("/")
def list_years():
    q = db.session.query(SurveyResponse.year, func.count(SurveyResponse.id)) \
        .group_by(SurveyResponse.year) \
        .order_by(SurveyResponse.year.desc())
    return [{"year": y, "responses": int(c)} for y, c in q.all()]
