import uuid
from datetime import datetime

from .extensions import db


def _uuid():
    return str(uuid.uuid4())


class SurveyResponse(db.Model):
    """One respondent's answers for a survey year. The year is the unit of replacement."""
    __tablename__ = "survey_responses"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    year = db.Column(db.Integer, nullable=False, index=True)
    role = db.Column(db.String(255), nullable=False)
    base_salary = db.Column(db.Float)
    total_package = db.Column(db.Float)
    sector = db.Column(db.String(255))
    specialisation = db.Column(db.String(255))
    operating_budget = db.Column(db.String(128))
    organisation_size_fte = db.Column(db.String(128))
    geographic_reach = db.Column(db.String(128))
    state_territory = db.Column(db.String(64))
    gender = db.Column(db.String(64))
    age_group = db.Column(db.String(32))
    mental_health_support = db.Column(db.Integer)   # 1-10 rating
    workplace_development = db.Column(db.Integer)
    likelihood_to_leave = db.Column(db.String(128))
    likelihood_to_leave_2025 = db.Column(db.String(128))
    likelihood_to_recommend = db.Column(db.Integer)
    respondent_id = db.Column(db.String(64))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        out = {c.name: getattr(self, c.name) for c in self.__table__.columns}
        for k in ("created_at", "updated_at"):
            if out[k] is not None:
                out[k] = out[k].isoformat()
        return out
