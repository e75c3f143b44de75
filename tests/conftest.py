import pytest

from salarybench import create_app
from salarybench.extensions import db
from salarybench.models import SurveyResponse


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def count_year(session):
    def _count(year):
        return session.query(SurveyResponse).filter_by(year=year).count()
    return _count
