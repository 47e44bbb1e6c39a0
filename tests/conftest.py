import pytest
from datetime import date, timedelta

from yugen import create_app
from yugen.mock_supabase import MockSupabaseClient
from yugen.training.models import TrainingSession
from yugen.training.repository import SessionRepository

USER_ID = "user-123"
# 2024-01-01 is a Monday
PLAN_START = date(2024, 1, 1)


def profile_row(**overrides):
    row = {
        "id": USER_ID,
        "created_at": "2024-01-03T09:30:00+00:00",
        "goal_type": "Half marathon",
        "race_date": None,
        "experience_level": "intermediate",
        "current_frequency": "4 days per week",
        "current_mileage": "30 km",
        "units": "km",
        "nickname": "Sam",
        "injury_history": "",
        "schedule_constraints": "",
        "coach_id": "dathan",
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_db():
    return MockSupabaseClient(data={"profiles": [profile_row()]})


@pytest.fixture
def repository(mock_db):
    return SessionRepository(mock_db)


@pytest.fixture
def make_session():
    def _make(day, session_type="Easy Run", status="not_completed", post_session_notes="",
              distance=5.0, time=30.0, user_id=USER_ID, week_number=1, **kwargs):
        return TrainingSession(
            user_id=user_id,
            date=day,
            week_number=week_number,
            day_of_week=day.isoweekday(),
            session_type=session_type,
            distance=distance,
            time=time,
            status=status,
            post_session_notes=post_session_notes,
            **kwargs,
        )
    return _make


@pytest.fixture
def seed_week(repository, make_session):
    """Store one session per listed weekday offset in the week starting at `monday`."""
    def _seed(monday, offsets=range(5), **kwargs):
        sessions = [make_session(monday + timedelta(days=i), **kwargs) for i in offsets]
        repository.insert_sessions(USER_ID, sessions)
        return sessions
    return _seed


@pytest.fixture
def app(mock_db):
    app = create_app("testing", supabase_client=mock_db)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_header(app):
    from flask_jwt_extended import create_access_token
    with app.app_context():
        token = create_access_token(identity=USER_ID)
    return {"Authorization": f"Bearer {token}"}
