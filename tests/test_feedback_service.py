from datetime import date, timedelta

from yugen.coach.feedback_service import (
    parse_feedback_response, process_weekly_feedback, save_feedback, get_feedback_for_week,
)
from yugen.training.models import TrainingFeedback

from tests.conftest import USER_ID

WEEK = date(2024, 6, 3)

REPLY = """Prefers:
- Morning runs
- Trails
Struggling With:
- Tempo pacing
Feedback Summary:
Solid week with good consistency. Tempo effort felt too hard."""


def _extractor(reply=REPLY):
    def extract(chat, notes, skipped, week_start):
        extract.calls.append((chat, notes, skipped, week_start))
        return reply
    extract.calls = []
    return extract


def test_parse_feedback_response():
    parsed = parse_feedback_response(REPLY)
    assert parsed["prefers"] == ["Morning runs", "Trails"]
    assert parsed["struggling_with"] == ["Tempo pacing"]
    assert parsed["feedback_summary"].startswith("Solid week")


def test_parse_feedback_response_without_sections():
    parsed = parse_feedback_response("Error communicating with coach")
    assert parsed == {"prefers": [], "struggling_with": [], "feedback_summary": ""}


def test_no_data_means_no_feedback(mock_db):
    extractor = _extractor()
    assert process_weekly_feedback(mock_db, USER_ID, WEEK, extractor=extractor) is None
    assert extractor.calls == []


def test_feedback_gathers_week_sources(mock_db, repository, make_session):
    mock_db.data["coach_messages"] = [
        {"user_id": USER_ID, "sender": "user", "message": "My calves are sore", "created_at": "2024-06-04T08:00:00"},
        {"user_id": USER_ID, "sender": "coach", "message": "Take it easy", "created_at": "2024-06-04T08:01:00"},
        {"user_id": USER_ID, "sender": "user", "message": "Old message", "created_at": "2024-05-20T08:00:00"},
    ]
    repository.insert_sessions(USER_ID, [
        make_session(WEEK, status="completed", post_session_notes="Felt great"),
        make_session(WEEK + timedelta(days=2), session_type="Tempo Run", status="skipped"),
        make_session(WEEK + timedelta(days=4)),
    ])
    extractor = _extractor()

    feedback = process_weekly_feedback(mock_db, USER_ID, WEEK, extractor=extractor)

    chat, notes, skipped, week_start = extractor.calls[0]
    assert chat == ["My calves are sore"]
    assert notes == ["2024-06-03 Easy Run: Felt great"]
    assert skipped == ["2024-06-05 Tempo Run (skipped)"]
    assert week_start == WEEK
    assert feedback.prefers == ["Morning runs", "Trails"]
    assert len(mock_db.rows("user_training_feedback")) == 1


def test_extraction_failure_means_no_feedback(mock_db, repository, make_session):
    repository.insert_sessions(USER_ID, [make_session(WEEK, status="missed")])

    def broken(*args):
        raise RuntimeError("provider down")

    assert process_weekly_feedback(mock_db, USER_ID, WEEK, extractor=broken) is None
    assert process_weekly_feedback(mock_db, USER_ID, WEEK, extractor=_extractor("no sections")) is None
    assert mock_db.rows("user_training_feedback") == []


def test_save_feedback_appends_and_keeps_manual_entries(mock_db):
    save_feedback(mock_db, TrainingFeedback(
        user_id=USER_ID, week_start_date=WEEK,
        prefers=["Long runs on Sunday"], struggling_with=["Hills"],
        feedback_summary="Set manually by the runner.",
    ))
    save_feedback(mock_db, TrainingFeedback(
        user_id=USER_ID, week_start_date=WEEK,
        prefers=["Trails", "long runs on sunday"], struggling_with=[],
        feedback_summary="Automated weekly summary.",
    ))

    rows = mock_db.rows("user_training_feedback")
    assert len(rows) == 1
    stored = get_feedback_for_week(mock_db, USER_ID, WEEK)
    assert stored.prefers == ["Long runs on Sunday", "Trails"]
    assert stored.struggling_with == ["Hills"]
    assert stored.feedback_summary == "Set manually by the runner.\n\nAutomated weekly summary."


def test_save_feedback_same_summary_is_not_repeated(mock_db):
    feedback = TrainingFeedback(user_id=USER_ID, week_start_date=WEEK, feedback_summary="Same text")
    save_feedback(mock_db, feedback)
    save_feedback(mock_db, feedback)
    assert get_feedback_for_week(mock_db, USER_ID, WEEK).feedback_summary == "Same text"
