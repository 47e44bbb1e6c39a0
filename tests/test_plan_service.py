import threading
import time
from datetime import date, timedelta
from unittest.mock import patch

from yugen.coach.plan_service import refresh_week, check_needs_refresh, request_weekly_plan_update
from yugen.coach.schemas import ProposedSession
from yugen.coach.generators import GenerationError

from tests.conftest import USER_ID, profile_row

MONDAY = date(2024, 6, 10)
SUNDAY = date(2024, 6, 16)


def _generator(days=(0, 2, 4, 5), session_type="Easy Run", distance=7.5):
    def generate(prompt):
        generate.prompts.append(prompt)
        return [
            ProposedSession(date=MONDAY + timedelta(days=d), session_type=session_type, distance=distance,
                            time=45, day_of_week=1, phase="Peak", week_number=99)
            for d in days
        ]
    generate.prompts = []
    return generate


def _failing_generator(prompt):
    raise GenerationError("model timed out")


def _stored(repository):
    return repository.fetch_sessions(USER_ID, MONDAY, SUNDAY)


def test_refresh_inserts_generated_week(mock_db, repository):
    generator = _generator()
    result = refresh_week(mock_db, USER_ID, MONDAY, today=MONDAY, generator=generator)

    assert result["success"] is True
    assert result["used_fallback"] is False
    assert result["inserted"] == 4
    stored = _stored(repository)
    assert [s.date for s in stored] == [MONDAY, MONDAY + timedelta(days=2), MONDAY + timedelta(days=4),
                                        MONDAY + timedelta(days=5)]
    # Derived fields win over what the generator claimed
    assert all(s.day_of_week == s.date.isoweekday() for s in stored)
    assert all(s.week_number == result["week_number"] for s in stored)
    assert all(s.phase == result["phase"] for s in stored)
    assert all(s.status == "not_completed" for s in stored)


def test_refresh_computes_phase_and_week_from_profile(mock_db):
    mock_db.data["profiles"] = [profile_row(race_date="2024-06-15")]
    generator = _generator()
    result = refresh_week(mock_db, USER_ID, date(2024, 6, 12), today=MONDAY, generator=generator)

    assert result["phase"] == "Race Week"
    assert result["week_start"] == "2024-06-10"
    # created_at 2024-01-03 -> plan starts Monday 2024-01-01
    assert result["week_number"] == 24
    prompt = generator.prompts[0]
    assert "Phase: Race Week" in prompt
    assert "4 days per week" in prompt
    assert "30.0 km" in prompt


def test_generator_failure_falls_back_to_template(mock_db, repository):
    result = refresh_week(mock_db, USER_ID, MONDAY, today=MONDAY, generator=_failing_generator)

    assert result["success"] is True
    assert result["used_fallback"] is True
    stored = _stored(repository)
    assert [s.day_of_week for s in stored] == [1, 3, 5, 6]
    assert all(s.distance and s.distance > 0 for s in stored)


def test_out_of_week_proposals_trigger_fallback(mock_db):
    def generator(prompt):
        return [ProposedSession(date=date(2024, 7, 1), session_type="Easy Run", distance=5, time=30)]

    result = refresh_week(mock_db, USER_ID, MONDAY, today=MONDAY, generator=generator)
    assert result["used_fallback"] is True


def test_validation_warnings_do_not_block(mock_db, repository):
    generator = _generator(days=(0,), distance=3)
    result = refresh_week(mock_db, USER_ID, MONDAY, today=MONDAY, generator=generator)

    assert result["success"] is True
    assert result["warnings"]
    assert len(_stored(repository)) == 1


def test_refresh_preserves_interacted_sessions(mock_db, repository, make_session):
    done = make_session(MONDAY, status="completed", post_session_notes="Great run")
    repository.insert_sessions(USER_ID, [done])

    result = refresh_week(mock_db, USER_ID, MONDAY, today=MONDAY + timedelta(days=2), generator=_generator())

    assert result["success"] is True
    assert result["preserved_existing"] is True
    stored = _stored(repository)
    assert done.id in [s.id for s in stored]
    assert [s.date for s in stored].count(MONDAY) == 1


def test_missing_profile_fails(mock_db):
    mock_db.data["profiles"] = []
    result = refresh_week(mock_db, USER_ID, MONDAY, today=MONDAY, generator=_generator())
    assert result == {"success": False, "error": "Profile not found"}


def test_repository_failure_is_reported(mock_db, repository, seed_week):
    seed_week(MONDAY)
    mock_db.fail_on.add(("training_plans", "delete"))

    result = refresh_week(mock_db, USER_ID, MONDAY, today=MONDAY, generator=_generator())

    assert result["success"] is False
    assert "delete failed" in result["error"]
    mock_db.fail_on.clear()
    assert len(_stored(repository)) == 5


def test_concurrent_refreshes_for_same_user_do_not_duplicate(mock_db, repository):
    def slow_generator(prompt):
        time.sleep(0.05)
        return _generator()(prompt)

    threads = [
        threading.Thread(target=refresh_week, args=(mock_db, USER_ID, MONDAY),
                         kwargs={"today": MONDAY, "generator": slow_generator})
        for _ in range(3)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(_stored(repository)) == 4


def test_check_needs_refresh(repository, make_session):
    wednesday = MONDAY + timedelta(days=2)
    assert check_needs_refresh(repository, USER_ID, wednesday) is True

    repository.insert_sessions(USER_ID, [make_session(MONDAY + timedelta(days=4))])
    assert check_needs_refresh(repository, USER_ID, wednesday) is False
    assert check_needs_refresh(repository, USER_ID, SUNDAY) is True


def test_on_demand_update_uses_local_date_and_previous_week_feedback(mock_db):
    with patch("yugen.coach.plan_service.process_weekly_feedback") as mock_feedback:
        mock_feedback.return_value = None
        result = request_weekly_plan_update(mock_db, USER_ID, client_local_date="2024-06-13",
                                            generator=_generator())

    assert result["success"] is True
    assert result["week_start"] == "2024-06-10"
    assert result["feedback_processed"] is False
    assert mock_feedback.call_args.args[2] == date(2024, 6, 3)


def test_on_demand_update_survives_feedback_failure(mock_db):
    with patch("yugen.coach.plan_service.process_weekly_feedback", side_effect=RuntimeError("boom")):
        result = request_weekly_plan_update(mock_db, USER_ID, client_local_date="garbage",
                                            today=MONDAY, generator=_generator())
    assert result["success"] is True
    assert result["week_start"] == "2024-06-10"


def test_user_locks_are_released_after_refresh(mock_db):
    from yugen.utils import locks

    refresh_week(mock_db, USER_ID, MONDAY, today=MONDAY, generator=_generator())
    assert USER_ID not in locks._locks
