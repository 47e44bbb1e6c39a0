# yugen/coach/routes.py

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from datetime import date, timedelta
from yugen.coach import adjustments
from yugen.coach.plan_service import request_weekly_plan_update
from yugen.coach.profile import get_user_profile
from yugen.extensions import limiter
from yugen.training.models import parse_date
from yugen.training.phases import monday_of, phase_outlook
from yugen.training.repository import SessionRepository
import logging

coach_bp = Blueprint('coach', __name__)
logger = logging.getLogger(__name__)


def _supabase():
    return current_app.extensions["supabase"]


def _refresh_rate_limit():
    return current_app.config.get("REFRESH_RATE_LIMIT", "10 per hour")


@coach_bp.route("/weekly-plan/refresh", methods=["POST"])
@jwt_required()
@limiter.limit(_refresh_rate_limit)
def refresh_weekly_plan():
    """
    Regenerates the week containing the client's local date.

    Body (optional): {"client_local_date": "YYYY-MM-DD", "location": "Melbourne"}
    """
    try:
        user_id = get_jwt_identity()
        data = request.get_json(silent=True) or {}

        raw_date = data.get("client_local_date")
        if raw_date and not parse_date(raw_date):
            logger.warning(f"Ignoring invalid client_local_date '{raw_date}' for {user_id}")

        result = request_weekly_plan_update(
            _supabase(), user_id,
            client_local_date=raw_date,
            location_hint=data.get("location"),
        )

        if result.get("success"):
            return jsonify({
                "success": True,
                "message": "Weekly plan updated.",
                "week_start": result.get("week_start"),
                "phase": result.get("phase"),
                "used_fallback": result.get("used_fallback"),
                "warnings": result.get("warnings", []),
            }), 200
        if result.get("error") == "Profile not found":
            return jsonify({"success": False, "error": "Profile not found."}), 404
        return jsonify({"success": False, "error": result.get("error", "Failed to update plan")}), 500

    except Exception as e:
        logger.error(f"Error in refresh_weekly_plan: {e}", exc_info=True)
        return jsonify({"success": False, "error": str(e)}), 500


@coach_bp.route("/chats/<chat_id>/adjustments", methods=["POST"])
@jwt_required()
def handle_adjustment_message(chat_id):
    """
    Runs a chat message through the plan adjustment flow.

    Returns {"handled": false} when the message has nothing to do with
    adjusting the plan, so the client can hand it to the regular coach chat.
    """
    try:
        user_id = get_jwt_identity()
        data = request.get_json(silent=True) or {}
        message = (data.get("message") or "").strip()
        if not message:
            return jsonify({"error": "Message is required."}), 400

        client = _supabase()
        if not adjustments.chat_exists(client, chat_id, user_id):
            return jsonify({"error": "Chat not found."}), 404

        profile = get_user_profile(client, user_id)
        if not profile:
            return jsonify({"error": "Profile not found."}), 404

        today = parse_date(data.get("client_local_date")) or date.today()
        repository = SessionRepository(client)
        week_monday = monday_of(today)
        current_week = repository.fetch_sessions(user_id, week_monday, week_monday + timedelta(days=6))

        conversation = adjustments.AdjustmentConversation(
            repository,
            pending=adjustments.load_pending_adjustment(client, chat_id, user_id),
            today=today,
        )
        result = conversation.handle_message(message, user_id, profile, current_week)
        adjustments.save_pending_adjustment(client, chat_id, user_id, conversation.pending)

        result["state"] = conversation.state.value
        return jsonify(result), 200

    except Exception as e:
        logger.error(f"Error in handle_adjustment_message: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@coach_bp.route("/phase-outlook", methods=["GET"])
@jwt_required()
def get_phase_outlook():
    """Upcoming weeks with their training phase."""
    try:
        user_id = get_jwt_identity()
        weeks = request.args.get("weeks", default=current_app.config.get("PHASE_OUTLOOK_WEEKS", 12), type=int)
        weeks = max(1, min(weeks, 52))

        profile = get_user_profile(_supabase(), user_id)
        if not profile:
            return jsonify({"error": "Profile not found."}), 404

        outlook = phase_outlook(profile.race_date, profile.plan_start_monday, date.today(), weeks)
        return jsonify({
            "race_date": profile.race_date.isoformat() if profile.race_date else None,
            "plan_start": profile.plan_start_monday.isoformat(),
            "weeks": outlook,
        }), 200

    except Exception as e:
        logger.error(f"Error in get_phase_outlook: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500
