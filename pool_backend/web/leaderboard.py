from flask import Blueprint, jsonify, request

from pool_backend.domain.leaderboard import MAX_LEADERBOARD_SIZE, top_players
from pool_backend.errors import ValidationError
from pool_backend.extensions import db
from pool_backend.models.account_repository import SqlAlchemyAccountRepository

leaderboard_bp = Blueprint("leaderboard", __name__)

account_repository = SqlAlchemyAccountRepository(db)


@leaderboard_bp.route("/leaderboard", methods=["GET"])
def index():
    try:
        limit = int(request.args.get("limit", MAX_LEADERBOARD_SIZE))
    except ValueError:
        raise ValidationError("limit must be an integer")

    entries = [entry.to_dict() for entry in top_players(account_repository, limit)]
    return jsonify({"success": True, "data": entries, "count": len(entries)})
