import logging

from flask import Blueprint, g, jsonify, request

from pool_backend.domain.profile import (
    PlayerNameUpdate,
    ProfileUpdate,
    StatsFilter,
    WalletRequest,
    group_to_wire,
)
from pool_backend.errors import NotFound
from pool_backend.extensions import db
from pool_backend.models.account_repository import SqlAlchemyAccountRepository
from pool_backend.web import require_auth, validate

players_bp = Blueprint("players", __name__)

log = logging.getLogger("players")
account_repository = SqlAlchemyAccountRepository(db)


@players_bp.route("/user", methods=["GET"])
def get_user():
    query = validate(WalletRequest, {"walletAddress": request.args.get("walletAddress")})
    account = account_repository.get_or_create(query.wallet_address)
    return jsonify({"success": True, "data": account.to_dict()})


@players_bp.route("/user", methods=["POST"])
def save_user():
    body = validate(ProfileUpdate, request.get_json(silent=True))
    account = account_repository.update_profile(body.wallet_address, body.changed_groups())
    log.info(f"User data saved: {account.wallet_address}")
    return jsonify({"success": True, "data": account.to_dict()})


@players_bp.route("/player/data", methods=["GET"])
@require_auth
def player_data():
    account = account_repository.find(g.wallet_address)
    if account is None:
        raise NotFound("User not found")
    return jsonify({"success": True, "data": group_to_wire("player_data", account.player_data)})


@players_bp.route("/player/name", methods=["POST"])
@require_auth
def player_name():
    body = validate(PlayerNameUpdate, request.get_json(silent=True))
    account = account_repository.set_player_name(g.wallet_address, body.player_names0)
    if account is None:
        raise NotFound("User not found")

    log.info(f"Player name updated for {g.wallet_address}: {body.player_names0}")
    return jsonify(
        {
            "success": True,
            "message": "Player name updated successfully",
            "data": {"playerNames0": account.player_data["player_names0"]},
        }
    )


@players_bp.route("/player/stats", methods=["GET"])
@require_auth
def player_stats():
    query = validate(StatsFilter, request.args.to_dict())
    account = account_repository.find(g.wallet_address)
    if account is None:
        raise NotFound("User not found")

    stats = group_to_wire("stats", account.stats)
    if query.stat_type:
        stats = {query.stat_type: stats[query.stat_type]}
    return jsonify({"success": True, "data": stats})
