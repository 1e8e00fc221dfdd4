from flask import Blueprint, jsonify

from pool_backend.domain.profile import WalletRequest, normalize_wallet_address
from pool_backend.errors import ExternalServiceUnavailable, NotFound
from pool_backend.extensions import get_chain_mirror
from pool_backend.web import validate

blockchain_bp = Blueprint("blockchain", __name__)


def _ready_chain_mirror():
    chain_mirror = get_chain_mirror()
    if not chain_mirror.is_ready():
        raise ExternalServiceUnavailable("Blockchain service not available")
    return chain_mirror


@blockchain_bp.route("/session/<string:wallet_address>", methods=["GET"])
def latest_session(wallet_address):
    validate(WalletRequest, {"walletAddress": wallet_address})
    session = _ready_chain_mirror().get_latest_session(normalize_wallet_address(wallet_address))
    if session is None:
        raise NotFound("No blockchain sessions found for this wallet")
    return jsonify({"success": True, "data": session})


@blockchain_bp.route("/login-count/<string:wallet_address>", methods=["GET"])
def login_count(wallet_address):
    validate(WalletRequest, {"walletAddress": wallet_address})
    wallet_address = normalize_wallet_address(wallet_address)
    count = _ready_chain_mirror().get_login_count(wallet_address)
    return jsonify(
        {
            "success": True,
            "data": {"walletAddress": wallet_address, "onChainLoginCount": count or 0},
        }
    )


@blockchain_bp.route("/stats", methods=["GET"])
def contract_stats():
    stats = _ready_chain_mirror().get_stats()
    return jsonify({"success": True, "data": stats or {"totalUsers": 0, "totalSessions": 0}})
