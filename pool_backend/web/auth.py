import logging

from flask import Blueprint, jsonify, request

from pool_backend.domain.profile import WalletRequest, normalize_wallet_address
from pool_backend.errors import InvalidOperation, NotFound
from pool_backend.extensions import (
    db,
    get_chain_mirror,
    get_referral_engine,
    get_session_issuer,
    limiter,
)
from pool_backend.models.account_repository import SqlAlchemyAccountRepository
from pool_backend.web import validate

auth_bp = Blueprint("auth", __name__)

log = logging.getLogger("auth")
account_repository = SqlAlchemyAccountRepository(db)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("30 per minute")
def login():
    body = validate(WalletRequest, request.get_json(silent=True))
    wallet_address = normalize_wallet_address(body.wallet_address)
    account = account_repository.get_or_create(wallet_address)

    # A referral link login claims the code before the session starts
    ref = request.args.get("ref")
    if ref:
        try:
            result = get_referral_engine().claim_code(wallet_address, ref)
            log.info(f"Login referral {ref} for {wallet_address}: {result.message}")
        except (NotFound, InvalidOperation) as e:
            log.info(f"Ignoring referral {ref} on login for {wallet_address}: {e.message}")

    issuer = get_session_issuer()
    token = issuer.issue_token(wallet_address, account.id)
    log.info(f"User logged in: {wallet_address}")

    data = {
        "token": token,
        "walletAddress": wallet_address,
        "expiresIn": issuer.expires_in,
    }

    chain_mirror = get_chain_mirror()
    if chain_mirror.is_ready():
        chain_mirror.record_session_async(wallet_address, account.stats)
        login_count = chain_mirror.get_login_count(wallet_address)
        if login_count is not None:
            data["blockchain"] = {
                "onChainLoginCount": login_count,
                "blockchainEnabled": True,
            }

    return jsonify({"success": True, "message": "Login successful", "data": data})
