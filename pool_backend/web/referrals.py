import logging

from flask import Blueprint, g, jsonify, request

from pool_backend.domain.profile import ClaimReferralRequest, GenerateReferralRequest
from pool_backend.extensions import get_referral_engine, limiter
from pool_backend.web import require_auth, validate

referrals_bp = Blueprint("referrals", __name__)

log = logging.getLogger("referrals_web")


@referrals_bp.route("/generate", methods=["POST"])
@limiter.limit("10 per minute")
def generate():
    body = validate(GenerateReferralRequest, request.get_json(silent=True))
    generated = get_referral_engine().generate_code(
        body.wallet_address, body.signature, body.nonce
    )
    return jsonify(
        {
            "success": True,
            "referralCode": generated.code,
            "referralLink": generated.link,
        }
    )


@referrals_bp.route("/claim", methods=["POST"])
@limiter.limit("20 per minute")
def claim():
    body = validate(ClaimReferralRequest, request.get_json(silent=True))
    result = get_referral_engine().claim_code(body.wallet_address, body.referral_code)
    return jsonify(
        {
            "success": True,
            "message": result.message,
            "referralCount": result.count,
        }
    )


@referrals_bp.route("/stats", methods=["GET"])
@require_auth
def stats():
    referral = get_referral_engine().referral_stats(g.wallet_address)
    return jsonify({"success": True, **referral.to_dict()})
