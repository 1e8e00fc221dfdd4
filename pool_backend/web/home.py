from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from pool_backend.extensions import get_chain_mirror

home_bp = Blueprint("home", __name__)
health_bp = Blueprint("health", __name__)


@home_bp.route("/", methods=["GET"])
def index():
    prefix = current_app.config["API_PREFIX"]
    return jsonify(
        {
            "success": True,
            "message": "ZeroGPool backend API",
            "blockchain": {"enabled": get_chain_mirror().is_ready()},
            "endpoints": {
                "health": f"GET {prefix}/health",
                "login": f"POST {prefix}/auth/login",
                "getUser": f"GET {prefix}/user?walletAddress=<address>",
                "saveUser": f"POST {prefix}/user",
                "leaderboard": f"GET {prefix}/leaderboard",
                "generateReferral": f"POST {prefix}/referral/generate",
                "claimReferral": f"POST {prefix}/referral/claim",
                "referralStats": f"GET {prefix}/referral/stats",
            },
        }
    )


@health_bp.route("/health", methods=["GET"])
def health():
    return jsonify(
        {
            "success": True,
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "blockchain": {"enabled": get_chain_mirror().is_ready()},
        }
    )
