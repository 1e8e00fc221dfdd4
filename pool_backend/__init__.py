import atexit
import logging

from flask import Flask, request

from pool_backend.config import Config


def create_app(test_config=None):
    logging.basicConfig(level=logging.INFO)
    log = logging.getLogger("app")

    app = Flask(__name__, instance_relative_config=True)
    if test_config is None:
        app.config.from_object(Config)
    else:
        app.config.from_object(Config)
        app.config.from_mapping(test_config)

    from .core import reconcile_referral_counts
    from .domain.chain_mirror import ChainMirror
    from .domain.referrals import ReferralEngine
    from .domain.sessions import SessionIssuer
    from .extensions import cors, db, limiter, scheduler
    from .models.account_repository import SqlAlchemyAccountRepository

    db.init_app(app)
    with app.app_context():
        db.create_all()

    cors.init_app(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)
    limiter.init_app(app)

    app.extensions["session_issuer"] = SessionIssuer(
        app.config["JWT_SECRET"], app.config["JWT_EXPIRES_IN"]
    )
    app.extensions["referral_engine"] = ReferralEngine(
        SqlAlchemyAccountRepository(db),
        app.config["REFERRAL_BASE_URL"],
        max_attempts=app.config["REFERRAL_CODE_MAX_ATTEMPTS"],
    )
    chain_mirror = ChainMirror(
        app.config.get("BLOCKCHAIN_RPC_URL"),
        app.config.get("OPERATOR_PRIVATE_KEY"),
        app.config.get("CONTRACT_ADDRESS"),
    )
    chain_mirror.initialize()
    app.extensions["chain_mirror"] = chain_mirror
    atexit.register(chain_mirror.shutdown)
    log.info(f"Blockchain integration: {'ENABLED' if chain_mirror.is_ready() else 'DISABLED'}")

    from .web.auth import auth_bp
    from .web.blockchain import blockchain_bp
    from .web.errors import register_error_handlers
    from .web.home import health_bp, home_bp
    from .web.leaderboard import leaderboard_bp
    from .web.players import players_bp
    from .web.referrals import referrals_bp

    prefix = app.config["API_PREFIX"]
    app.register_blueprint(home_bp)
    app.register_blueprint(health_bp, url_prefix=prefix)
    app.register_blueprint(auth_bp, url_prefix=f"{prefix}/auth")
    app.register_blueprint(referrals_bp, url_prefix=f"{prefix}/referral")
    app.register_blueprint(players_bp, url_prefix=prefix)
    app.register_blueprint(leaderboard_bp, url_prefix=prefix)
    app.register_blueprint(blockchain_bp, url_prefix=f"{prefix}/blockchain")
    register_error_handlers(app)

    @app.before_request
    def log_request():
        log.info(f"{request.method} {request.path} from {request.remote_addr}")

    # Skip scheduler setup when testing
    if app.config["TESTING"]:
        return app

    scheduler.init_app(app)
    scheduler.add_job(
        id="reconcile_referral_counts",
        func=reconcile_referral_counts,
        trigger="interval",
        seconds=int(app.config["REFERRAL_RECONCILE_INTERVAL_SECONDS"]),
    )
    scheduler.start()

    return app
