import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "super-secret-key"
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URI"
    ) or "sqlite:///" + os.path.join(basedir, "pool.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    API_PREFIX = os.environ.get("API_PREFIX") or "/api"

    JWT_SECRET = os.environ.get("JWT_SECRET") or SECRET_KEY
    JWT_EXPIRES_IN = os.environ.get("JWT_EXPIRES_IN") or "30d"

    REFERRAL_BASE_URL = os.environ.get("REFERRAL_BASE_URL") or "https://zerogpool.xyz/"
    REFERRAL_CODE_MAX_ATTEMPTS = int(os.environ.get("REFERRAL_CODE_MAX_ATTEMPTS", "5"))
    REFERRAL_RECONCILE_INTERVAL_SECONDS = int(
        os.environ.get("REFERRAL_RECONCILE_INTERVAL_SECONDS", "3600")
    )

    CORS_ORIGINS = (
        os.environ.get("CORS_ORIGINS")
        or "https://zerogpool.xyz,http://localhost:3000,http://localhost:5173"
    ).split(",")

    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT") or "200 per minute"
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI") or "memory://"

    # Chain mirror stays disabled unless all three are set
    BLOCKCHAIN_RPC_URL = os.environ.get("BLOCKCHAIN_RPC_URL")
    OPERATOR_PRIVATE_KEY = os.environ.get("OPERATOR_PRIVATE_KEY")
    CONTRACT_ADDRESS = os.environ.get("CONTRACT_ADDRESS")
