from flask import current_app
from flask_apscheduler import APScheduler
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
scheduler = APScheduler()
cors = CORS()
limiter = Limiter(key_func=get_remote_address)


def get_chain_mirror():
    return current_app.extensions["chain_mirror"]


def get_session_issuer():
    return current_app.extensions["session_issuer"]


def get_referral_engine():
    return current_app.extensions["referral_engine"]
