from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from pool_backend.extensions import db


def _utcnow():
    return datetime.now(timezone.utc)


class AccountModel(db.Model):
    __tablename__ = "account"

    id = Column(Integer, primary_key=True)
    wallet_address = Column(String(42), nullable=False, unique=True, index=True)
    # NULLs never collide, so the constraint only binds assigned codes
    referral_code = Column(String(16), nullable=True, unique=True)
    referral_count = Column(Integer, nullable=False, default=0)
    referred_by = Column(String(16), nullable=True, index=True)
    player_data = Column(JSON, nullable=False, default=dict)
    control_settings = Column(JSON, nullable=False, default=dict)
    game_settings = Column(JSON, nullable=False, default=dict)
    stats = Column(JSON, nullable=False, default=dict)
    misc = Column(JSON, nullable=False, default=dict)
    # Copy of stats["total_balls_pocketed"] so the leaderboard can sort on an index
    total_balls_pocketed = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
