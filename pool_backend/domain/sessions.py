import logging
from datetime import datetime, timezone

import jwt

from pool_backend.domain.profile import normalize_wallet_address
from pool_backend.errors import InvalidToken, TokenExpired
from pool_backend.utils.durations import parse_duration

log = logging.getLogger("sessions")

JWT_ALGORITHM = "HS256"


class SessionClaims:
    def __init__(self, wallet_address: str, account_id):
        self.wallet_address = wallet_address
        self.account_id = account_id


class SessionIssuer:
    def __init__(self, secret: str, expires_in="30d"):
        self._secret = secret
        self.expires_in = expires_in
        self._lifetime = parse_duration(expires_in)

    def issue_token(self, wallet_address: str, account_id) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = {
            "walletAddress": normalize_wallet_address(wallet_address),
            "userId": account_id,
            "timestamp": int(now.timestamp() * 1000),
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> SessionClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired("Token has expired. Please login again.") from e
        except jwt.InvalidTokenError as e:
            log.info(f"Rejected session token: {e}")
            raise InvalidToken("Invalid token. Please login again.") from e

        wallet_address = payload.get("walletAddress")
        if not wallet_address:
            raise InvalidToken("Invalid token. Please login again.")
        return SessionClaims(normalize_wallet_address(wallet_address), payload.get("userId"))
