from functools import wraps

from flask import g, request
from pydantic import ValidationError as SchemaError

from pool_backend.errors import Unauthorized, ValidationError
from pool_backend.extensions import get_session_issuer


def _describe(error: dict) -> str:
    # Messages from our own validators carry the raised exception in ctx
    if error.get("type") == "value_error" and "error" in error.get("ctx", {}):
        message = str(error["ctx"]["error"])
    else:
        message = error["msg"]
    field = ".".join(str(part) for part in error["loc"])
    return f"{field}: {message}" if field else message


def validate(schema, data):
    """Validate a request payload, turning schema errors into a 400."""
    try:
        return schema.model_validate(data or {})
    except SchemaError as e:
        raise ValidationError(", ".join(_describe(err) for err in e.errors())) from e


def require_auth(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            raise Unauthorized("No token provided. Please login first.")
        token = header[len("Bearer "):].strip()
        if not token:
            raise Unauthorized("Invalid token format")

        claims = get_session_issuer().verify_token(token)
        g.wallet_address = claims.wallet_address
        g.account_id = claims.account_id
        return view(*args, **kwargs)

    return wrapper
