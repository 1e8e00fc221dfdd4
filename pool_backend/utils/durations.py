import re
from datetime import timedelta

_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}
_DURATION = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")


def parse_duration(value) -> timedelta:
    """
    Parse an expiry such as '30d', '12h', '15m' or a bare number of seconds.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)

    match = _DURATION.match(str(value))
    if not match:
        raise ValueError(f"Unrecognised duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_UNITS[unit or "s"]: int(amount)})
