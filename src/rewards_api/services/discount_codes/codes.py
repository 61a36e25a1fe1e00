from __future__ import annotations

import secrets


def generate_six_digit_code() -> str:
    """Random code in ``100000``-``999999``; never starts with zero."""

    return str(100000 + secrets.randbelow(900000))
