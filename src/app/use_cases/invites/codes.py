"""Invite code format"""

import secrets
from typing import Optional

# No 0/O or 1/I, codes are read aloud and typed by hand
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def generate_invite_code(length: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(code: Optional[str]) -> str:
    """Codes are case-insensitive; stored and compared upper-case"""
    return (code or "").strip().upper()
