from __future__ import annotations

import secrets
import string

KEYCODE_LENGTH = 8
KEYCODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_keycode(length: int = KEYCODE_LENGTH) -> str:
    """Return a random uppercase alphanumeric keycode from the system CSPRNG."""
    return "".join(secrets.choice(KEYCODE_ALPHABET) for _ in range(length))
