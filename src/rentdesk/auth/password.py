"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks. The salt and
the cost factor are embedded in the hash itself ("$2b$10$..."), so a
hash made under an older cost factor still verifies after the constant
changes — needs_rehash() tells login when to upgrade it.
"""

import bcrypt

BCRYPT_ROUNDS = 10


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    Learn: Every call draws a fresh random salt, so hashing the same
    password twice gives two different strings. Passwords are truncated
    to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash (constant-time compare).

    Returns False for a mismatch or an unreadable stored hash; never raises.
    """
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError, AttributeError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """Check if a hash was made with a different cost factor than today's."""
    return _cost_of(password_hash) != BCRYPT_ROUNDS


def _cost_of(password_hash: str) -> int | None:
    """Read the cost factor out of a "$2b$10$salt+digest" hash."""
    try:
        _, _, cost, _ = password_hash.split("$", 3)
        return int(cost)
    except (ValueError, AttributeError):
        return None
