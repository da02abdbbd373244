"""Password hashing for RentWise users."""

from passlib.hash import pbkdf2_sha256


def hash_password(password: str) -> str:
    """Hash a plain-text password for storage."""
    return pbkdf2_sha256.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain-text password against a stored hash."""
    try:
        return pbkdf2_sha256.verify(password, password_hash)
    except ValueError:
        # Stored value is not a pbkdf2_sha256 hash
        return False
