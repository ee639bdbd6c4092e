"""Password hashing for the login identity provider."""

from pwdlib import PasswordHash

password_hash = PasswordHash.recommended()


def hash_password(password: str) -> str:
    """Hash password using Argon2."""
    return password_hash.hash(password)


def check_password(plain_password: str, hashed_password: str) -> tuple[bool, str | None]:
    """Verify a password and return a replacement hash when parameters changed.

    Returns:
        (is_valid, new_hash) where new_hash is None unless the stored hash
        should be upgraded.
    """
    return password_hash.verify_and_update(plain_password, hashed_password)
