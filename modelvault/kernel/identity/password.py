"""
Credential hashing with bcrypt, plus the default PIN for new accounts.
"""

import secrets

import bcrypt

BCRYPT_ROUNDS = 12

# bcrypt ignores everything past 72 bytes
BCRYPT_MAX_BYTES = 72

PIN_LENGTH = 4


class PasswordHasher:
    """Password hashing service."""

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    @staticmethod
    def hash(password: str) -> str:
        """Hash a plain text password."""
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(PasswordHasher._encode(password), salt).decode("utf-8")

    @staticmethod
    def verify(plain_password: str, hashed_password: str) -> bool:
        """
        Check a plain text password against a stored hash.

        A corrupt stored hash verifies as False rather than raising.
        """
        try:
            return bcrypt.checkpw(
                PasswordHasher._encode(plain_password),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            return False


def generate_pin(length: int = PIN_LENGTH) -> str:
    """Random numeric PIN used when an account is created without a password."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def hash_password(password: str) -> str:
    """Hash a password."""
    return PasswordHasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password."""
    return PasswordHasher.verify(plain_password, hashed_password)
