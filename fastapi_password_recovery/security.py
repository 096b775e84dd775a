"""Security utilities for OTP codes, reset tokens and password hashing."""

import secrets

from argon2 import PasswordHasher

_password_hasher = PasswordHasher()

RESET_TOKEN_BYTES = 32


def normalize_email(email: str) -> str:
    """
    Normalize an email address for use as a store key.

    Email lookups are case-insensitive, so every store keys on the trimmed,
    lower-cased address.

    Example:
        >>> normalize_email("  Reader@Library.ORG ")
        'reader@library.org'
    """
    return email.strip().lower()


def generate_otp(length: int, developer_mode: bool) -> str:
    """
    Generate a cryptographically secure numeric OTP code.

    In developer mode, returns a code consisting of zeros for easy testing.

    Args:
        length: Number of digits (typically 6)
        developer_mode: If True, return test code of all zeros

    Returns:
        Zero-padded OTP code as a string

    Example:
        >>> generate_otp(6, False)
        '048291'
        >>> generate_otp(6, True)
        '000000'
    """
    if developer_mode:
        return "0" * length

    return str(secrets.randbelow(10**length)).zfill(length)


def generate_reset_token() -> str:
    """
    Generate an opaque, unguessable password reset token.

    Returns:
        64 character hex string (32 random bytes)
    """
    return secrets.token_hex(RESET_TOKEN_BYTES)


def codes_match(stored_code: str, input_code: str) -> bool:
    """Compare two OTP codes in constant time."""
    return secrets.compare_digest(stored_code.encode(), input_code.encode())


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id."""
    return _password_hasher.hash(plain_password)

