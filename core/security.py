"""
Password hashing and management passwords
"""
import secrets
import string

from passlib.context import CryptContext

# pbkdf2 rather than bcrypt: passwords may be up to 128 chars, past bcrypt's 72-byte limit
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Verified against when a login email is unknown, so both failure paths cost one hash
DUMMY_PASSWORD_HASH = pwd_context.hash("petspot-dummy-password")

MANAGEMENT_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    """Hash a plain password"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def generate_management_password(length: int = 12) -> str:
    return "".join(secrets.choice(MANAGEMENT_PASSWORD_ALPHABET) for _ in range(length))
