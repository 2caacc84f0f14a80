"""
PKCE (RFC 7636) helpers: code_verifier from the unreserved character set, S256 code_challenge.
"""
import hashlib
import secrets
import string
from base64 import urlsafe_b64encode

from spotify_login.config import CODE_VERIFIER_LENGTH

# RFC 7636 §4.1 unreserved characters
UNRESERVED = string.ascii_letters + string.digits + "-._~"


def generate_verifier(length: int = CODE_VERIFIER_LENGTH) -> str:
    """
    Random code_verifier of `length` characters drawn from [A-Za-z0-9-._~] using the OS CSPRNG.
    RFC 7636 asks for 43-128; the policy default is 100.
    """
    if length < 1:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(UNRESERVED) for _ in range(length))


def derive_challenge(verifier: str) -> str:
    """S256: base64url(SHA256(ASCII(verifier))) without padding."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce(length: int = CODE_VERIFIER_LENGTH) -> tuple[str, str]:
    """Returns (code_verifier, code_challenge)."""
    verifier = generate_verifier(length)
    return verifier, derive_challenge(verifier)
