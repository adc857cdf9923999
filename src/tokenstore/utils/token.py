import secrets


def generate_token(nbytes: int = 32) -> str:
    """Return a URL-safe random token suitable for a one-time login link."""
    return secrets.token_urlsafe(nbytes)
