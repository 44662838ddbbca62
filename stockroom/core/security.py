from datetime import datetime, timedelta, timezone
from uuid import uuid4

from jose import JWTError, jwt

from stockroom.core.config import settings

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"


class TokenValidationError(ValueError):
    pass


# Access tokens come from the identity provider that shares SECRET_KEY.
# Minting lives here so that contract is written down once, and for tests.
def create_access_token(user_id: int | str, *, expires_delta: timedelta | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "sub": str(user_id),
        "type": ACCESS_TOKEN_TYPE,
        "jti": str(uuid4()),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + lifetime).timestamp()),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature, expiry and claim shape; return the claims."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise TokenValidationError("Invalid token") from exc

    if not claims.get("sub"):
        raise TokenValidationError("Invalid token subject")
    if claims.get("type") != ACCESS_TOKEN_TYPE:
        raise TokenValidationError("Invalid token type")
    if not claims.get("jti"):
        raise TokenValidationError("Invalid token id")
    return claims
