"""JWT access token verification.

Tokens are issued by the auth service; this module only verifies them.
HS256 (symmetric HMAC) with the shared JWT_SECRET.
"""

from jose import JWTError, jwt

from config.settings import settings
from src.shop_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def decode_token(token: str, expected_type: str = "access") -> dict[str, str]:
    """Decode and validate a JWT token.

    Args:
        token: Raw JWT string.
        expected_type: Value the "type" claim must carry. Strictly enforced
                       so refresh tokens cannot be replayed as access tokens.

    Returns:
        Decoded payload dict with at minimum {"sub": ..., "type": ...}.

    Raises:
        InvalidCredentialsError: Token invalid, expired, or of the wrong type.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != expected_type:
        raise InvalidCredentialsError()

    return payload
