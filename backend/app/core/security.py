from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.core.config import settings
from app.core.database import MAX_ROW_ID

# pbkdf2_sha256 generates a random salt per hash and stores it in the hash string
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class InvalidToken(Exception):
    """Raised when a token cannot be verified or carries a malformed payload."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a hash passlib recognises
        return False


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh salt"""
    return pwd_context.hash(password)


def create_access_token(user_id: int, username: str) -> str:
    """
    Create a signed token carrying {userId, username}.

    Tokens are time-unbounded unless ACCESS_TOKEN_EXPIRE_MINUTES is configured,
    in which case the standard 'exp' claim is added.
    """
    to_encode: Dict[str, Any] = {"userId": user_id, "username": username}

    if settings.ACCESS_TOKEN_EXPIRE_MINUTES:
        expire = datetime.now(timezone.utc) + \
            timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode["exp"] = expire

    # Algorithm must match in decode - changing this breaks all existing tokens
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a token, returning {userId, username}.

    Raises InvalidToken if the signature does not match, the token has expired,
    or the payload does not hold a positive integer userId and a username.
    """
    if not token:
        raise InvalidToken("token is empty")

    try:
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise InvalidToken(str(e)) from e

    user_id = payload.get("userId")
    username = payload.get("username")
    # bool is a subclass of int and must not pass as an id
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0 or user_id > MAX_ROW_ID:
        raise InvalidToken("token payload has no valid userId")
    if not isinstance(username, str) or not username:
        raise InvalidToken("token payload has no username")

    return {"userId": user_id, "username": username}
