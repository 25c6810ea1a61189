import jwt
import datetime
import logging
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer

from application.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Bearer tokens are issued by the platform's auth service, not by this API
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def _get_secret_key(settings: Settings) -> str:
    if not settings.jwt_secret_key:
        logger.error("JWT secret key is not configured; rejecting token")
        raise HTTPException(status_code=500, detail="Authentication is not configured")
    return settings.jwt_secret_key


def create_jwt_token(data: dict, expires_delta: int = 60) -> str:
    """
    Generate a JSON Web Token (JWT)

    :param data: Dictionary containing payload in JWT. Ex: {"user_id": 1, "role_names": ["Advisor"]}
    :type data: dict
    :param expires_delta: time span in minutes for token to expire. Defaults to 60 (1hr)
    :type expires_delta: int
    :return: encoded JWT token
    :rtype: str
    :raises HTTPException: 500 error if no secret key is configured
    """
    settings = get_settings()
    secret_key = _get_secret_key(settings)
    expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(minutes=expires_delta)
    data_to_encode = data.copy()
    data_to_encode.update({"exp": expire})

    return jwt.encode(data_to_encode, secret_key, algorithm=settings.jwt_algorithm)


def verify_jwt_token(token: str = Depends(oauth2_scheme)) -> dict:
    """
    Decodes and verifies JSON Web Token (JWT).

    :param token: encoded JWT
    :type token: str
    :returns: decoded JWT payload
    :rtype: dict
    :raises HTTPException: 401 error if token is expired or invalid, 500 if no secret key is configured
    """
    settings = get_settings()
    secret_key = _get_secret_key(settings)
    try:
        payload = jwt.decode(token, secret_key, algorithms=[settings.jwt_algorithm])
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")
