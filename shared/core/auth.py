from fastapi import Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from shared.core.config import settings
from shared.core.exceptions import APIError
from shared.core.schemas import UserToken
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import UserRole

security = HTTPBearer()


def verify_token(token: str) -> UserToken:
    """Verify and decode a JWT issued by the identity provider."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        return UserToken(**payload)
    except JWTError:
        raise APIError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            app_status_code=AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED,
        )
    except PydanticValidationError:
        raise APIError(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token structure",
            app_status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
        )


def validate_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> UserToken:
    return verify_token(credentials.credentials)


def allow_full_access(current_user: UserToken = Depends(validate_current_token)):
    if current_user.role != UserRole.FULL_ACCESS.value:
        raise APIError(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access forbidden: full access role required",
            app_status_code=AppStatusCode.AUTHENTICATION_USER_FORBIDDEN,
        )
    return current_user
