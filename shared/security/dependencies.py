from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from .jwt_handler import verify_access_token

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_payload(token: str = Depends(oauth2_scheme)) -> dict:
    """Dependency to validate the bearer JWT and return its decoded claims."""
    if not token:
        raise _credentials_exception()

    payload = verify_access_token(token)
    if payload is None or payload.get("sub") is None:
        raise _credentials_exception()
    return payload
