from .jwt_handler import create_access_token, verify_access_token
from .dependencies import get_token_payload
from .rate_limiter import limiter, user_id_or_ip

__all__ = [
    "create_access_token",
    "verify_access_token",
    "get_token_payload",
    "limiter",
    "user_id_or_ip"
]
