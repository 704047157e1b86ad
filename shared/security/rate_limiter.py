from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from shared.config.settings import get_settings
from .jwt_handler import verify_access_token

# Applied to the checkout endpoint; a double-submitting client hits this first.
CHECKOUT_RATE_LIMIT = get_settings().checkout_rate_limit


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Shoppers are keyed by the user id in their bearer token; anonymous
    callers (browsing, guest carts) fall back to the client IP.
    """
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")

    if scheme.lower() == "bearer" and token:
        payload = verify_access_token(token)
        if payload and "sub" in payload:
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=user_id_or_ip)
