from fastapi import Header, HTTPException
from pydantic import ValidationError

from settings import get_settings


def verify_api_key(x_api_key: str = Header(...)) -> str:
    """Validates API key from X-API-Key header against ``API_KEY``."""
    try:
        api_key = get_settings().api.key
    except ValidationError:
        raise HTTPException(status_code=500, detail="API_KEY not configured") from None

    if x_api_key != api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    return x_api_key
