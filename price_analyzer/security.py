import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import APIKeyHeader

from price_analyzer.config import settings

logger = logging.getLogger(__name__)


API_KEY_NAME = "X-Key"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


async def verify_api_key(api_key: Optional[str] = Depends(api_key_header)):
    """Checks the X-Key header when an API key is configured."""
    expected = settings.api.api_key.get_secret_value()
    if not expected:
        return
    if api_key is None:
        raise HTTPException(status_code=403, detail="No API key supplied")
    if api_key != expected:
        raise HTTPException(status_code=403, detail="Invalid API key")
