from fastapi import Depends, HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from starlette.status import HTTP_401_UNAUTHORIZED

from postmill.settings import Settings, settings

ADMIN_KEY_NAME = "X-Admin-Key"
admin_key_header = APIKeyHeader(name=ADMIN_KEY_NAME, auto_error=False)


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def get_admin_key(
    admin_key_header: str = Security(admin_key_header),
    current_settings: Settings = Depends(get_settings),
):
    # An unset ADMIN_KEY locks the admin endpoints instead of opening them
    if current_settings.ADMIN_KEY and admin_key_header == current_settings.ADMIN_KEY:
        return admin_key_header
    raise HTTPException(
        status_code=HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )
