"""License verification against the BugBlaze license backend."""

from __future__ import annotations

import httpx
from pydantic import BaseModel, Field

from bugblaze.config import AppConfig

# Commands that need a verified license.
PREMIUM_COMMANDS = frozenset({"generate", "health-scan", "mentor", "chat"})


class LicenseStatus(BaseModel):
    """Result of a license check."""

    is_premium: bool = Field(default=False)
    email: str = Field(default="")


async def check_license(license_key: str, backend_url: str, timeout: int = 30) -> LicenseStatus:
    """Ask the license backend whether *license_key* is valid.

    The backend answers ``{"success": bool, "email": str}``. Any transport
    or decoding failure counts as "not premium".
    """
    if not license_key or not backend_url:
        return LicenseStatus()
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=10.0)) as client:
            response = await client.post(backend_url, json={"license_key": license_key})
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError):
        return LicenseStatus()
    if not isinstance(data, dict):
        return LicenseStatus()
    return LicenseStatus(
        is_premium=bool(data.get("success", False)),
        email=str(data.get("email") or ""),
    )


def is_allowed(command: str, config: AppConfig) -> bool:
    """Return ``True`` if *command* may run under *config*'s license state."""
    if command not in PREMIUM_COMMANDS:
        return True
    return config.is_premium
