"""Frontend bootstrap configuration endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from core.config import settings

router = APIRouter(tags=["config"])


class AuthConfig(BaseModel):
    """Which login providers the frontend should offer."""

    google_enabled: bool
    github_enabled: bool


class ConfigResponse(BaseModel):
    """Public, non-secret configuration for the frontend."""

    backend_url: str
    frontend_url: str
    auth: AuthConfig
    endpoints: dict[str, str]


@router.get("/config", response_model=ConfigResponse, summary="Frontend configuration")
async def get_config() -> ConfigResponse:
    """Expose public URLs, enabled providers and endpoint hints."""
    return ConfigResponse(
        backend_url=settings.public_base_url,
        frontend_url=settings.frontend_url,
        auth=AuthConfig(
            google_enabled=settings.google_enabled,
            github_enabled=settings.github_enabled,
        ),
        endpoints={
            "google": "/auth/google",
            "github": "/auth/github",
            "me": "/auth/me",
            "verify_token": "/auth/verify-token",
            "profile": "/api/v1/profile",
            "avatar": "/api/v1/profile/avatar",
            "user_profiles": "/api/v1/user-profiles",
            "user_profile": "/api/v1/user-profiles/{user_id}",
            "freelancers": "/api/v1/freelancers",
            "clients": "/api/v1/clients",
        },
    )
