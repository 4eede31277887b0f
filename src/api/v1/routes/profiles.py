"""Profile API routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Header, Query, Request, UploadFile

from api.dependencies.auth import CurrentIdentity
from api.v1.dependencies import (
    get_avatar_service,
    get_profile_service,
    get_reconciliation_service,
)
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.profile import (
    AvatarResponse,
    FreelancerListResponse,
    FreelancerResponse,
    ReconciliationResponse,
    UserProfileDetailResponse,
    UserProfileListResponse,
    UserProfileResponse,
)
from core.exceptions import AppException, AuthorizationError, ErrorCode
from core.rate_limit import limiter
from domain.entities.profile import UserType
from domain.services.avatar_service import AvatarService
from domain.services.profile_service import ProfileService
from domain.services.reconciliation_service import ReconciliationService

router = APIRouter(
    tags=["profiles"],
    responses={401: {"model": ErrorResponse, "description": "Missing or invalid credential"}},
)


def parse_if_match(value: str | None) -> int | None:
    """Read a profile version from an If-Match header.

    Accepts a bare version (``3``) or an entity tag (``"3"``, ``W/"3"``).
    """
    if value is None:
        return None
    tag = value.strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    tag = tag.strip('"')
    try:
        return int(tag)
    except ValueError:
        raise AppException(
            error_code=ErrorCode.VALIDATION_ERROR,
            message="If-Match must carry a profile version",
            status_code=422,
            details={"if_match": value},
        ) from None


@router.get(
    "/profile",
    response_model=UserProfileDetailResponse,
    summary="Get my profile",
    responses={
        404: {"description": "No profile exists for the caller"},
        409: {"description": "Profile records disagree"},
        422: {"description": "Profile cannot be reconciled"},
    },
)
async def get_my_profile(
    identity: CurrentIdentity,
    service: ProfileService = Depends(get_profile_service),
) -> UserProfileDetailResponse:
    """Return the caller's unified profile, reconciling it first if needed."""
    profile = await service.get_unified_profile(identity.subject_id)
    return UserProfileDetailResponse(data=UserProfileResponse.model_validate(profile))


@router.get(
    "/user-profiles",
    response_model=UserProfileListResponse,
    summary="List unified profiles",
)
async def list_user_profiles(
    identity: CurrentIdentity,
    user_type: UserType | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    service: ProfileService = Depends(get_profile_service),
) -> UserProfileListResponse:
    """List stored unified profiles, newest first.

    Records are returned as stored. Compare with ``/freelancers`` to spot
    freelancers that still lack a unified profile.
    """
    profiles = await service.list_unified_profiles(limit=limit, offset=offset, user_type=user_type)
    return UserProfileListResponse(data=[UserProfileResponse.model_validate(p) for p in profiles])


@router.get(
    "/user-profiles/{user_id}",
    response_model=UserProfileDetailResponse,
    summary="Get a user's unified profile",
    responses={
        404: {"description": "Neither record exists"},
        409: {"description": "Profile records disagree"},
        422: {"description": "Profile cannot be reconciled"},
    },
)
async def get_user_profile(
    user_id: UUID,
    identity: CurrentIdentity,
    service: ProfileService = Depends(get_profile_service),
) -> UserProfileDetailResponse:
    """Unified view used by messaging; freelancers missing one get it synthesized."""
    profile = await service.get_unified_profile(user_id)
    return UserProfileDetailResponse(data=UserProfileResponse.model_validate(profile))


@router.post(
    "/user-profiles/{user_id}/reconcile",
    response_model=ReconciliationResponse,
    summary="Reconcile my profile records",
    responses={403: {"model": ErrorResponse, "description": "Not the caller's own profile"}},
)
async def reconcile_user_profile(
    user_id: UUID,
    identity: CurrentIdentity,
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> ReconciliationResponse:
    """Run reconciliation explicitly and report the outcome.

    Callers may only reconcile their own profile.
    """
    if user_id != identity.subject_id:
        raise AuthorizationError("Only your own profile can be reconciled")
    result = await service.reconcile(user_id)
    return ReconciliationResponse(
        outcome=result.outcome,
        profile=UserProfileResponse.model_validate(result.profile) if result.profile else None,
    )


@router.get(
    "/freelancers",
    response_model=FreelancerListResponse,
    summary="List freelancers",
)
async def list_freelancers(
    identity: CurrentIdentity,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    service: ProfileService = Depends(get_profile_service),
) -> FreelancerListResponse:
    """List freelancer role records, newest first."""
    roles = await service.list_freelancers(limit=limit, offset=offset)
    return FreelancerListResponse(data=[FreelancerResponse.model_validate(r) for r in roles])


@router.get(
    "/clients",
    response_model=UserProfileListResponse,
    summary="List clients",
)
async def list_clients(
    identity: CurrentIdentity,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    service: ProfileService = Depends(get_profile_service),
) -> UserProfileListResponse:
    """List unified profiles of client users, newest first."""
    clients = await service.list_clients(limit=limit, offset=offset)
    return UserProfileListResponse(data=[UserProfileResponse.model_validate(c) for c in clients])


@router.post(
    "/profile/avatar",
    response_model=AvatarResponse,
    summary="Upload a new avatar",
    responses={
        409: {"description": "Profile changed concurrently, retry"},
        413: {"description": "File too large"},
        415: {"description": "Not an image"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def upload_avatar(
    request: Request,
    identity: CurrentIdentity,
    avatar: Annotated[UploadFile, File()],
    if_match: Annotated[str | None, Header()] = None,
    service: AvatarService = Depends(get_avatar_service),
) -> AvatarResponse:
    """Store the image and point the caller's unified profile at it.

    Send ``If-Match`` with the profile version, bare (``3``) or quoted
    (``"3"``), to fail with a conflict if the profile changed since it
    was last read.
    """
    expected_version = parse_if_match(if_match)
    # One byte past the ceiling is enough to detect an oversized upload
    content = await avatar.read(service.max_bytes + 1)
    profile = await service.update_avatar(
        identity.subject_id,
        content,
        avatar.content_type,
        expected_version=expected_version,
    )
    return AvatarResponse(avatar_url=profile.avatar_url or "", version=profile.version)
