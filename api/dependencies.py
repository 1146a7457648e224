"""Request dependencies: resolve the calling profile from the request headers."""
import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.errors import Forbidden, Unauthenticated
from database.connection import get_db
from database.models import Profile, ProfileType
from database.repositories import ProfileRepository

logger = structlog.get_logger(__name__)


async def get_current_profile(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """
    Look up the profile named by the ``profile_id`` header.

    Raises:
        Unauthenticated: If the header is missing, not an integer, or
            names no profile
    """
    header = get_settings().profile_header
    raw_id = request.headers.get(header)
    if not raw_id:
        raise Unauthenticated(f"Missing {header} header", reason="missing_profile_id")

    try:
        profile_id = int(raw_id)
    except ValueError:
        raise Unauthenticated(f"Invalid {header} header", reason="invalid_profile_id")

    profile = await ProfileRepository(db).get(profile_id)
    if profile is None:
        logger.info("unknown_profile", profile_id=profile_id)
        raise Unauthenticated("Unknown profile", reason="unknown_profile")

    structlog.contextvars.bind_contextvars(profile_id=profile.id)
    return profile


async def require_admin(profile: Profile = Depends(get_current_profile)) -> Profile:
    """Only admin profiles may pass."""
    if profile.type != ProfileType.ADMIN.value:
        raise Forbidden("Admin access required", reason="not_an_admin")
    return profile
