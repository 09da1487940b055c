"""FastAPI dependencies: caller identity.

Credential issuance happens upstream; the gateway in front of this service
forwards the authenticated member id in X-Member-Id. Operator endpoints are
guarded by a shared token.

Usage in any router:
    from src.bp_member.api.dependencies import get_current_member, require_operator

    @router.get("/mine")
    async def mine(member: MemberProfile = Depends(get_current_member)):
        ...
"""

import hmac

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bp_common.database import get_db_session
from src.bp_common.errors import MemberNotFoundError, OperatorRequiredError
from src.bp_member.domain.models import MemberProfile
from src.bp_member.domain.repository import MemberProfileSourceProtocol
from src.bp_member.infrastructure.persistence import MemberProfileSource

_profiles: MemberProfileSourceProtocol = MemberProfileSource()


async def get_current_member(
    x_member_id: str = Header(..., alias="X-Member-Id"),
    db: AsyncSession = Depends(get_db_session),
) -> MemberProfile:
    """Resolve the forwarded member id to a profile; 404 if unknown."""
    profile = await _profiles.get_profile(db, x_member_id)
    if profile is None:
        raise MemberNotFoundError(x_member_id)
    return profile


async def require_operator(
    x_operator_token: str | None = Header(None, alias="X-Operator-Token"),
) -> None:
    if x_operator_token is None or not hmac.compare_digest(
        x_operator_token, settings.OPERATOR_TOKEN
    ):
        raise OperatorRequiredError()
