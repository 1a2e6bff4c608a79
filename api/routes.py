"""
User routes for the authenticated caller.

Route prefix: {base_path}/users
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from auth.dependencies import get_account_service, get_current_user_id
from auth.service import AccountService
from utils.schemas import Problem, UpdateUserRequest, UserOut, profile_payload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.get(
    "/me",
    response_model=UserOut,
    response_model_exclude_none=True,
    responses={401: {"model": Problem}, 404: {"model": Problem}},
)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    """Return the caller's public profile."""
    return await accounts.get_profile(user_id)


@router.put(
    "/me",
    response_model=UserOut,
    response_model_exclude_none=True,
    responses={code: {"model": Problem} for code in (400, 401, 404, 409, 500)},
)
async def update_me(
    req: Optional[UpdateUserRequest] = Body(None),
    user_id: str = Depends(get_current_user_id),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, Any]:
    """Partially update the caller's username, email or profile.  No body means no changes."""
    req = req or UpdateUserRequest()
    logger.debug("Profile update for %s: %s", user_id, sorted(req.model_dump(exclude_unset=True)))
    return await accounts.update_profile(
        user_id,
        username=req.username,
        email=req.email,
        profile=profile_payload(req.profile),
    )
