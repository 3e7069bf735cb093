"""
User pages: generic login page, current user, logout.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from social_auth_yelp.oauth.dependencies import Registry
from social_auth_yelp.oauth.session import current_user_id, logout_user, pop_messages
from social_auth_yelp.users.dependencies import Repository
from social_auth_yelp.users.manager import LOGIN_PATH


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/login")
async def login_page(request: Request, registry: Registry):
    """
    Generic login page.

    Shows pending status/error messages and the available social logins.
    """
    providers = [
        {
            "id": definition.id,
            "social_network": definition.social_network,
            "login_url": f"{LOGIN_PATH}/{definition.social_network.lower()}",
        }
        for definition in registry.list_definitions(type="social_auth")
    ]

    return {
        "status": "success",
        "messages": pop_messages(request.session),
        "providers": providers,
    }


@router.get("")
async def current_user(request: Request, repository: Repository):
    """
    Current user page.

    Raises:
        HTTPException: 401 if nobody is logged in
    """
    uid = current_user_id(request.session)
    user = await repository.get_by_uid(uid) if uid else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return {
        "status": "success",
        "user": {
            "uid": user.uid,
            "name": user.name,
            "email": user.email,
        },
    }


@router.get("/logout")
async def logout(request: Request) -> RedirectResponse:
    """End the session and go back to the login page."""
    uid = current_user_id(request.session)
    logout_user(request.session)
    if uid:
        logger.info("User logged out", extra={"user_uid": uid})
    return RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_302_FOUND)
