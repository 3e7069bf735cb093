"""
Yelp login endpoints.

- GET /user/login/yelp - Start the login, redirect to Yelp
- GET /user/login/yelp/callback - Handle Yelp's redirect back
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import RedirectResponse, Response

from social_auth_yelp.oauth.dependencies import BaseUrl, LoginService, Session
from social_auth_yelp.oauth.models import LoginFailure
from social_auth_yelp.oauth.session import flash
from social_auth_yelp.users.dependencies import UserManager
from social_auth_yelp.users.manager import LOGIN_PATH


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user/login", tags=["yelp-login"])


@router.get("/yelp")
async def redirect_to_yelp(
    service: LoginService,
    session: Session,
    base_url: BaseUrl,
    destination: Annotated[
        str | None, Query(description="Site path to return to after login")
    ] = None,
) -> RedirectResponse:
    """
    Start Yelp login.

    Stores the anti-forgery state (and destination, if given) in the session
    and redirects to Yelp's authorization page. A missing client id or
    secret raises ConfigurationError, handled in main.py.
    """
    login_url = await service.begin_login(session, base_url, destination)
    return RedirectResponse(url=login_url, status_code=status.HTTP_302_FOUND)


@router.get("/yelp/callback")
async def callback(
    request: Request,
    service: LoginService,
    user_manager: UserManager,
    session: Session,
    base_url: BaseUrl,
) -> Response:
    """
    Handle the redirect back from Yelp.

    On success the user manager logs the user in (or registers them) and
    decides where to go next. Any failure lands on the login page with an
    error message.
    """
    result = await service.handle_callback(session, base_url, request.query_params)

    if isinstance(result, LoginFailure):
        flash(session.raw, result.message, "error")
        return RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_302_FOUND)

    return await user_manager.authenticate_user(session, result)
