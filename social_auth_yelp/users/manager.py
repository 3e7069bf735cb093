"""
User manager for social logins.

Turns an AuthenticatedIdentity into a logged-in local user: finds the
linked account, links to the current or email-matched account, or
registers a new one.
"""

import logging
import uuid

from fastapi import status
from fastapi.responses import RedirectResponse

from social_auth_yelp.oauth.config import PLUGIN_ID, OAuthConfig
from social_auth_yelp.oauth.exceptions import FailureReason
from social_auth_yelp.oauth.models import AuthenticatedIdentity
from social_auth_yelp.oauth.session import (
    LoginSession,
    current_user_id,
    flash,
    login_user,
)
from social_auth_yelp.users.models import SocialIdentity, User
from social_auth_yelp.users.repository import UserRepository


logger = logging.getLogger(__name__)


LOGIN_PATH = "/user/login"

EMPTY_EXTRAS = "[]"


class SocialAuthUserManager:
    """Logs in or registers users authenticated by a social network."""

    def __init__(
        self,
        repository: UserRepository,
        config: OAuthConfig,
        plugin_id: str = PLUGIN_ID,
    ):
        self._repository = repository
        self._config = config
        self._plugin_id = plugin_id

    async def user_exists(self, provider_user_id: str) -> bool:
        """Check whether the provider account is already linked to a local user."""
        identity = await self._repository.get_identity(
            self._plugin_id, provider_user_id
        )
        return identity is not None

    async def authenticate_user(
        self, session: LoginSession, identity: AuthenticatedIdentity
    ) -> RedirectResponse:
        """
        Log the user in, registering them if needed.

        Args:
            session: Session of the current request
            identity: Identity returned by the Yelp callback

        Returns:
            Redirect to the stored destination (or the post-login page) on
            success, to the login page with an error message otherwise
        """
        linked = await self._repository.get_identity(
            self._plugin_id, identity.provider_user_id
        )
        logged_in_uid = current_user_id(session.raw)

        user: User | None = None
        if linked is not None:
            if logged_in_uid and linked.uid != logged_in_uid:
                return self._deny(
                    session,
                    FailureReason.IDENTITY_CONFLICT,
                    "Your Yelp account is already connected to another user.",
                )
            user = await self._repository.get_by_uid(linked.uid)

        if user is None and logged_in_uid:
            user = await self._repository.get_by_uid(logged_in_uid)

        if user is None and identity.email:
            user = await self._repository.get_by_email(identity.email)

        if user is None:
            if not self._config.allow_registration:
                return self._deny(
                    session,
                    FailureReason.REGISTRATION_DISABLED,
                    "Registration for new users is disabled on this site.",
                )
            user = await self._repository.create(
                User(
                    uid=uuid.uuid4().hex,
                    name=self._user_name(identity),
                    email=identity.email,
                )
            )

        if not user.active:
            return self._deny(
                session,
                FailureReason.ACCOUNT_BLOCKED,
                "Your account is blocked. Contact site administrator.",
            )

        await self._save_identity(linked, user, identity)

        login_user(session.raw, user.uid)
        logger.info(
            f"User logged in via {self._plugin_id}",
            extra={"provider": self._plugin_id, "user_uid": user.uid},
        )

        destination = session.pop_destination() or self._config.post_login_path
        return RedirectResponse(url=destination, status_code=status.HTTP_302_FOUND)

    async def _save_identity(
        self,
        linked: SocialIdentity | None,
        user: User,
        identity: AuthenticatedIdentity,
    ) -> SocialIdentity:
        if linked is None:
            linked = SocialIdentity(
                plugin_id=self._plugin_id,
                provider_user_id=identity.provider_user_id,
                uid=user.uid,
            )
        linked.access_token = identity.access_token
        # Returning users come back without extras; keep what was collected
        if identity.extras_json != EMPTY_EXTRAS or linked.additional_data is None:
            linked.additional_data = identity.extras_json
        return await self._repository.save_identity(linked)

    @staticmethod
    def _user_name(identity: AuthenticatedIdentity) -> str:
        if identity.first_name:
            return identity.first_name
        if identity.email:
            return identity.email.split("@", 1)[0]
        return f"yelp_{identity.provider_user_id}"

    def _deny(
        self, session: LoginSession, reason: FailureReason, message: str
    ) -> RedirectResponse:
        session.nullify()
        flash(session.raw, message, "error")
        logger.warning(
            f"Yelp login refused: {reason.value}",
            extra={"provider": self._plugin_id, "reason": reason.value},
        )
        return RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_302_FOUND)
