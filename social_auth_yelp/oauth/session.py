"""
Per-request session state for the Yelp login flow.

Wraps the Starlette session (SessionMiddleware) so the flow never touches
request.session directly. One LoginSession is created per request and
passed explicitly to the services that need it.
"""

import hmac
import logging
from collections.abc import MutableMapping
from typing import Any

from social_auth_yelp.oauth.config import PLUGIN_ID


logger = logging.getLogger(__name__)


MESSAGES_KEY = "messages"
USER_KEY = "uid"


class LoginSession:
    """
    Login-attempt state stored in the user's session.

    Keys are prefixed with the plugin id so several social networks can
    share one session without clobbering each other.
    """

    STATE = "oauth2state"
    ACCESS_TOKEN = "access_token"
    DESTINATION = "destination"

    # Cleared whenever a login attempt fails
    KEYS_TO_NULLIFY = (STATE, ACCESS_TOKEN)

    def __init__(self, session: MutableMapping[str, Any], prefix: str = PLUGIN_ID):
        self._session = session
        self._prefix = prefix

    @property
    def raw(self) -> MutableMapping[str, Any]:
        """The underlying session mapping."""
        return self._session

    def _key(self, name: str) -> str:
        return f"{self._prefix}_{name}"

    def get(self, name: str) -> Any:
        return self._session.get(self._key(name))

    def set(self, name: str, value: Any) -> None:
        self._session[self._key(name)] = value

    def clear(self, name: str) -> None:
        self._session.pop(self._key(name), None)

    @property
    def state(self) -> str | None:
        return self.get(self.STATE)

    def set_state(self, state: str) -> None:
        self.set(self.STATE, state)

    @property
    def access_token(self) -> str | None:
        return self.get(self.ACCESS_TOKEN)

    def set_access_token(self, token: str) -> None:
        self.set(self.ACCESS_TOKEN, token)

    @property
    def destination(self) -> str | None:
        return self.get(self.DESTINATION)

    def set_destination(self, destination: str) -> bool:
        """
        Remember where to send the user after login.

        Only site-relative paths are accepted. Returns False when the
        destination was rejected.
        """
        if not is_relative_path(destination):
            logger.warning(
                "Ignoring non-relative login destination",
                extra={"provider": self._prefix},
            )
            return False
        self.set(self.DESTINATION, destination)
        return True

    def pop_destination(self) -> str | None:
        destination = self.destination
        self.clear(self.DESTINATION)
        return destination

    def state_matches(self, returned_state: str | None) -> bool:
        """
        Compare the state returned by Yelp against the stored one.

        Exact, non-empty match only.
        """
        stored = self.state
        if not returned_state or not stored:
            return False
        return hmac.compare_digest(str(returned_state), str(stored))

    def nullify(self) -> None:
        """Clear state and token so a failed attempt cannot be reused."""
        for name in self.KEYS_TO_NULLIFY:
            self.clear(name)


def is_relative_path(path: str | None) -> bool:
    """True for paths like /node/1, False for absolute or scheme-relative URLs."""
    if not path or not path.startswith("/"):
        return False
    return not path.startswith("//") and "\\" not in path


# =============================================================================
# Flash messages and logged-in user
# =============================================================================


def flash(session: MutableMapping[str, Any], message: str, level: str = "status") -> None:
    """Queue a message for the next page the user sees."""
    messages = list(session.get(MESSAGES_KEY, []))
    messages.append({"level": level, "message": message})
    session[MESSAGES_KEY] = messages


def pop_messages(session: MutableMapping[str, Any]) -> list[dict[str, str]]:
    """Return and clear queued messages."""
    return list(session.pop(MESSAGES_KEY, []))


def login_user(session: MutableMapping[str, Any], uid: str) -> None:
    session[USER_KEY] = uid


def logout_user(session: MutableMapping[str, Any]) -> None:
    session.clear()


def current_user_id(session: MutableMapping[str, Any]) -> str | None:
    return session.get(USER_KEY)
