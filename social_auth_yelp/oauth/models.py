"""
Results of the Yelp callback.
"""

from dataclasses import dataclass

from social_auth_yelp.oauth.exceptions import FailureReason


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Normalized Yelp identity handed to the user manager."""

    provider_user_id: str
    first_name: str | None
    email: str | None
    access_token: str
    extras_json: str = "[]"


@dataclass(frozen=True)
class LoginFailure:
    """A terminated login attempt: classification for logs, message for the user."""

    reason: FailureReason
    message: str
