"""
Login flow exceptions.

ConfigurationError is handled centrally in main.py. The others are raised
inside the callback handler and turned into a LoginFailure before it
returns, so they never reach the router.
"""

from enum import Enum


class FailureReason(str, Enum):
    """Classification of a failed login attempt."""

    CONFIGURATION_ERROR = "configuration_error"
    USER_CANCELLED = "user_cancelled"
    INVALID_STATE = "invalid_state"
    EXCHANGE_ERROR = "exchange_error"
    PROFILE_UNAVAILABLE = "profile_unavailable"
    REGISTRATION_DISABLED = "registration_disabled"
    ACCOUNT_BLOCKED = "account_blocked"
    IDENTITY_CONFLICT = "identity_conflict"
    UNEXPECTED_ERROR = "unexpected_error"


class SocialAuthError(Exception):
    """Base exception for the Yelp login flow."""

    reason: FailureReason = FailureReason.CONFIGURATION_ERROR


class ConfigurationError(SocialAuthError):
    """
    Raised when client id or client secret are missing.

    Fatal to the flow. The user is sent back to the login page and the
    site administrator has to fix the settings.
    """

    reason = FailureReason.CONFIGURATION_ERROR


class UserCancelled(SocialAuthError):
    """The user denied access on the Yelp authorization page."""

    reason = FailureReason.USER_CANCELLED


class InvalidState(SocialAuthError):
    """Returned anti-forgery state is empty or does not match the session."""

    reason = FailureReason.INVALID_STATE


class TokenExchangeFailure(SocialAuthError):
    """Authorization code could not be exchanged for an access token."""

    reason = FailureReason.EXCHANGE_ERROR


class ProfileFetchFailure(SocialAuthError):
    """The resource owner profile could not be loaded."""

    reason = FailureReason.PROFILE_UNAVAILABLE


class ExtraDetailsError(Exception):
    """
    Raised when one extra API call fails.

    Never fatal: the callback handler logs it and skips the endpoint.
    """

    def __init__(self, url: str, kind: str, detail: str = ""):
        self.url = url
        self.kind = kind
        super().__init__(f"{kind}: {url} {detail}".strip())
