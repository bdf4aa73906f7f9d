"""Authentication models and types."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

# Public setting identifiers as published by the chat server
LOGIN_FORM = "Accounts_ShowFormLogin"
REGISTRATION_FORM = "Accounts_RegistrationForm"
CAS_ENABLED = "CAS_enabled"
CAS_LOGIN_URL = "CAS_login_url"
LDAP_ENABLED = "LDAP_Enable"
FAVICON_512 = "Assets_favicon_512"
WIDE_TILE_310 = "Assets_tile_310_wide"
OAUTH_SETTING_PREFIX = "Accounts_OAuth_"


class OauthProvider(Enum):
    """OAuth providers a server may enable."""

    FACEBOOK = "facebook"
    GITHUB = "github"
    GOOGLE = "google"
    LINKEDIN = "linkedin"
    METEOR = "meteor"
    TWITTER = "twitter"
    GITLAB = "gitlab"

    @property
    def setting_id(self) -> str:
        return OAUTH_SETTING_PREFIX + self.value.capitalize()


class LoginState(Enum):
    """States of a single login attempt."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class PasswordCredential:
    """Username or email plus password."""

    username_or_email: str
    password: str

    def __repr__(self) -> str:
        return f"PasswordCredential(username_or_email={self.username_or_email!r})"


@dataclass(frozen=True)
class CasCredential:
    """Correlation token of a completed CAS redirect."""

    token: str


@dataclass(frozen=True)
class OauthCredential:
    """Credential token and secret returned by an OAuth callback."""

    token: str
    secret: str

    def __repr__(self) -> str:
        return f"OauthCredential(token={self.token!r})"


LoginCredential = Union[PasswordCredential, CasCredential, OauthCredential]


@dataclass(frozen=True)
class Token:
    """Session token issued by the server after login."""

    user_id: str
    auth_token: str


@dataclass
class User:
    """Profile of the authenticated user."""

    id: str
    username: str | None
    name: str | None = None


@dataclass
class Account:
    """Locally stored account for one server."""

    server_url: str
    icon_url: str | None
    logo_url: str | None
    username: str
    avatar_url: str


@dataclass
class Session:
    """Durable result of a successful login."""

    server_url: str
    token: Token
    username: str
    avatar_url: str
    icon_url: str | None = None
    logo_url: str | None = None


def _asset_url(value: Any) -> str | None:
    """Extract an asset path from a setting value (plain string or url map)."""
    if isinstance(value, Mapping):
        return value.get("url") or value.get("defaultUrl")
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class AuthSettings:
    """Read-only snapshot of the server's authentication settings."""

    login_form_enabled: bool = False
    registration_enabled: bool = False
    cas_enabled: bool = False
    cas_login_url: str | None = None
    ldap_enabled: bool = False
    oauth_enabled: frozenset[OauthProvider] = field(default_factory=frozenset)
    favicon: str | None = None
    wide_tile: str | None = None

    def is_oauth_enabled(self, provider: OauthProvider) -> bool:
        return provider in self.oauth_enabled

    @classmethod
    def from_public_settings(cls, settings: Mapping[str, Any]) -> "AuthSettings":
        """Build a snapshot from a ``setting id -> value`` mapping."""
        return cls(
            login_form_enabled=settings.get(LOGIN_FORM) is True,
            registration_enabled=settings.get(REGISTRATION_FORM) == "Public",
            cas_enabled=settings.get(CAS_ENABLED) is True,
            cas_login_url=settings.get(CAS_LOGIN_URL) or None,
            ldap_enabled=settings.get(LDAP_ENABLED) is True,
            oauth_enabled=frozenset(
                provider
                for provider in OauthProvider
                if settings.get(provider.setting_id) is True
            ),
            favicon=_asset_url(settings.get(FAVICON_512)),
            wide_tile=_asset_url(settings.get(WIDE_TILE_310)),
        )


class OauthServices(dict[str, str]):
    """Server-advertised OAuth services as ``provider name -> client id``."""

    @classmethod
    def from_service_list(cls, services: list[Mapping[str, Any]]) -> "OauthServices":
        """Build the mapping from the ``settings.oauth`` service list.

        An entry belongs to a provider when any of its values equals the
        provider name; entries without a client id are skipped.
        """
        result = cls()
        for provider in OauthProvider:
            entry = next(
                (s for s in services if provider.value in s.values()), None
            )
            if entry is None:
                continue
            client_id = entry.get("appId") or entry.get("clientId")
            if client_id:
                result[provider.value] = client_id
        return result

    def client_id(self, provider: OauthProvider) -> str | None:
        return self.get(provider.value)


@dataclass(frozen=True)
class ServerInfo:
    """Subset of the server's ``/api/info`` payload."""

    version: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ServerInfo":
        version = payload.get("version")
        if not version and isinstance(payload.get("info"), Mapping):
            version = payload["info"].get("version")
        return cls(version=str(version or "0.0.0"))
