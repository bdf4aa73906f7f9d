"""Per-server cache of public authentication settings."""

import os
from typing import Any, Protocol

import structlog
from cachetools import TTLCache

from .models import (
    CAS_ENABLED,
    CAS_LOGIN_URL,
    FAVICON_512,
    LDAP_ENABLED,
    LOGIN_FORM,
    REGISTRATION_FORM,
    WIDE_TILE_310,
    AuthSettings,
    OauthProvider,
)

logger = structlog.get_logger()

AUTH_SETTING_IDS = [
    LOGIN_FORM,
    REGISTRATION_FORM,
    CAS_ENABLED,
    CAS_LOGIN_URL,
    LDAP_ENABLED,
    FAVICON_512,
    WIDE_TILE_310,
] + [provider.setting_id for provider in OauthProvider]


class PublicSettingsSource(Protocol):
    async def settings_public(self, setting_ids: list[str]) -> dict[str, Any]: ...


class SettingsRepository:
    """Fetches each server's settings once and serves the cached snapshot."""

    def __init__(self, ttl_seconds: int | None = None, maxsize: int = 32):
        if ttl_seconds is None:
            ttl_seconds = int(os.getenv("SETTINGS_CACHE_TTL_SECONDS", "3600"))
        self.ttl_seconds = ttl_seconds
        self._cache: TTLCache[str, AuthSettings] = TTLCache(
            maxsize=maxsize, ttl=ttl_seconds
        )

    def save(self, server_url: str, settings: AuthSettings) -> None:
        self._cache[server_url] = settings

    def cached(self, server_url: str) -> AuthSettings | None:
        return self._cache.get(server_url)

    async def get(self, server_url: str, source: PublicSettingsSource) -> AuthSettings:
        """Return the snapshot for ``server_url``, fetching it on a cache miss.

        Raises:
            ChatClientError: If the settings cannot be fetched
        """
        settings = self._cache.get(server_url)
        if settings is not None:
            logger.debug("Settings cache hit", server=server_url)
            return settings

        raw = await source.settings_public(AUTH_SETTING_IDS)
        settings = AuthSettings.from_public_settings(raw)
        self._cache[server_url] = settings
        logger.info(
            "Server settings loaded",
            server=server_url,
            login_form=settings.login_form_enabled,
            cas=settings.cas_enabled,
            ldap=settings.ldap_enabled,
            oauth_providers=sorted(p.value for p in settings.oauth_enabled),
        )
        return settings

    def clear(self) -> None:
        self._cache.clear()
