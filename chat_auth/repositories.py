"""Repository contracts and in-memory implementations."""

from typing import ClassVar, Protocol

import structlog

from .models import Account, Token

logger = structlog.get_logger()


class TokenRepository(Protocol):
    """Session tokens keyed by server URL."""

    def save(self, server_url: str, token: Token) -> None: ...

    def get(self, server_url: str) -> Token | None: ...


class LocalRepository(Protocol):
    """Small key-value store for client state."""

    CURRENT_USERNAME_KEY: ClassVar[str]
    KEY_PUSH_TOKEN: ClassVar[str]

    def save(self, key: str, value: str | None) -> None: ...

    def get(self, key: str) -> str | None: ...


class AccountRepository(Protocol):
    """Accounts the user has logged into, one per server."""

    async def save(self, account: Account) -> None: ...

    async def get_all(self) -> list[Account]: ...


class InMemoryTokenRepository:
    def __init__(self) -> None:
        self._tokens: dict[str, Token] = {}

    def save(self, server_url: str, token: Token) -> None:
        self._tokens[server_url] = token
        logger.debug("Token saved", server=server_url, user_id=token.user_id)

    def get(self, server_url: str) -> Token | None:
        return self._tokens.get(server_url)


class InMemoryLocalRepository:
    CURRENT_USERNAME_KEY: ClassVar[str] = "current_username"
    KEY_PUSH_TOKEN: ClassVar[str] = "push_token"

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def save(self, key: str, value: str | None) -> None:
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value

    def get(self, key: str) -> str | None:
        return self._values.get(key)


class InMemoryAccountRepository:
    """Keeps accounts in insertion order; saving replaces the server's entry."""

    def __init__(self) -> None:
        self._accounts: list[Account] = []

    async def save(self, account: Account) -> None:
        self._accounts = [
            a for a in self._accounts if a.server_url != account.server_url
        ]
        self._accounts.append(account)
        logger.debug(
            "Account saved", server=account.server_url, username=account.username
        )

    async def get_all(self) -> list[Account]:
        return list(self._accounts)
