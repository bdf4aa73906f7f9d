"""Post-login side effects: username, account, token and push token."""

import structlog

from .client import ChatClient
from .models import Account, AuthSettings, Session, Token, User
from .repositories import AccountRepository, LocalRepository, TokenRepository
from .result import Failure, Result, Success, run_steps
from .urls import avatar_url, server_asset_url

logger = structlog.get_logger()


def build_account(server_url: str, settings: AuthSettings, username: str) -> Account:
    """Account record for ``username`` with icon, logo and avatar URLs."""
    return Account(
        server_url=server_url,
        icon_url=server_asset_url(server_url, settings.favicon) if settings.favicon else None,
        logo_url=server_asset_url(server_url, settings.wide_tile) if settings.wide_tile else None,
        username=username,
        avatar_url=avatar_url(server_url, username),
    )


class SessionPersistence:
    """Runs the ordered side effects that complete a login.

    Steps run strictly in order and the first failure stops the rest:
    username, account, token, then push token registration when a push
    token is already stored locally.
    """

    def __init__(
        self,
        server_url: str,
        settings: AuthSettings,
        client: ChatClient,
        local_repository: LocalRepository,
        account_repository: AccountRepository,
        token_repository: TokenRepository,
    ):
        self.server_url = server_url
        self.settings = settings
        self.client = client
        self.local_repository = local_repository
        self.account_repository = account_repository
        self.token_repository = token_repository

    async def persist(self, user: User, token: Token) -> Result[Session]:
        username = user.username
        if not username:
            logger.error("Authenticated user has no username", user_id=user.id)
            return Failure(ValueError("Authenticated user has no username"))

        account = build_account(self.server_url, self.settings, username)
        result = await run_steps(
            [
                (
                    "save_username",
                    lambda: self.local_repository.save(
                        self.local_repository.CURRENT_USERNAME_KEY, username
                    ),
                ),
                ("save_account", lambda: self.account_repository.save(account)),
                ("save_token", lambda: self.token_repository.save(self.server_url, token)),
                ("register_push_token", self._register_push_token),
            ]
        )
        if isinstance(result, Failure):
            return result

        return Success(
            Session(
                server_url=self.server_url,
                token=token,
                username=username,
                avatar_url=account.avatar_url,
                icon_url=account.icon_url,
                logo_url=account.logo_url,
            )
        )

    async def _register_push_token(self) -> None:
        push_token = self.local_repository.get(self.local_repository.KEY_PUSH_TOKEN)
        if not push_token:
            # Arrives later through the push service's token refresh
            logger.info("No push token stored yet, skipping registration")
            return
        await self.client.register_push_token(push_token)
        logger.info("Push token registered", server=self.server_url)
