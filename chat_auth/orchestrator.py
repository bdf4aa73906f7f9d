"""Login orchestration: capability setup, credential exchange and session handoff."""

import asyncio
import re
from collections.abc import Callable
from typing import Any

import structlog

from .cancellation import CancelScope
from .capabilities import (
    CapabilityGate,
    apply_login_affordances,
    apply_oauth_affordances,
)
from .client import ChatClient, get_chat_client
from .config import ClientConfig
from .errors import (
    ChatClientError,
    ConnectivityError,
    DiagnosticError,
    RemoteAuthError,
    SideEffectError,
    ValidationError,
)
from .models import (
    AuthSettings,
    CasCredential,
    LoginCredential,
    LoginState,
    OauthCredential,
    OauthServices,
    PasswordCredential,
    Session,
    Token,
)
from .network import ConnectivityChecker, HttpConnectivityChecker
from .persistence import SessionPersistence
from .repositories import (
    AccountRepository,
    InMemoryAccountRepository,
    InMemoryLocalRepository,
    InMemoryTokenRepository,
    LocalRepository,
    TokenRepository,
)
from .result import Failure, Result, Success, attempt
from .settings import SettingsRepository
from .version import ServerVersion, is_at_least, parse_version
from .view import AuthenticationNavigator, LoginView

logger = structlog.get_logger()

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}@[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)


def is_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


def validate_password_login(username_or_email: str, password: str) -> PasswordCredential:
    """Reject a blank identifier or an empty password before any network call.

    Raises:
        ValidationError: Naming the offending field
    """
    if not username_or_email.strip():
        raise ValidationError("username_or_email")
    if not password:
        raise ValidationError("password")
    return PasswordCredential(username_or_email, password)


def _as_remote_error(error: Exception) -> Exception:
    if isinstance(error, ChatClientError):
        return RemoteAuthError(error)
    return error


class AuthenticationOrchestrator:
    """Drives login attempts for one server and one login screen.

    Each attempt moves IDLE -> SUBMITTING -> SUCCESS | FAILED -> IDLE.
    Attempts are serialized, and every task runs inside ``scope``; once
    the scope is cancelled the view and navigator are never called again.
    """

    def __init__(
        self,
        view: LoginView,
        navigator: AuthenticationNavigator,
        client: ChatClient,
        settings: AuthSettings,
        server_url: str,
        token_repository: TokenRepository,
        local_repository: LocalRepository,
        account_repository: AccountRepository,
        connectivity: ConnectivityChecker,
        config: ClientConfig | None = None,
        scope: CancelScope | None = None,
    ):
        self.view = view
        self.navigator = navigator
        self.client = client
        self.settings = settings
        self.server_url = server_url
        self.token_repository = token_repository
        self.local_repository = local_repository
        self.account_repository = account_repository
        self.connectivity = connectivity
        self.config = config or ClientConfig()
        self.scope = scope or CancelScope()
        self.gate = CapabilityGate(settings, server_url)
        self.state = LoginState.IDLE
        self._attempt_lock = asyncio.Lock()
        self._server_check: asyncio.Task[Result[ServerVersion]] | None = None

    @classmethod
    async def create(
        cls,
        server_url: str,
        view: LoginView,
        navigator: AuthenticationNavigator,
        config: ClientConfig | None = None,
        settings_repository: SettingsRepository | None = None,
        scope: CancelScope | None = None,
    ) -> "AuthenticationOrchestrator":
        """Build an orchestrator with the REST client and in-memory stores.

        Raises:
            ChatClientError: If the server's settings cannot be fetched
        """
        config = config or ClientConfig(server_url=server_url)
        client = get_chat_client(server_url, config)
        settings_repository = settings_repository or SettingsRepository()
        settings = await settings_repository.get(server_url, client)
        return cls(
            view=view,
            navigator=navigator,
            client=client,
            settings=settings,
            server_url=server_url,
            token_repository=InMemoryTokenRepository(),
            local_repository=InMemoryLocalRepository(),
            account_repository=InMemoryAccountRepository(),
            connectivity=HttpConnectivityChecker(
                config.connectivity_probe_url or server_url
            ),
            config=config,
            scope=scope,
        )

    def _ui(self, directive: Callable[..., Any], *args: Any) -> None:
        """Invoke a view or navigator directive unless the scope is gone."""
        if self.scope.active:
            directive(*args)

    def _transition(self, state: LoginState) -> None:
        logger.info(
            "Login state changed",
            from_state=self.state.value,
            to_state=state.value,
            server=self.server_url,
        )
        self.state = state

    # View setup

    def setup_view(self) -> list[asyncio.Task[Any]]:
        """Configure login affordances and start the background lookups.

        Returns the launched tasks (OAuth services lookup and, the first
        time only, the server compatibility check).
        """
        if not self.scope.active:
            logger.warning("setup_view called after the view was detached")
            return []

        apply_login_affordances(self.view, self.gate.login_configuration())

        tasks: list[asyncio.Task[Any]] = [
            self.scope.launch(self.setup_oauth_services(), name="oauth-services")
        ]
        if self._server_check is None:
            self._server_check = self.scope.launch(
                self.check_server_info(), name="server-info"
            )
            tasks.append(self._server_check)
        return tasks

    async def setup_oauth_services(self) -> Result[OauthServices]:
        """Offer the OAuth providers the server advertises.

        A failed lookup is logged and treated as "no OAuth available".
        """
        result: Result[OauthServices] = await attempt(
            self.client.settings_oauth,
            on_error=lambda e: DiagnosticError(f"OAuth services unavailable: {e}"),
        )
        if isinstance(result, Failure):
            logger.error("Failed to fetch OAuth services", error=str(result.error))
            services = OauthServices()
        else:
            services = result.value

        if not self.scope.active:
            return result
        apply_oauth_affordances(self.view, self.gate.oauth_configuration(services))
        return result

    async def check_server_info(self) -> Result[ServerVersion]:
        """Warn about or block servers older than the supported versions."""
        result = await attempt(
            self.client.server_info,
            on_error=lambda e: DiagnosticError(f"Server info unavailable: {e}"),
        )
        if isinstance(result, Failure):
            logger.warning("Server version check failed", error=str(result.error))
            return result

        version = parse_version(result.value.version)
        required = parse_version(self.config.required_server_version)
        recommended = parse_version(self.config.recommended_server_version)

        if not is_at_least(version, required):
            logger.warning(
                "Server is out of date and not supported",
                server_version=version.raw,
                required_version=required.raw,
            )
            self._ui(self.view.block_and_alert_not_required_version)
        elif not is_at_least(version, recommended):
            logger.info(
                "Server version is below the recommended version",
                server_version=version.raw,
                recommended_version=recommended.raw,
            )
            self._ui(self.view.alert_not_recommended_version)
        else:
            logger.info(
                "Server version is supported",
                server_version=version.raw,
                required_version=required.raw,
            )
        return Success(version)

    # Entry points

    def authenticate_with_user_and_password(
        self, username_or_email: str, password: str
    ) -> asyncio.Task[Result[Session]] | None:
        try:
            credential = validate_password_login(username_or_email, password)
        except ValidationError as e:
            logger.info("Credential rejected before login", field=e.field)
            if e.field == "password":
                self._ui(self.view.alert_wrong_password)
            else:
                self._ui(self.view.alert_wrong_username_or_email)
            return None
        return self._launch(credential)

    def authenticate_with_cas(self, token: str) -> asyncio.Task[Result[Session]] | None:
        return self._launch(CasCredential(token))

    def authenticate_with_oauth(
        self, token: str, secret: str
    ) -> asyncio.Task[Result[Session]] | None:
        return self._launch(OauthCredential(token, secret))

    def signup(self) -> None:
        self._ui(self.navigator.to_sign_up)

    def detach(self) -> None:
        """Tear down: cancel pending work and stop all view callbacks."""
        self.scope.cancel()

    # Attempt state machine

    def _launch(self, credential: LoginCredential) -> asyncio.Task[Result[Session]] | None:
        if not self.scope.active:
            logger.warning("Login requested after the view was detached")
            return None
        return self.scope.launch(self._authenticate(credential), name="login")

    async def _authenticate(self, credential: LoginCredential) -> Result[Session]:
        async with self._attempt_lock:
            self.scope.ensure_active()
            self._transition(LoginState.SUBMITTING)
            self._ui(self.view.disable_user_input)
            self._ui(self.view.show_loading)
            try:
                outcome = await self._submit(credential)
                if isinstance(outcome, Success):
                    self._transition(LoginState.SUCCESS)
                    self._ui(self.navigator.to_chat_list)
                else:
                    self._transition(LoginState.FAILED)
                    self._report_failure(outcome.error)
            finally:
                self._ui(self.view.hide_loading)
                self._ui(self.view.enable_user_input)
                self._transition(LoginState.IDLE)
            return outcome

    async def _submit(self, credential: LoginCredential) -> Result[Session]:
        reachable = await attempt(
            self.connectivity.has_internet_access,
            on_error=lambda e: ConnectivityError(f"Connectivity check failed: {e}"),
        )
        if isinstance(reachable, Failure):
            logger.warning("Connectivity check raised", error=str(reachable.error))
            return reachable
        if not reachable.value:
            return Failure(ConnectivityError("No internet access"))
        self.scope.ensure_active()

        login: Result[Token] = await attempt(
            lambda: self._exchange(credential), on_error=_as_remote_error
        )
        if isinstance(login, Failure):
            return login
        self.scope.ensure_active()

        profile = await attempt(self.client.me, on_error=_as_remote_error)
        if isinstance(profile, Failure):
            return profile
        self.scope.ensure_active()

        persistence = SessionPersistence(
            server_url=self.server_url,
            settings=self.settings,
            client=self.client,
            local_repository=self.local_repository,
            account_repository=self.account_repository,
            token_repository=self.token_repository,
        )
        return await persistence.persist(profile.value, login.value)

    async def _exchange(self, credential: LoginCredential) -> Token:
        if isinstance(credential, PasswordCredential):
            identifier = credential.username_or_email
            if is_email(identifier):
                return await self.client.login_with_email(identifier, credential.password)
            if self.settings.ldap_enabled:
                return await self.client.login_with_ldap(identifier, credential.password)
            return await self.client.login(identifier, credential.password)

        if isinstance(credential, CasCredential):
            # The server finishes processing the CAS callback during this delay
            await self.scope.sleep(self.config.cas_settle_delay_seconds)
            return await self.client.login_with_cas(credential.token)

        if isinstance(credential, OauthCredential):
            return await self.client.login_with_oauth(credential.token, credential.secret)

        raise TypeError(f"Unsupported credential: {type(credential).__name__}")

    def _report_failure(self, error: Exception) -> None:
        if isinstance(error, ConnectivityError):
            logger.info("Login aborted, no connectivity", server=self.server_url)
            self._ui(self.view.show_no_internet_connection)
            return

        if isinstance(error, SideEffectError):
            logger.warning(
                "Login succeeded remotely but local session was not saved",
                server=self.server_url,
                step=error.step,
                error=str(error.cause),
            )
        else:
            logger.warning(
                "Login failed",
                server=self.server_url,
                error=str(error),
                error_type=type(error).__name__,
            )

        message = getattr(error, "message", None)
        if message:
            self._ui(self.view.show_message, message)
        else:
            self._ui(self.view.show_generic_error_message)
