"""Decide which login affordances a server supports."""

from dataclasses import dataclass, field

import structlog

from .models import AuthSettings, OauthProvider, OauthServices
from .urls import (
    CAS_TOKEN_LENGTH,
    SUPPORTED_OAUTH_PROVIDERS,
    cas_url,
    generate_oauth_state,
    generate_random_string,
    oauth_url,
)
from .view import LoginView

logger = structlog.get_logger()

# Above this many providers the view switches to its compact presentation
COMPACT_OAUTH_THRESHOLD = 3


@dataclass(frozen=True)
class CasButton:
    url: str
    token: str


@dataclass(frozen=True)
class OauthButton:
    provider: OauthProvider
    url: str
    state: str


@dataclass(frozen=True)
class ViewConfiguration:
    """Which login affordances the view should offer."""

    show_login_form: bool = False
    show_sign_up: bool = False
    cas: CasButton | None = None
    oauth_buttons: tuple[OauthButton, ...] = field(default_factory=tuple)

    @property
    def oauth_enabled(self) -> bool:
        return len(self.oauth_buttons) > 0

    @property
    def oauth_compact(self) -> bool:
        return len(self.oauth_buttons) > COMPACT_OAUTH_THRESHOLD


class CapabilityGate:
    """Builds view configuration from a settings snapshot.

    The snapshot is read-only; every call generates fresh correlation
    tokens so nothing is reused across setups.
    """

    def __init__(self, settings: AuthSettings, server_url: str):
        self.settings = settings
        self.server_url = server_url

    def cas_button(self) -> CasButton | None:
        if not self.settings.cas_enabled:
            return None
        if not self.settings.cas_login_url:
            logger.warning("CAS enabled without a login URL", server=self.server_url)
            return None
        token = generate_random_string(CAS_TOKEN_LENGTH)
        return CasButton(
            url=cas_url(self.settings.cas_login_url, self.server_url, token),
            token=token,
        )

    def oauth_buttons(self, services: OauthServices) -> tuple[OauthButton, ...]:
        """Buttons for providers enabled locally and advertised with a client id."""
        if not services:
            return ()

        state = generate_oauth_state()
        buttons = []
        for provider in SUPPORTED_OAUTH_PROVIDERS:
            if not self.settings.is_oauth_enabled(provider):
                continue
            client_id = services.client_id(provider)
            if client_id is None:
                logger.debug(
                    "OAuth provider enabled but not advertised by server",
                    provider=provider.value,
                )
                continue
            url = oauth_url(provider, client_id, self.server_url, state)
            if url is not None:
                buttons.append(OauthButton(provider=provider, url=url, state=state))
        return tuple(buttons)

    def login_configuration(self) -> ViewConfiguration:
        """Configuration known without contacting the server."""
        return ViewConfiguration(
            show_login_form=self.settings.login_form_enabled,
            show_sign_up=self.settings.registration_enabled,
            cas=self.cas_button(),
        )

    def oauth_configuration(self, services: OauthServices) -> ViewConfiguration:
        """Configuration for the OAuth providers once the server lists them."""
        return ViewConfiguration(oauth_buttons=self.oauth_buttons(services))


def apply_login_affordances(view: LoginView, config: ViewConfiguration) -> None:
    """Issue the form, sign-up and CAS directives to the view."""
    if config.show_login_form:
        view.show_form_view()
        view.setup_login_button_listener()
        view.setup_global_listener()
    else:
        view.hide_form_view()

    if config.show_sign_up:
        view.show_sign_up_view()
        view.setup_sign_up_view()

    if config.cas is not None:
        view.setup_cas_button_listener(config.cas.url, config.cas.token)
        view.show_cas_button()


def apply_oauth_affordances(view: LoginView, config: ViewConfiguration) -> None:
    """Issue the OAuth directives to the view."""
    for button in config.oauth_buttons:
        view.setup_oauth_button_listener(button.provider, button.url, button.state)
        view.enable_login_by(button.provider)

    if config.oauth_enabled:
        view.enable_oauth_view()
        if config.oauth_compact:
            view.setup_fab_listener()
    else:
        view.disable_oauth_view()
