"""View and navigation contracts driven by the orchestrator."""

from typing import Protocol

from .models import OauthProvider


class LoginView(Protocol):
    """Directives the orchestrator issues to the login screen."""

    def show_form_view(self) -> None: ...

    def hide_form_view(self) -> None: ...

    def setup_login_button_listener(self) -> None: ...

    def setup_global_listener(self) -> None: ...

    def show_sign_up_view(self) -> None: ...

    def setup_sign_up_view(self) -> None: ...

    def setup_cas_button_listener(self, cas_url: str, cas_token: str) -> None: ...

    def show_cas_button(self) -> None: ...

    def setup_oauth_button_listener(
        self, provider: OauthProvider, oauth_url: str, state: str
    ) -> None: ...

    def enable_login_by(self, provider: OauthProvider) -> None: ...

    def enable_oauth_view(self) -> None: ...

    def disable_oauth_view(self) -> None: ...

    def setup_fab_listener(self) -> None:
        """Switch to the compact presentation used for many providers."""
        ...

    def alert_wrong_username_or_email(self) -> None: ...

    def alert_wrong_password(self) -> None: ...

    def alert_not_recommended_version(self) -> None: ...

    def block_and_alert_not_required_version(self) -> None: ...

    def disable_user_input(self) -> None: ...

    def enable_user_input(self) -> None: ...

    def show_loading(self) -> None: ...

    def hide_loading(self) -> None: ...

    def show_message(self, message: str) -> None: ...

    def show_generic_error_message(self) -> None: ...

    def show_no_internet_connection(self) -> None: ...


class AuthenticationNavigator(Protocol):
    """Screen transitions out of the login flow."""

    def to_chat_list(self) -> None: ...

    def to_sign_up(self) -> None: ...
