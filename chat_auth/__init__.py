"""Login orchestration for chat server clients."""

from .capabilities import CapabilityGate, ViewConfiguration
from .cancellation import CancelScope
from .errors import (
    ChatAuthError,
    ChatClientError,
    ConnectivityError,
    DiagnosticError,
    RemoteAuthError,
    SideEffectError,
    ValidationError,
)
from .models import (
    Account,
    AuthSettings,
    CasCredential,
    LoginState,
    OauthCredential,
    OauthProvider,
    PasswordCredential,
    Session,
    Token,
)
from .orchestrator import AuthenticationOrchestrator
from .version import ServerVersion, is_at_least, parse_version

__all__ = [
    "Account",
    "AuthSettings",
    "AuthenticationOrchestrator",
    "CancelScope",
    "CapabilityGate",
    "CasCredential",
    "ChatAuthError",
    "ChatClientError",
    "ConnectivityError",
    "DiagnosticError",
    "LoginState",
    "OauthCredential",
    "OauthProvider",
    "PasswordCredential",
    "RemoteAuthError",
    "ServerVersion",
    "Session",
    "SideEffectError",
    "Token",
    "ValidationError",
    "ViewConfiguration",
    "is_at_least",
    "parse_version",
]
