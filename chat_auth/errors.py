"""Error taxonomy for login orchestration."""


class ChatAuthError(Exception):
    """Base exception for authentication orchestration errors."""

    pass


class ChatClientError(ChatAuthError):
    """Raised by the chat client when the server or transport fails.

    ``message`` is the human readable text supplied by the server, if any.
    """

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message or "Chat server request failed")
        self.message = message
        self.status_code = status_code


class ValidationError(ChatAuthError):
    """Credential rejected locally before any network call."""

    def __init__(self, field: str):
        super().__init__(f"Invalid {field}")
        self.field = field


class ConnectivityError(ChatAuthError):
    """No network reachability; the attempt was aborted pre-flight."""

    pass


class RemoteAuthError(ChatAuthError):
    """The server rejected the credentials or the exchange failed."""

    def __init__(self, cause: ChatClientError):
        super().__init__(str(cause))
        self.cause = cause

    @property
    def message(self) -> str | None:
        return self.cause.message


class SideEffectError(ChatAuthError):
    """A post-login persistence step failed.

    The user is already authenticated server-side when this is raised.
    """

    def __init__(self, step: str, cause: Exception):
        super().__init__(f"{step} failed: {cause}")
        self.step = step
        self.cause = cause

    @property
    def message(self) -> str | None:
        if isinstance(self.cause, ChatClientError):
            return self.cause.message
        return None


class DiagnosticError(ChatAuthError):
    """Non-blocking failure of a diagnostic or capability lookup."""

    pass
