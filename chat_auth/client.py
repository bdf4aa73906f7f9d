"""Chat server REST client used by the login flow."""

import json
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, Protocol

import httpx
import structlog

from .config import ClientConfig, get_client_config
from .errors import ChatClientError
from .models import OauthServices, ServerInfo, Token, User

logger = structlog.get_logger()


class ChatClient(Protocol):
    """Remote operations the orchestrator depends on.

    Every method raises ChatClientError on remote or transport failure.
    """

    async def login_with_email(self, email: str, password: str) -> Token: ...

    async def login_with_ldap(self, username: str, password: str) -> Token: ...

    async def login(self, username: str, password: str) -> Token: ...

    async def login_with_cas(self, cas_token: str) -> Token: ...

    async def login_with_oauth(self, oauth_token: str, oauth_secret: str) -> Token: ...

    async def me(self) -> User: ...

    async def server_info(self) -> ServerInfo: ...

    async def settings_oauth(self) -> OauthServices: ...

    async def register_push_token(self, push_token: str) -> None: ...


def chat_request_logger(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to log chat server calls with timing and a correlation id."""

    @wraps(func)
    async def wrapper(self: "RocketChatClient", *args: Any, **kwargs: Any) -> Any:
        correlation_id = f"chat-{int(time.time() * 1000)}-{id(args) % 10000}"
        method_name = func.__name__

        logger.info(
            f"Chat API call started: {method_name}",
            correlation_id=correlation_id,
            method=method_name,
            server=self.server_url,
            authenticated=self.token is not None,
        )

        start_time = time.time()
        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            logger.error(
                f"Chat API call failed: {method_name}",
                correlation_id=correlation_id,
                method=method_name,
                server=self.server_url,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        logger.info(
            f"Chat API call completed: {method_name}",
            correlation_id=correlation_id,
            method=method_name,
            server=self.server_url,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return result

    return wrapper


def _error_message(response: httpx.Response) -> str | None:
    """Pull the human readable message out of an error payload."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message = body.get("message") or body.get("error")
    return str(message) if message else None


class RocketChatClient:
    """REST client for a single chat server."""

    def __init__(
        self,
        server_url: str,
        timeout: float = 30.0,
        push_app_name: str = "chat.rocket.android",
        http_client: httpx.AsyncClient | None = None,
    ):
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self.push_app_name = push_app_name
        self.token: Token | None = None
        self.http_client = http_client or httpx.AsyncClient(
            base_url=self.server_url, timeout=timeout, verify=True
        )

    async def __aenter__(self) -> "RocketChatClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http_client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"X-User-Id": self.token.user_id, "X-Auth-Token": self.token.auth_token}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body.

        Raises:
            ChatClientError: On transport failure, HTTP error status or a
                ``success: false`` body
        """
        try:
            response = await self.http_client.request(
                method,
                path,
                json=json_body,
                params=params,
                headers=self._auth_headers(),
            )
        except httpx.TimeoutException as e:
            logger.error("Chat server request timed out", path=path, timeout=self.timeout)
            raise ChatClientError() from e
        except httpx.HTTPError as e:
            logger.error("Chat server request error", path=path, error=str(e))
            raise ChatClientError() from e

        if response.status_code >= 400:
            raise ChatClientError(_error_message(response), response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise ChatClientError(None, response.status_code) from e

        if not isinstance(body, dict):
            raise ChatClientError(None, response.status_code)
        if body.get("success") is False or body.get("status") == "error":
            raise ChatClientError(_error_message(response), response.status_code)
        return body

    async def _login(self, payload: dict[str, Any]) -> Token:
        body = await self._request("POST", "/api/v1/login", json_body=payload)
        data = body.get("data") or {}
        user_id = data.get("userId")
        auth_token = data.get("authToken")
        if not user_id or not auth_token:
            raise ChatClientError("Login response did not include a token")

        self.token = Token(user_id=user_id, auth_token=auth_token)
        return self.token

    @chat_request_logger
    async def login_with_email(self, email: str, password: str) -> Token:
        return await self._login({"user": email, "password": password})

    @chat_request_logger
    async def login_with_ldap(self, username: str, password: str) -> Token:
        return await self._login(
            {"ldap": True, "username": username, "ldapPass": password, "ldapOptions": {}}
        )

    @chat_request_logger
    async def login(self, username: str, password: str) -> Token:
        return await self._login({"username": username, "password": password})

    @chat_request_logger
    async def login_with_cas(self, cas_token: str) -> Token:
        return await self._login({"cas": {"credentialToken": cas_token}})

    @chat_request_logger
    async def login_with_oauth(self, oauth_token: str, oauth_secret: str) -> Token:
        return await self._login(
            {
                "oauth": {
                    "credentialToken": oauth_token,
                    "credentialSecret": oauth_secret,
                }
            }
        )

    @chat_request_logger
    async def me(self) -> User:
        body = await self._request("GET", "/api/v1/me")
        return User(
            id=body.get("_id", ""),
            username=body.get("username"),
            name=body.get("name"),
        )

    @chat_request_logger
    async def server_info(self) -> ServerInfo:
        body = await self._request("GET", "/api/info")
        return ServerInfo.from_payload(body)

    @chat_request_logger
    async def settings_oauth(self) -> OauthServices:
        body = await self._request("GET", "/api/v1/settings.oauth")
        return OauthServices.from_service_list(body.get("services") or [])

    @chat_request_logger
    async def settings_public(self, setting_ids: list[str]) -> dict[str, Any]:
        """Fetch public settings as a ``setting id -> value`` mapping."""
        query = json.dumps({"_id": {"$in": setting_ids}})
        body = await self._request(
            "GET", "/api/v1/settings.public", params={"query": query, "count": 0}
        )
        return {s["_id"]: s.get("value") for s in body.get("settings") or [] if "_id" in s}

    @chat_request_logger
    async def register_push_token(self, push_token: str) -> None:
        await self._request(
            "POST",
            "/api/v1/push.token",
            json_body={"type": "gcm", "value": push_token, "appName": self.push_app_name},
        )


def get_chat_client(server_url: str, config: ClientConfig | None = None) -> RocketChatClient:
    """Get configured chat client for a server."""
    config = config or get_client_config()
    return RocketChatClient(
        server_url, timeout=config.request_timeout, push_app_name=config.push_app_name
    )
