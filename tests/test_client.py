"""Unit tests for client module."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from chat_auth.client import RocketChatClient, get_chat_client
from chat_auth.config import ClientConfig
from chat_auth.errors import ChatClientError
from chat_auth.models import OauthServices, Token

LOGIN_OK = {
    "status": "success",
    "data": {"userId": "user-1", "authToken": "auth-1"},
}


class TestRocketChatClient:
    """Test RocketChatClient class."""

    def setup_method(self) -> None:
        """Setup test fixtures."""
        self.client = RocketChatClient("https://chat.example.com/", timeout=10)

    def mock_request(self, response: httpx.Response) -> AsyncMock:
        return AsyncMock(return_value=response)

    def test_initialization(self) -> None:
        """Test client initialization."""
        assert self.client.server_url == "https://chat.example.com"
        assert self.client.timeout == 10
        assert self.client.token is None
        assert self.client._auth_headers() == {}

    @pytest.mark.asyncio
    async def test_login_with_email(self) -> None:
        """Test email login sends the user field and stores the token."""
        mock_request = self.mock_request(httpx.Response(200, json=LOGIN_OK))

        with patch.object(self.client.http_client, "request", mock_request):
            token = await self.client.login_with_email("alice@example.com", "secret")

        assert token == Token(user_id="user-1", auth_token="auth-1")
        assert self.client.token == token
        args, kwargs = mock_request.call_args
        assert args == ("POST", "/api/v1/login")
        assert kwargs["json"] == {"user": "alice@example.com", "password": "secret"}

    @pytest.mark.asyncio
    async def test_login_payloads(self) -> None:
        """Test the payload of each login strategy."""
        cases = [
            (
                self.client.login_with_ldap,
                ("alice", "secret"),
                {"ldap": True, "username": "alice", "ldapPass": "secret", "ldapOptions": {}},
            ),
            (self.client.login, ("alice", "secret"), {"username": "alice", "password": "secret"}),
            (self.client.login_with_cas, ("cas-1",), {"cas": {"credentialToken": "cas-1"}}),
            (
                self.client.login_with_oauth,
                ("tok", "sec"),
                {"oauth": {"credentialToken": "tok", "credentialSecret": "sec"}},
            ),
        ]

        for method, args, expected in cases:
            mock_request = self.mock_request(httpx.Response(200, json=LOGIN_OK))
            with patch.object(self.client.http_client, "request", mock_request):
                await method(*args)
            assert mock_request.call_args.kwargs["json"] == expected

    @pytest.mark.asyncio
    async def test_login_rejected_uses_server_message(self) -> None:
        """Test that a 401 surfaces the server's message."""
        response = httpx.Response(
            401, json={"status": "error", "error": "Unauthorized", "message": "Wrong password"}
        )

        with patch.object(self.client.http_client, "request", self.mock_request(response)):
            with pytest.raises(ChatClientError) as exc_info:
                await self.client.login("alice", "wrong")

        assert exc_info.value.message == "Wrong password"
        assert exc_info.value.status_code == 401
        assert self.client.token is None

    @pytest.mark.asyncio
    async def test_login_without_token(self) -> None:
        response = httpx.Response(200, json={"status": "success", "data": {}})

        with patch.object(self.client.http_client, "request", self.mock_request(response)):
            with pytest.raises(ChatClientError, match="did not include a token"):
                await self.client.login("alice", "secret")

    @pytest.mark.asyncio
    async def test_success_false_body(self) -> None:
        response = httpx.Response(200, json={"success": False, "error": "Not allowed"})

        with patch.object(self.client.http_client, "request", self.mock_request(response)):
            with pytest.raises(ChatClientError) as exc_info:
                await self.client.server_info()

        assert exc_info.value.message == "Not allowed"

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        response = httpx.Response(200, content=b"<html>maintenance</html>")

        with patch.object(self.client.http_client, "request", self.mock_request(response)):
            with pytest.raises(ChatClientError) as exc_info:
                await self.client.me()

        assert exc_info.value.message is None

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Test that a timeout becomes a ChatClientError without message."""
        mock_request = AsyncMock(side_effect=httpx.TimeoutException("Timeout"))

        with patch.object(self.client.http_client, "request", mock_request):
            with pytest.raises(ChatClientError) as exc_info:
                await self.client.login("alice", "secret")

        assert exc_info.value.message is None
        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        mock_request = AsyncMock(side_effect=httpx.ConnectError("Connection refused"))

        with patch.object(self.client.http_client, "request", mock_request):
            with pytest.raises(ChatClientError):
                await self.client.settings_oauth()

    @pytest.mark.asyncio
    async def test_me_uses_auth_headers(self) -> None:
        """Test that authenticated calls carry the session token."""
        self.client.token = Token(user_id="user-1", auth_token="auth-1")
        response = httpx.Response(
            200, json={"_id": "user-1", "username": "alice", "name": "Alice", "success": True}
        )
        mock_request = self.mock_request(response)

        with patch.object(self.client.http_client, "request", mock_request):
            user = await self.client.me()

        assert user.id == "user-1"
        assert user.username == "alice"
        assert user.name == "Alice"
        assert mock_request.call_args.kwargs["headers"] == {
            "X-User-Id": "user-1",
            "X-Auth-Token": "auth-1",
        }

    @pytest.mark.asyncio
    async def test_server_info(self) -> None:
        response = httpx.Response(200, json={"info": {"version": "0.62.2"}, "success": True})

        with patch.object(self.client.http_client, "request", self.mock_request(response)):
            info = await self.client.server_info()

        assert info.version == "0.62.2"

    @pytest.mark.asyncio
    async def test_settings_oauth(self) -> None:
        response = httpx.Response(
            200,
            json={
                "services": [
                    {"name": "github", "appId": "gh-app"},
                    {"service": "google", "clientId": "g-client"},
                    {"name": "gitlab"},
                ],
                "success": True,
            },
        )

        with patch.object(self.client.http_client, "request", self.mock_request(response)):
            services = await self.client.settings_oauth()

        assert services == OauthServices(github="gh-app", google="g-client")

    @pytest.mark.asyncio
    async def test_settings_public(self) -> None:
        """Test the public settings query and its id -> value mapping."""
        response = httpx.Response(
            200,
            json={
                "settings": [
                    {"_id": "Accounts_ShowFormLogin", "value": True},
                    {"_id": "LDAP_Enable", "value": False},
                    {"value": "orphan"},
                ],
                "success": True,
            },
        )
        mock_request = self.mock_request(response)

        with patch.object(self.client.http_client, "request", mock_request):
            settings = await self.client.settings_public(["Accounts_ShowFormLogin", "LDAP_Enable"])

        assert settings == {"Accounts_ShowFormLogin": True, "LDAP_Enable": False}
        params = mock_request.call_args.kwargs["params"]
        assert params["count"] == 0
        assert json.loads(params["query"]) == {
            "_id": {"$in": ["Accounts_ShowFormLogin", "LDAP_Enable"]}
        }

    @pytest.mark.asyncio
    async def test_register_push_token(self) -> None:
        mock_request = self.mock_request(httpx.Response(200, json={"success": True}))

        with patch.object(self.client.http_client, "request", mock_request):
            await self.client.register_push_token("push-1")

        args, kwargs = mock_request.call_args
        assert args == ("POST", "/api/v1/push.token")
        assert kwargs["json"] == {
            "type": "gcm",
            "value": "push-1",
            "appName": "chat.rocket.android",
        }

    @pytest.mark.asyncio
    async def test_context_manager_closes_http_client(self) -> None:
        with patch.object(self.client.http_client, "aclose", new_callable=AsyncMock) as mock_close:
            async with self.client as client:
                assert client is self.client

        mock_close.assert_awaited_once()


def test_get_chat_client() -> None:
    """Test chat client factory."""
    config = ClientConfig(request_timeout=5.0, push_app_name="com.example.chat")

    client = get_chat_client("https://chat.example.com", config)

    assert isinstance(client, RocketChatClient)
    assert client.server_url == "https://chat.example.com"
    assert client.timeout == 5.0
    assert client.push_app_name == "com.example.chat"


def test_get_chat_client_loads_config() -> None:
    with patch(
        "chat_auth.client.get_client_config", return_value=ClientConfig(request_timeout=12.0)
    ) as mock_config:
        client = get_chat_client("https://chat.example.com")

    mock_config.assert_called_once()
    assert client.timeout == 12.0
