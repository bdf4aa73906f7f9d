"""URL builders and random correlation tokens for CAS and OAuth logins."""

import base64
import json
import secrets
import string
from urllib.parse import quote, urlencode

from .models import OauthProvider

_TOKEN_ALPHABET = string.ascii_letters + string.digits

CAS_TOKEN_LENGTH = 17
OAUTH_TOKEN_LENGTH = 40


def _strip(server_url: str) -> str:
    return server_url.rstrip("/")


def generate_random_string(length: int) -> str:
    """Return an unpredictable alphanumeric string."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def generate_oauth_state() -> str:
    """Build a fresh base64 encoded OAuth state payload."""
    payload = {
        "loginStyle": "popup",
        "credentialToken": generate_random_string(OAUTH_TOKEN_LENGTH),
        "isCordova": True,
    }
    encoded = json.dumps(payload, separators=(",", ":")).encode()
    return base64.b64encode(encoded).decode()


def decode_oauth_state(state: str) -> dict:
    """Decode a state payload built by :func:`generate_oauth_state`."""
    return json.loads(base64.b64decode(state))


def cas_url(cas_login_url: str, server_url: str, token: str) -> str:
    return f"{cas_login_url}?{urlencode({'service': f'{_strip(server_url)}/_cas/{token}'})}"


def server_asset_url(server_url: str, asset_path: str) -> str:
    """Absolute URL of a server asset such as the favicon."""
    return f"{_strip(server_url)}/{asset_path.lstrip('/')}"


def avatar_url(server_url: str, username: str) -> str:
    return f"{_strip(server_url)}/avatar/{quote(username)}?format=jpeg"


def _redirect_uri(server_url: str, provider: OauthProvider) -> str:
    return f"{_strip(server_url)}/_oauth/{provider.value}?close"


def oauth_url(
    provider: OauthProvider, client_id: str, server_url: str, state: str
) -> str | None:
    """Authorization URL for ``provider``, or None if it is not supported."""
    if provider == OauthProvider.GITHUB:
        base = "https://github.com/login/oauth/authorize"
        params = {"scope": "user:email", "client_id": client_id, "state": state}
    elif provider == OauthProvider.GOOGLE:
        base = "https://accounts.google.com/o/oauth2/v2/auth"
        params = {"scope": "email profile"}
    elif provider == OauthProvider.LINKEDIN:
        base = "https://linkedin.com/oauth/v2/authorization"
        params = {"scope": "r_emailaddress"}
    elif provider == OauthProvider.GITLAB:
        base = "https://gitlab.com/oauth/authorize"
        params = {"scope": "read_user"}
    else:
        return None

    if provider != OauthProvider.GITHUB:
        params.update(
            {
                "client_id": client_id,
                "redirect_uri": _redirect_uri(server_url, provider),
                "response_type": "code",
                "state": state,
            }
        )
    return f"{base}?{urlencode(params, quote_via=quote)}"


SUPPORTED_OAUTH_PROVIDERS = (
    OauthProvider.GITHUB,
    OauthProvider.GOOGLE,
    OauthProvider.LINKEDIN,
    OauthProvider.GITLAB,
)
