"""OAuth session provider for the Drive API.

Implements the installed-application flow: the operator opens a consent URL,
pastes back the redirected URL (or just the code), and the resulting tokens
are cached in a credentials file and refreshed on later runs.
"""

import json
import logging
from pathlib import Path
from typing import Callable
from urllib.parse import parse_qs, urlencode, urlparse

import requests
from pydantic import ValidationError

from gdoc_mirror.exceptions import AuthError, ConfigError
from gdoc_mirror.models import ClientSettings, InstalledAppSettings, StoredCredentials

logger = logging.getLogger(__name__)

DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"

CONFIG_DIR = Path.home() / ".config" / "gdoc-mirror"
DEFAULT_CLIENT_SETTINGS = CONFIG_DIR / "client_secret.json"
DEFAULT_CREDENTIALS = CONFIG_DIR / "credentials.json"


def load_client_settings(path: str | Path) -> InstalledAppSettings:
    """Load the ``installed`` section of a client secret file.

    Raises:
        ConfigError: If the file is missing, unreadable or has no installed section
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            settings = ClientSettings.model_validate(json.load(f))
    except FileNotFoundError as e:
        raise ConfigError(f"Client settings not found: {path}") from e
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"Invalid client settings {path}: {e}") from e

    if settings.installed is None:
        raise ConfigError(f"Client settings {path} have no 'installed' application section")
    return settings.installed


def extract_code(answer: str) -> str:
    """Get the authorization code from a pasted redirect URL or bare code."""
    answer = answer.strip()
    if "://" in answer:
        query = parse_qs(urlparse(answer).query)
        if "error" in query:
            raise AuthError(f"Authorization denied: {query['error'][0]}")
        codes = query.get("code")
        if not codes:
            raise AuthError("No authorization code in the pasted URL")
        return codes[0]
    if not answer:
        raise AuthError("No authorization code entered")
    return answer


class SessionProvider:
    """Produces requests sessions authorized for the Drive API.

    Example:
        >>> provider = SessionProvider("client_secret.json", "credentials.json")
        >>> with provider:
        ...     session = provider.get_session()
    """

    def __init__(
        self,
        client_settings_path: str | Path = DEFAULT_CLIENT_SETTINGS,
        credentials_path: str | Path = DEFAULT_CREDENTIALS,
        scope: str = DRIVE_READONLY_SCOPE,
        timeout: int = 30,
        prompt: Callable[[str], str] = input,
        http: requests.Session | None = None,
    ):
        """Initialize session provider.

        Args:
            client_settings_path: Google client secret file (installed application)
            credentials_path: Token cache file, created on first authorization
            scope: OAuth scope to request
            timeout: Token endpoint timeout in seconds
            prompt: Reads the operator's answer during interactive authorization
            http: Session used for token endpoint calls (created and owned if None)
        """
        self.client_settings_path = Path(client_settings_path)
        self.credentials_path = Path(credentials_path)
        self.scope = scope
        self.timeout = timeout
        self.prompt = prompt
        self._owns_http = http is None
        self.http = http or requests.Session()
        self._settings: InstalledAppSettings | None = None

    def close(self):
        """Close the token endpoint session if we own it."""
        if self._owns_http and self.http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    @property
    def settings(self) -> InstalledAppSettings:
        if self._settings is None:
            self._settings = load_client_settings(self.client_settings_path)
        return self._settings

    def get_session(self) -> requests.Session:
        """Get a session carrying a valid bearer token."""
        credentials = self.get_credentials()
        session = requests.Session()
        session.headers.update(
            {"Authorization": f"{credentials.token_type} {credentials.access_token}"}
        )
        return session

    def get_credentials(self) -> StoredCredentials:
        """Return cached credentials, refreshing or re-authorizing as needed."""
        credentials = self.load_credentials()

        if credentials is not None and not credentials.is_expired():
            logger.debug("Using cached credentials")
            return credentials

        if credentials is not None and credentials.refresh_token:
            logger.info("Access token expired, refreshing")
            credentials = self.refresh(credentials)
        else:
            credentials = self.authorize()

        self.save_credentials(credentials)
        return credentials

    def load_credentials(self) -> StoredCredentials | None:
        """Load the token cache; an absent file means no credentials.

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        if not self.credentials_path.exists():
            return None
        try:
            with open(self.credentials_path, "r", encoding="utf-8") as f:
                return StoredCredentials.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise ConfigError(f"Invalid credentials file {self.credentials_path}: {e}") from e

    def save_credentials(self, credentials: StoredCredentials):
        try:
            self.credentials_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.credentials_path, "w", encoding="utf-8") as f:
                f.write(credentials.model_dump_json(indent=2, exclude_none=True))
        except OSError as e:
            raise ConfigError(f"Cannot write credentials {self.credentials_path}: {e}") from e
        logger.debug(f"Saved credentials to {self.credentials_path}")

    def authorization_url(self) -> str:
        settings = self.settings
        params = {
            "client_id": settings.client_id,
            "redirect_uri": settings.redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{settings.auth_uri}?{urlencode(params)}"

    def authorize(self) -> StoredCredentials:
        """Run the interactive installed-application flow."""
        print("Open this URL in a browser and authorize access:\n")
        print(f"  {self.authorization_url()}\n")
        answer = self.prompt("Paste the URL you were redirected to (or the code): ")
        code = extract_code(answer)

        data = self._token_request({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.settings.redirect_uri,
        })
        logger.info("Authorization complete")
        return StoredCredentials.from_token_response(data)

    def refresh(self, credentials: StoredCredentials) -> StoredCredentials:
        """Exchange a refresh token for a new access token."""
        data = self._token_request({
            "grant_type": "refresh_token",
            "refresh_token": credentials.refresh_token,
        })
        return StoredCredentials.from_token_response(
            data, previous_refresh_token=credentials.refresh_token
        )

    def _token_request(self, form: dict) -> dict:
        settings = self.settings
        form = {**form, "client_id": settings.client_id, "client_secret": settings.client_secret}
        try:
            response = self.http.post(settings.token_uri, data=form, timeout=self.timeout)
        except requests.RequestException as e:
            raise AuthError(f"Token request failed: {type(e).__name__}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not response.ok or "access_token" not in payload:
            reason = payload.get("error_description") or payload.get("error") or response.reason
            raise AuthError(
                f"Token endpoint returned HTTP {response.status_code}: {reason}",
                status_code=response.status_code,
            )
        return payload
