"""Pydantic models for OAuth client settings and cached credentials."""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


class InstalledAppSettings(BaseModel):
    """The ``installed`` section of a Google client secret file."""

    client_id: str
    client_secret: str
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI
    redirect_uris: list[str] = Field(default_factory=lambda: ["http://localhost"])

    @property
    def redirect_uri(self) -> str:
        return self.redirect_uris[0] if self.redirect_uris else "http://localhost"


class ClientSettings(BaseModel):
    """Google OAuth client secret file for an installed application."""

    installed: InstalledAppSettings | None = None


class StoredCredentials(BaseModel):
    """Token cache persisted between runs."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_at: datetime | None = None
    scope: str | None = None

    @classmethod
    def from_token_response(
        cls,
        data: dict,
        previous_refresh_token: str | None = None,
        now: datetime | None = None,
    ) -> "StoredCredentials":
        """Build credentials from a token endpoint response.

        Refresh responses usually omit ``refresh_token``; the previous one is
        carried over in that case.
        """
        now = now or datetime.now(timezone.utc)
        expires_in = data.get("expires_in")
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or previous_refresh_token,
            token_type=data.get("token_type", "Bearer"),
            expires_at=now + timedelta(seconds=int(expires_in)) if expires_in else None,
            scope=data.get("scope"),
        )

    def is_expired(self, margin: int = 60, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now + timedelta(seconds=margin) >= expires_at
