"""
Credential provider: produces the OAuth session every service handle is built from.

Three sources, tried in order:
1. Stored token (TOKEN_FILE), used as-is while valid
2. Stored token refreshed with its refresh_token
3. Installed-app browser flow (first run only, when interactive)

The refreshed/obtained token is written back to TOKEN_FILE so the next
process run starts at step 1.
"""

import asyncio
from pathlib import Path
from typing import Protocol

import google_auth_httplib2
import httplib2
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from logging_config import logger
from oauth_config import (
    API_TIMEOUT,
    AUTH_TIMEOUT_SECONDS,
    CREDENTIALS_FILE,
    INTERACTIVE_AUTH,
    OAUTH_PORT,
    SCOPES,
    TOKEN_FILE,
)

__all__ = ["CredentialProvider", "OAuthCredentialProvider"]


class CredentialProvider(Protocol):
    """Anything that can hand the session manager a credentialed session."""

    async def acquire(self) -> Credentials:
        """Return a usable session or raise. Safe to call repeatedly."""
        ...


class OAuthCredentialProvider:
    """
    Desktop-app OAuth credentials backed by a token file.

    acquire() runs the blocking load/refresh/browser work in a worker thread
    and gives up after `timeout` seconds.
    """

    def __init__(
        self,
        token_file: Path = TOKEN_FILE,
        credentials_file: Path = CREDENTIALS_FILE,
        scopes: list[str] | None = None,
        interactive: bool = INTERACTIVE_AUTH,
        timeout: float = AUTH_TIMEOUT_SECONDS,
        port: int = OAUTH_PORT,
    ) -> None:
        self.token_file = Path(token_file)
        self.credentials_file = Path(credentials_file)
        self.scopes = list(scopes or SCOPES)
        self.interactive = interactive
        self.timeout = timeout
        self.port = port

    async def acquire(self) -> Credentials:
        return await asyncio.wait_for(
            asyncio.to_thread(self.load_or_authorize), timeout=self.timeout
        )

    def load_or_authorize(self, manual: bool = False) -> Credentials:
        """Synchronous acquisition. Also used directly by `python -m auth`."""
        creds = self._load_token()

        if creds is not None and creds.valid:
            return creds

        if creds is not None and creds.expired and creds.refresh_token:
            logger.info("Refreshing stored Google token")
            creds.refresh(google_auth_httplib2.Request(httplib2.Http(timeout=API_TIMEOUT)))
            self._save_token(creds)
            return creds

        if not self.interactive and not manual:
            raise FileNotFoundError(
                f"{self.token_file} not found or invalid. Run: python -m auth"
            )

        creds = self._run_flow(manual)
        self._save_token(creds)
        return creds

    def _load_token(self) -> Credentials | None:
        if not self.token_file.exists():
            return None
        try:
            return Credentials.from_authorized_user_file(str(self.token_file), self.scopes)
        except ValueError as e:
            # Malformed or missing refresh_token: fall through to a fresh flow
            logger.warning(f"Ignoring unusable token file {self.token_file}: {e}")
            return None

    def _run_flow(self, manual: bool) -> Credentials:
        if not self.credentials_file.exists():
            raise FileNotFoundError(
                f"OAuth client secrets not found at {self.credentials_file}. "
                "Download a Desktop app OAuth client JSON from the GCP Console "
                "and save it there (or set SCRIVENER_CREDENTIALS_FILE)."
            )

        flow = InstalledAppFlow.from_client_secrets_file(str(self.credentials_file), self.scopes)
        if manual:
            return self._run_manual_flow(flow)

        logger.info(f"Starting browser authorization on port {self.port}")
        return flow.run_local_server(
            port=self.port,
            open_browser=True,
            timeout_seconds=int(self.timeout),
        )

    def _run_manual_flow(self, flow: InstalledAppFlow) -> Credentials:
        """Copy-paste flow for hosts without a browser (SSH, containers)."""
        flow.redirect_uri = f"http://localhost:{self.port}/"
        auth_url, _ = flow.authorization_url(prompt="consent", access_type="offline")
        print(f"Open this URL in a browser and authorize access:\n\n{auth_url}\n")
        response = input("Paste the full redirect URL (or just the code): ").strip()
        if response.startswith("http"):
            flow.fetch_token(authorization_response=response.replace("http://", "https://", 1))
        else:
            flow.fetch_token(code=response)
        return flow.credentials

    def _save_token(self, creds: Credentials) -> None:
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        self.token_file.write_text(creds.to_json(), encoding="utf-8")
        logger.debug(f"Token saved to {self.token_file}")
