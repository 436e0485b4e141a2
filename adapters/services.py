"""
Google API service initialization.

Shared by all tools. SessionManager owns the one credentialed session and the
four service handles built from it. It is created by the process entry point
(server.py, cli.py) and passed down; tests build a fresh one per test.

All services use a 60-second timeout to prevent indefinite hangs
when Google APIs are slow or network connections stall.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import google_auth_httplib2
import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource
from googleapiclient.http import HttpRequest

from adapters.credentials import CredentialProvider
from logging_config import logger
from models import ClientNotInitializedError, InitializationError
from oauth_config import API_TIMEOUT

__all__ = [
    "ServiceName",
    "ServiceClientSet",
    "SessionManager",
    "build_service",
    "execute",
]


class ServiceName(Enum):
    """The four remote services, with their discovery name and version."""
    DOCS = ("docs", "v1")
    SHEETS = ("sheets", "v4")
    DRIVE = ("drive", "v3")
    SCRIPT = ("script", "v1")

    @property
    def api(self) -> str:
        return self.value[0]

    @property
    def version(self) -> str:
        return self.value[1]

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ServiceName.DOCS: "Google Docs",
    ServiceName.SHEETS: "Google Sheets",
    ServiceName.DRIVE: "Google Drive",
    ServiceName.SCRIPT: "Google Apps Script",
}


@dataclass(frozen=True)
class ServiceClientSet:
    """All four handles, built from the same session. Never partially populated."""
    session: Credentials
    docs: Resource
    sheets: Resource
    drive: Resource
    script: Resource

    def get(self, name: ServiceName) -> Resource:
        return getattr(self, name.name.lower())


ServiceBuilder = Callable[[ServiceName, Credentials], Resource]


def build_service(name: ServiceName, credentials: Credentials) -> Resource:
    """
    Build an authenticated service handle.

    httplib2.Http is not thread-safe and execute() runs in worker threads,
    so every request gets its own AuthorizedHttp instead of sharing one.
    """

    def build_request(http: Any, *args: Any, **kwargs: Any) -> HttpRequest:
        new_http = google_auth_httplib2.AuthorizedHttp(
            credentials, http=httplib2.Http(timeout=API_TIMEOUT)
        )
        return HttpRequest(new_http, *args, **kwargs)

    authorized_http = google_auth_httplib2.AuthorizedHttp(
        credentials, http=httplib2.Http(timeout=API_TIMEOUT)
    )
    return build(
        name.api,
        name.version,
        http=authorized_http,
        requestBuilder=build_request,
        cache_discovery=False,
    )


async def execute(request: Any) -> Any:
    """Run a prepared API request without blocking the event loop."""
    method = getattr(request, "methodId", None)
    if isinstance(method, str):
        logger.debug(f"API: {method}")
    return await asyncio.to_thread(request.execute)


def _consume_failure(task: asyncio.Task) -> None:
    # Every waiter may have been cancelled; the failure still counts as seen
    if not task.cancelled():
        task.exception()


class SessionManager:
    """
    Lazy, single-flight owner of the credentialed session and its service handles.

    First use triggers acquisition through the credential provider. Concurrent
    first callers await the same pending attempt. A failed attempt clears all
    state, so a later call starts over cleanly.
    """

    def __init__(
        self,
        provider: CredentialProvider,
        builder: ServiceBuilder = build_service,
    ) -> None:
        self._provider = provider
        self._builder = builder
        self._session: Credentials | None = None
        self._handles: dict[ServiceName, Resource] = {}
        self._pending: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Introspection (never triggers acquisition)
    # ------------------------------------------------------------------

    def current_session(self) -> Credentials | None:
        return self._session

    def client_set(self) -> ServiceClientSet | None:
        """The fully populated set, or None. Partial state is never exposed."""
        if self._session is None or not self._is_complete():
            return None
        return ServiceClientSet(
            session=self._session,
            **{name.name.lower(): self._handles[name] for name in ServiceName},
        )

    @property
    def acquiring(self) -> bool:
        return self._pending is not None

    def reset(self) -> None:
        """Drop the session and every handle. The next accessor call re-acquires."""
        if self._session is not None:
            logger.info("Discarding Google API session")
        self._session = None
        self._handles = {}

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    async def get_service(self, name: ServiceName) -> Resource:
        """
        Return the handle for one service, acquiring the session if needed.

        Raises:
            InitializationError: the credential provider failed
            ClientNotInitializedError: the handle is still missing afterwards
        """
        await self._ensure_initialized()
        handle = self._handles.get(name)
        if handle is None:
            raise ClientNotInitializedError(
                f"{name.label} client is not initialized. Authentication might have failed."
            )
        return handle

    async def get_docs_service(self) -> Resource:
        return await self.get_service(ServiceName.DOCS)

    async def get_sheets_service(self) -> Resource:
        return await self.get_service(ServiceName.SHEETS)

    async def get_drive_service(self) -> Resource:
        return await self.get_service(ServiceName.DRIVE)

    async def get_script_service(self) -> Resource:
        return await self.get_service(ServiceName.SCRIPT)

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def _is_complete(self) -> bool:
        return all(name in self._handles for name in ServiceName)

    async def _ensure_initialized(self) -> None:
        if self._session is not None and self._is_complete():
            return

        if self._session is None:
            if self._pending is None:
                self._pending = asyncio.create_task(self._acquire())
                self._pending.add_done_callback(_consume_failure)
            # shield: a cancelled caller must not cancel the attempt others await
            await asyncio.shield(self._pending)

        self._repair()

    async def _acquire(self) -> None:
        try:
            logger.info("Attempting to authorize Google API client...")
            session = await self._provider.acquire()
            handles = {name: self._builder(name, session) for name in ServiceName}
        except Exception as e:
            logger.error(f"FATAL: Failed to initialize Google API client: {e}")
            self.reset()
            raise InitializationError(
                "Google client initialization failed. Cannot start server tools."
            ) from e
        finally:
            self._pending = None

        self._session = session
        self._handles = handles
        logger.info("Google API client authorized successfully (Docs, Sheets, Drive, Apps Script)")

    def _repair(self) -> None:
        """Rebuild any individually missing handle from the existing session."""
        if self._session is None:
            return
        for name in ServiceName:
            if name in self._handles:
                continue
            logger.warning(f"Rebuilding missing {name.label} client from existing session")
            try:
                self._handles[name] = self._builder(name, self._session)
            except Exception as e:
                logger.error(f"FATAL: Could not rebuild {name.label} client: {e}")
                self.reset()
                raise InitializationError(
                    "Google Docs, Drive, Sheets, and Script clients could not be initialized."
                ) from e
