"""
Shared pytest fixtures for scrivener tests.

No test talks to Google. Service handles are MagicMocks handed out by a
SessionManager whose credential provider and service builder are stubs,
so each test gets a fresh session with no state shared across tests.
"""

from unittest.mock import MagicMock

import pytest

from adapters.services import ServiceName, SessionManager
from dispatch import Dispatcher
from models import DocData, DocTab
from registry import ToolRegistry
from tools import build_registry
from tests.helpers import StubCredentialProvider, paragraph


@pytest.fixture
def mock_services() -> dict[ServiceName, MagicMock]:
    """One MagicMock per Google service, named for readable failures."""
    return {name: MagicMock(name=f"{name.api}-service") for name in ServiceName}


@pytest.fixture
def provider() -> StubCredentialProvider:
    return StubCredentialProvider()


@pytest.fixture
def sessions(
    provider: StubCredentialProvider,
    mock_services: dict[ServiceName, MagicMock],
) -> SessionManager:
    """SessionManager whose builder hands out the mock services."""
    return SessionManager(provider, builder=lambda name, session: mock_services[name])


@pytest.fixture
def registry() -> ToolRegistry:
    return build_registry()


@pytest.fixture
def dispatcher(registry: ToolRegistry, sessions: SessionManager) -> Dispatcher:
    return Dispatcher(registry, sessions)


@pytest.fixture
def docs_service(mock_services: dict[ServiceName, MagicMock]) -> MagicMock:
    return mock_services[ServiceName.DOCS]


@pytest.fixture
def sheets_service(mock_services: dict[ServiceName, MagicMock]) -> MagicMock:
    return mock_services[ServiceName.SHEETS]


@pytest.fixture
def drive_service(mock_services: dict[ServiceName, MagicMock]) -> MagicMock:
    return mock_services[ServiceName.DRIVE]


@pytest.fixture
def script_service(mock_services: dict[ServiceName, MagicMock]) -> MagicMock:
    return mock_services[ServiceName.SCRIPT]


@pytest.fixture
def simple_doc() -> DocData:
    """
    Single-tab document:

        Title            (HEADING_1, 1..7)
        Hello world      (7..19)
        Second line      (19..31)
    """
    body = {
        "content": [
            {"startIndex": 0, "endIndex": 1, "sectionBreak": {}},
            paragraph("Title\n", 1, style="HEADING_1"),
            paragraph("Hello world\n", 7),
            paragraph("Second line\n", 19),
        ]
    }
    return DocData(
        title="Test Doc",
        document_id="doc-1",
        tabs=[DocTab(title="Tab 1", tab_id="t.0", index=0, body=body)],
    )
