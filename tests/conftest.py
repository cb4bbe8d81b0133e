import os
import pytest
import sys
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

# Run Qt headless when no display is available
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add src to sys.path so we can import nodeset_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from nodeset_toolkit.importer import ImportConfig, ImportSession, MemoryStore, RawFile

BASE_URI = "http://opcfoundation.org/UA/"

ALIASES = """
  <Aliases>
    <Alias Alias="Organizes">i=35</Alias>
    <Alias Alias="HasComponent">i=47</Alias>
    <Alias Alias="HasTypeDefinition">i=40</Alias>
  </Aliases>"""


def default_nodes(prefix: str = "Boiler") -> str:
    """Two nodes in namespace 1: an object and a child variable."""
    return f"""
  <UAObject NodeId="ns=1;i=5001" BrowseName="1:{prefix}" ParentNodeId="i=85">
    <DisplayName>{prefix} #1</DisplayName>
    <References>
      <Reference ReferenceType="Organizes" IsForward="false">i=85</Reference>
      <Reference ReferenceType="HasComponent">ns=1;i=5002</Reference>
    </References>
  </UAObject>
  <UAVariable NodeId="ns=1;i=5002" BrowseName="1:Temperature" ParentNodeId="ns=1;i=5001" DataType="Double">
    <References>
      <Reference ReferenceType="HasTypeDefinition">i=63</Reference>
    </References>
  </UAVariable>"""


def nodeset_xml(
    uris: Sequence[str] = ("urn:test:boiler",),
    required: Iterable[str] = (),
    nodes: Optional[str] = None,
    model_uri: Optional[str] = None,
    version: str = "1.0.0",
) -> str:
    """Build a small but realistic UANodeSet document."""
    uri_lines = "".join(f"\n    <Uri>{uri}</Uri>" for uri in uris)
    model_uri = model_uri or (uris[0] if uris else "urn:test:empty")
    required_lines = "".join(
        f'\n      <RequiredModel ModelUri="{uri}" Version="1.0.0" />' for uri in required
    )
    body = default_nodes() if nodes is None else nodes
    return f"""<?xml version="1.0" encoding="utf-8"?>
<UANodeSet xmlns="http://opcfoundation.org/UA/2011/03/UANodeSet.xsd">
  <NamespaceUris>{uri_lines}
  </NamespaceUris>
  <Models>
    <Model ModelUri="{model_uri}" Version="{version}" PublicationDate="2024-01-15T00:00:00Z">
      <RequiredModel ModelUri="{BASE_URI}" Version="1.05.02" />{required_lines}
    </Model>
  </Models>{ALIASES}{body}
</UANodeSet>
"""


def nodeset_file(name: str, **kwargs) -> RawFile:
    return RawFile.from_text(name, nodeset_xml(**kwargs))


class RecordingScheduler:
    """Stands in for a timer: records (delay, callback) and runs them on demand."""

    def __init__(self) -> None:
        self.calls: List[Tuple[float, Callable[[], None]]] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> None:
        self.calls.append((delay, callback))

    def run_all(self) -> None:
        pending, self.calls = self.calls, []
        for _, callback in pending:
            callback()


# Common test fixtures
@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def make_session(scheduler, store):
    """Factory for sessions wired to the recording scheduler and memory store."""
    def _make(config: Optional[ImportConfig] = None, **kwargs) -> ImportSession:
        kwargs.setdefault("store", store)
        kwargs.setdefault("scheduler", scheduler)
        return ImportSession(config or ImportConfig(), **kwargs)
    return _make


@pytest.fixture
def session(make_session) -> ImportSession:
    return make_session()
