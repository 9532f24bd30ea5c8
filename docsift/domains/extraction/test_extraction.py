"""
Tests for extraction domain models and orchestrator.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from docsift.adapters.extraction_api import (
    ExtractionAPIClient,
    InMemoryExtractionService,
    SubmitResult,
    TableExtractionResult,
)
from docsift.config import InvalidTransitionError, ServiceError, Settings

from .contracts import ExtractionService, Orchestrator
from .models import (
    Document,
    DocumentKind,
    DocumentStatus,
    TableArtifact,
    TextArtifact,
)
from .orchestrator import ExtractionOrchestrator


@pytest.fixture
def settings() -> Settings:
    """Settings for testing."""
    return Settings(max_concurrent_table_fetches=4)


@pytest.fixture
def mock_service() -> AsyncMock:
    """Create a mock extraction service with two tables."""
    mock = AsyncMock()
    mock.submit.return_value = SubmitResult(document_id="report")
    mock.fetch_generated_text.return_value = "# Report\n\nBody"
    mock.request_table_extraction.return_value = TableExtractionResult(
        table_count=2,
        table_locations=["out/report_0.csv", "out/report_1.csv"],
    )
    tables = {
        "out/report_0.csv": "Item,Qty\nBolt,4",
        "out/report_1.csv": 'Name,Note\nA,"x, y"',
    }
    mock.fetch_table.side_effect = lambda doc_id, location: tables[location]
    return mock


@pytest.fixture
def orchestrator(mock_service: AsyncMock, settings: Settings) -> ExtractionOrchestrator:
    """Create an orchestrator with the mocked service."""
    return ExtractionOrchestrator(mock_service, settings)


# --- Model Tests ---


@pytest.mark.parametrize(
    ("name", "content_type", "expected"),
    [
        ("scan.png", "image/png", DocumentKind.IMAGE),
        ("scan.jpg", None, DocumentKind.IMAGE),
        ("report.pdf", "application/pdf", DocumentKind.PDF),
        ("unknown.bin", None, DocumentKind.PDF),
    ],
)
def test_document_kind_detect(
    name: str, content_type: str | None, expected: DocumentKind
) -> None:
    """Test kind detection by MIME type."""
    assert DocumentKind.detect(name, content_type) == expected


def test_document_start() -> None:
    """Test a new document is processing with no artifacts."""
    doc = Document.start("report.pdf")
    assert doc.status == DocumentStatus.PROCESSING
    assert doc.text is None
    assert doc.tables == []
    assert doc.id
    assert doc.id != Document.start("report.pdf").id


def test_document_transitions_are_terminal() -> None:
    """Test completed and error cannot transition again."""
    doc = Document.start("a.pdf")
    doc.complete("a", TextArtifact(content="x", filename="a.md"), [])
    assert doc.status == DocumentStatus.COMPLETED
    with pytest.raises(InvalidTransitionError):
        doc.fail("late")

    failed = Document.start("b.pdf")
    failed.fail("Upload failed")
    assert failed.error == "Upload failed"
    with pytest.raises(InvalidTransitionError):
        failed.complete("b", TextArtifact(content="x", filename="b.md"), [])


def test_text_artifact_effective_content() -> None:
    """Test override wins, including an empty override."""
    text = TextArtifact(content="original", filename="a.md")
    assert text.effective_content == "original"
    text.edited_content = ""
    assert text.effective_content == ""
    assert text.is_edited


def test_artifact_originals_are_frozen() -> None:
    """Test original values cannot be reassigned."""
    text = TextArtifact(content="original", filename="a.md")
    with pytest.raises(ValidationError):
        text.content = "changed"  # type: ignore[misc]

    table = TableArtifact(id="table-0", index=0, filename="t.csv", headers=["a"])
    with pytest.raises(ValidationError):
        table.headers = ["b"]  # type: ignore[misc]


def test_table_artifact_rectangular() -> None:
    """Test ragged rows are kept and reported."""
    table = TableArtifact(
        id="table-0", index=0, filename="t.csv", headers=["a", "b"], rows=[["1"], ["1", "2"]]
    )
    assert table.rows == [["1"], ["1", "2"]]
    assert table.is_rectangular is False


def test_services_satisfy_contract() -> None:
    """Test both service implementations match the protocol."""
    assert isinstance(InMemoryExtractionService(), ExtractionService)
    assert isinstance(ExtractionAPIClient(Settings()), ExtractionService)
    assert isinstance(ExtractionOrchestrator(InMemoryExtractionService()), Orchestrator)


# --- Orchestrator Tests ---


async def test_process_completes_with_tables(
    orchestrator: ExtractionOrchestrator, mock_service: AsyncMock
) -> None:
    """Test the full workflow produces text and parsed tables."""
    doc = await orchestrator.process(b"%PDF-1.4", "report.pdf", "application/pdf")

    assert doc.status == DocumentStatus.COMPLETED
    assert doc.remote_id == "report"
    assert doc.text is not None
    assert doc.text.content == "# Report\n\nBody"
    assert doc.text.filename == "report.md"
    assert [t.id for t in doc.tables] == ["table-0", "table-1"]
    assert doc.tables[0].filename == "report_0.csv"
    assert doc.tables[0].headers == ["Item", "Qty"]
    assert doc.tables[1].rows == [["A", "x, y"]]

    mock_service.submit.assert_awaited_once_with(b"%PDF-1.4", "report.pdf", "application/pdf")
    mock_service.fetch_generated_text.assert_awaited_once_with("report")
    mock_service.request_table_extraction.assert_awaited_once_with("report")


async def test_submit_failure_is_fatal(
    orchestrator: ExtractionOrchestrator, mock_service: AsyncMock
) -> None:
    """Test submit failure stops the workflow with an error document."""
    mock_service.submit.side_effect = ServiceError("Unsupported file type")

    doc = await orchestrator.process(b"x", "notes.txt")

    assert doc.status == DocumentStatus.ERROR
    assert doc.error == "Unsupported file type"
    assert doc.text is None
    assert doc.tables == []
    mock_service.fetch_generated_text.assert_not_awaited()
    mock_service.request_table_extraction.assert_not_awaited()


async def test_text_failure_is_fatal_even_with_tables(
    orchestrator: ExtractionOrchestrator, mock_service: AsyncMock
) -> None:
    """Test text fetch failure gives error regardless of table availability."""
    mock_service.fetch_generated_text.side_effect = ServiceError("Download failed")

    doc = await orchestrator.process(b"x", "report.pdf")

    assert doc.status == DocumentStatus.ERROR
    assert doc.error == "Download failed"
    assert doc.text is None
    assert doc.tables == []
    mock_service.request_table_extraction.assert_not_awaited()


async def test_programming_error_propagates(
    orchestrator: ExtractionOrchestrator, mock_service: AsyncMock
) -> None:
    """Test errors that are not service failures are raised, not recorded."""
    mock_service.submit.side_effect = TypeError("bad argument")

    with pytest.raises(TypeError, match="bad argument"):
        await orchestrator.process(b"x", "report.pdf")

    mock_service.fetch_generated_text.assert_not_awaited()


async def test_table_extraction_failure_is_optional(
    orchestrator: ExtractionOrchestrator, mock_service: AsyncMock
) -> None:
    """Test table phase failure still completes with zero tables."""
    mock_service.request_table_extraction.side_effect = ServiceError("Table extraction failed")

    doc = await orchestrator.process(b"x", "report.pdf")

    assert doc.status == DocumentStatus.COMPLETED
    assert doc.text is not None
    assert doc.tables == []
    mock_service.fetch_table.assert_not_awaited()


async def test_single_table_failure_drops_only_that_table(
    orchestrator: ExtractionOrchestrator, mock_service: AsyncMock
) -> None:
    """Test a failed table download keeps the other tables and their ids."""
    mock_service.request_table_extraction.return_value = TableExtractionResult(
        table_count=3, table_locations=["t0.csv", "t1.csv", "t2.csv"]
    )

    async def fetch(doc_id: str, location: str) -> str:
        if location == "t1.csv":
            raise ServiceError("CSV download failed")
        return f"h\n{location}"

    mock_service.fetch_table.side_effect = fetch

    doc = await orchestrator.process(b"x", "report.pdf")

    assert doc.status == DocumentStatus.COMPLETED
    assert [t.id for t in doc.tables] == ["table-0", "table-2"]
    assert [t.index for t in doc.tables] == [0, 2]
    assert doc.tables[1].rows == [["t2.csv"]]


async def test_tables_keep_request_order(
    orchestrator: ExtractionOrchestrator, mock_service: AsyncMock
) -> None:
    """Test output follows request order when later tables finish first."""
    mock_service.request_table_extraction.return_value = TableExtractionResult(
        table_count=3, table_locations=["t0.csv", "t1.csv", "t2.csv"]
    )
    finished: list[str] = []
    gates = {name: asyncio.Event() for name in ("t0.csv", "t1.csv", "t2.csv")}

    async def fetch(doc_id: str, location: str) -> str:
        await gates[location].wait()
        finished.append(location)
        # release the next table in reverse order
        if location == "t2.csv":
            gates["t1.csv"].set()
        elif location == "t1.csv":
            gates["t0.csv"].set()
        return f"name\n{location}"

    mock_service.fetch_table.side_effect = fetch
    gates["t2.csv"].set()

    doc = await orchestrator.process(b"x", "report.pdf")

    assert finished == ["t2.csv", "t1.csv", "t0.csv"]
    assert [t.id for t in doc.tables] == ["table-0", "table-1", "table-2"]
    assert [t.rows[0][0] for t in doc.tables] == ["t0.csv", "t1.csv", "t2.csv"]


async def test_no_tables_reported(
    orchestrator: ExtractionOrchestrator, mock_service: AsyncMock
) -> None:
    """Test zero locations completes without table downloads."""
    mock_service.request_table_extraction.return_value = TableExtractionResult()

    doc = await orchestrator.process(b"x", "report.pdf")

    assert doc.status == DocumentStatus.COMPLETED
    assert doc.tables == []
    mock_service.fetch_table.assert_not_awaited()


async def test_concurrency_limit(mock_service: AsyncMock) -> None:
    """Test table fetches never exceed the configured concurrency."""
    locations = [f"t{i}.csv" for i in range(6)]
    mock_service.request_table_extraction.return_value = TableExtractionResult(
        table_count=6, table_locations=locations
    )
    active = 0
    peak = 0

    async def fetch(doc_id: str, location: str) -> str:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0)
        active -= 1
        return "a\n1"

    mock_service.fetch_table.side_effect = fetch
    orchestrator = ExtractionOrchestrator(
        mock_service, Settings(max_concurrent_table_fetches=2)
    )

    doc = await orchestrator.process(b"x", "report.pdf")

    assert doc.table_count == 6
    assert peak == 2


async def test_run_rejects_terminal_document(orchestrator: ExtractionOrchestrator) -> None:
    """Test a failed document is never resurrected."""
    doc = Document.start("a.pdf")
    doc.fail("Upload failed")
    with pytest.raises(InvalidTransitionError):
        await orchestrator.run(doc, b"x")


async def test_process_path(tmp_path: Path) -> None:
    """Test processing a local file with the in-memory service."""
    path = tmp_path / "scan.png"
    path.write_bytes(b"\x89PNG")
    service = InMemoryExtractionService(tables={"scan_0.csv": "a,b\n1,2"})

    doc = await ExtractionOrchestrator(service, Settings()).process_path(path)

    assert doc.kind == DocumentKind.IMAGE
    assert doc.text is not None
    assert doc.text.content == "# scan.png\n"
    assert doc.tables[0].headers == ["a", "b"]


async def test_process_path_guesses_content_type(tmp_path: Path) -> None:
    """Test the MIME type is derived from the file name."""
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4")
    service = AsyncMock()
    service.submit.return_value = SubmitResult(document_id="report", filename="report.pdf")
    service.fetch_generated_text.return_value = "# Report"
    service.request_table_extraction.return_value = TableExtractionResult(
        table_count=0, table_locations=[]
    )

    doc = await ExtractionOrchestrator(service, Settings()).process_path(path)

    assert doc.status == DocumentStatus.COMPLETED
    service.submit.assert_awaited_once_with(b"%PDF-1.4", "report.pdf", "application/pdf")
