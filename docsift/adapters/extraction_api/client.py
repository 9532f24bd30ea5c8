"""
Extraction API Client - Async HTTP client for the document extraction service.

This is the ONLY place that talks to the extraction service over HTTP.

Features:
- Async operations with a shared connection pool
- Automatic retries with exponential backoff on transport failures
- Server ``detail`` messages surfaced verbatim
- Transform responses resolved into a tagged success/failure result
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from docsift.config import ServiceError, ServiceUnavailableError, Settings, get_settings
from docsift.config.errors import ErrorCode
from docsift.domains.tabular import parse_table

from .models import (
    SubmitResult,
    TableExtractionResponse,
    TableExtractionResult,
    TransformFailed,
    TransformOutcome,
    TransformRequest,
    TransformSucceeded,
    UploadResponse,
)

logger = logging.getLogger(__name__)

__all__ = ["ExtractionAPIClient", "decode_transform_response", "table_filename"]

# Keys that may carry a reshaped table as raw CSV text
_CSV_KEYS = ("csv_data", "tidy_csv", "data")


class ExtractionAPIClient:
    """
    Extraction service client.

    Example:
        >>> async with ExtractionAPIClient() as client:
        ...     submitted = await client.submit(data, "invoice.pdf")
        ...     markdown = await client.fetch_generated_text(submitted.document_id)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            settings: Service configuration. Uses cached settings if None.
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.settings = settings or get_settings()
        self.base_url = self.settings.api_base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ExtractionAPIClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.settings.request_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        url: str,
        failure_message: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying transport failures and mapping error statuses."""
        client = self._get_client()

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(ServiceUnavailableError),
            stop=stop_after_attempt(self.settings.max_retries + 1),
            wait=wait_exponential(multiplier=self.settings.retry_backoff_seconds, max=10),
            reraise=True,
        ):
            with attempt:
                try:
                    response = await client.request(method, url, **kwargs)
                except httpx.TransportError as e:
                    logger.warning("%s %s failed: %s", method, url, e)
                    raise ServiceUnavailableError(
                        f"{failure_message}: {e}", {"url": url}
                    ) from e

        if response.is_error:
            raise ServiceError(
                _error_detail(response) or failure_message,
                {"url": url, "status_code": response.status_code},
            )
        return response

    async def submit(
        self,
        data: bytes,
        name: str,
        content_type: str | None = None,
    ) -> SubmitResult:
        """
        Upload a file for extraction.

        The service processes synchronously and answers when done.

        Args:
            data: File bytes
            name: Original filename
            content_type: MIME type, if known

        Returns:
            SubmitResult with the service's document identifier

        Raises:
            ServiceError: Upload rejected or response unusable
        """
        logger.info("Uploading file: %s (%d bytes)", name, len(data))
        file_tuple = (name, data, content_type or "application/octet-stream")
        response = await self._request(
            "POST", "/upload", "Upload failed", files={"file": file_tuple}
        )

        body = _json_body(response, "Upload failed")
        try:
            upload = UploadResponse.model_validate(body)
        except ValidationError as e:
            raise ServiceError(
                "Upload failed: malformed response",
                {"errors": e.errors()},
                code=ErrorCode.SERVICE_INVALID_RESPONSE,
            ) from e

        logger.debug("Upload response: %s", upload)
        return SubmitResult(
            document_id=upload.merged_path,
            filename=upload.filename,
            processing_seconds=upload.processing_time_seconds,
        )

    async def fetch_generated_text(self, document_id: str) -> str:
        """Download the generated markdown for a document."""
        logger.info("Downloading markdown for: %s", document_id)
        response = await self._request(
            "GET", f"/download/{quote(document_id, safe='')}", "Download failed"
        )
        return response.text

    async def request_table_extraction(self, document_id: str) -> TableExtractionResult:
        """
        Ask the service to extract tables from a processed document.

        Returns:
            Table count and one location per extracted table
        """
        logger.info("Extracting tables for: %s", document_id)
        response = await self._request(
            "POST",
            "/filter_tables",
            "Table extraction failed",
            params=self._document_params(document_id),
        )

        body = _json_body(response, "Table extraction failed")
        try:
            extraction = TableExtractionResponse.model_validate(body)
        except ValidationError as e:
            raise ServiceError(
                "Table extraction failed: malformed response",
                {"errors": e.errors()},
                code=ErrorCode.SERVICE_INVALID_RESPONSE,
            ) from e

        logger.info(
            "Tables extracted for %s: %d (%d files)",
            document_id,
            extraction.tables_count,
            len(extraction.excel_files),
        )
        return TableExtractionResult(
            table_count=extraction.tables_count,
            table_locations=extraction.excel_files,
        )

    async def fetch_table(self, document_id: str, location: str) -> str:
        """Download one extracted table as raw CSV text."""
        filename = table_filename(location)
        logger.debug("Downloading table: %s", filename)
        params = self._document_params(document_id)
        params["filename"] = filename
        response = await self._request(
            "GET", "/download_table", "CSV download failed", params=params
        )
        return response.text

    async def transform_to_tidy(self, csv_data: str, table_index: int) -> TransformOutcome:
        """
        Reshape a table into tidy form.

        Never raises for service failures; they come back as TransformFailed.

        Args:
            csv_data: Current table as comma-separated text
            table_index: Position of the table in the extraction order

        Returns:
            TransformSucceeded or TransformFailed
        """
        payload = TransformRequest(csv_data=csv_data, table_index=table_index)
        client = self._get_client()

        try:
            response = await client.post("/transform2tidy", json=payload.model_dump())
        except httpx.TransportError as e:
            logger.warning("Transform request failed: %s", e)
            return TransformFailed(error=f"Transform failed: {e}")

        if response.is_error:
            return TransformFailed(error=f"Transform failed: {response.reason_phrase}")

        try:
            body = response.json()
        except ValueError:
            body = response.text
        return decode_transform_response(body)

    def _document_params(self, document_id: str) -> dict[str, str]:
        return {
            "document": document_id,
            "store_in_filters": str(self.settings.store_in_filters).lower(),
        }

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


def table_filename(location: str) -> str:
    """Last path segment of a table location, either separator."""
    return location.replace("\\", "/").rsplit("/", 1)[-1] or location


def decode_transform_response(body: Any) -> TransformOutcome:
    """
    Resolve a loosely shaped transform response into a tagged result.

    Accepts ``{"rows": [[...]], "headers": [...]?}``, a CSV string under
    one of ``csv_data``/``tidy_csv``/``data``, or a bare CSV string.
    """
    if isinstance(body, str):
        parsed = parse_table(body)
        return TransformSucceeded(headers=parsed.headers, rows=parsed.rows)

    if not isinstance(body, dict):
        return TransformFailed(error="Transform failed: unrecognized response")

    rows = body.get("rows")
    if isinstance(rows, list) and all(isinstance(row, list) for row in rows):
        headers = body.get("headers")
        return TransformSucceeded(
            headers=[_cell(h) for h in headers] if isinstance(headers, list) else None,
            rows=[[_cell(c) for c in row] for row in rows],
        )

    for key in _CSV_KEYS:
        value = body.get(key)
        if isinstance(value, str):
            parsed = parse_table(value)
            return TransformSucceeded(headers=parsed.headers, rows=parsed.rows)

    message = body.get("detail") or body.get("error")
    if message:
        return TransformFailed(error=f"Transform failed: {message}")
    return TransformFailed(error="Transform failed: unrecognized response")


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def _json_body(response: httpx.Response, failure_message: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ServiceError(
            f"{failure_message}: response is not JSON",
            code=ErrorCode.SERVICE_INVALID_RESPONSE,
        ) from e


def _error_detail(response: httpx.Response) -> str | None:
    """The ``detail`` field of an error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("detail"):
        detail = body["detail"]
        return detail if isinstance(detail, str) else str(detail)
    return None
