"""HTTP client for the analyzer API."""

import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

import aiofiles
import httpx

from ebook_analyzer.api.schemas import (
    FinalResultResponse,
    JobStatusResponse,
    StatusRequest,
    SubmitResponse,
)
from ebook_analyzer.errors import ValidationError

logger = logging.getLogger("ebook_analyzer.client.api_client")

FinalResult = FinalResultResponse


class AnalyzerApiClient:
    """Thin async wrapper over the submission, status and result endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the API client.

        Args:
            base_url: Server root, e.g. ``http://127.0.0.1:8000``.
            timeout: Request timeout in seconds.
            client: Optional preconfigured HTTP client (used by tests).
        """
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def __aenter__(self) -> "AnalyzerApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def submit_bytes(
        self,
        payload: bytes,
        filename: str,
        mime_type: Optional[str] = None,
    ) -> str:
        """Upload a document and return its job ID.

        Raises:
            ValidationError: If the server rejects the submission.
            httpx.HTTPError: On transport failures or unexpected statuses.
        """
        mime_type = mime_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        response = await self._client.post(
            "/api/analyze",
            files={"file": (filename, payload, mime_type)},
        )
        if response.status_code == httpx.codes.BAD_REQUEST:
            raise ValidationError(response.json().get("error", response.text))
        response.raise_for_status()

        job_id = SubmitResponse.model_validate(response.json()).job_id
        logger.info(f"Submitted {filename} as job {job_id}")
        return job_id

    async def submit(
        self,
        source: Union[Path, str, bytes],
        filename: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> str:
        """Upload a file path or raw bytes and return the job ID.

        Args:
            source: Path to a document, or its raw bytes.
            filename: Name to report to the server (required for bytes).
            mime_type: Declared content type; guessed from the name if omitted.
        """
        if isinstance(source, bytes):
            return await self.submit_bytes(source, filename or "upload.txt", mime_type)

        path = Path(source)
        async with aiofiles.open(path, "rb") as f:
            payload = await f.read()
        return await self.submit_bytes(payload, filename or path.name, mime_type)

    async def status(self, job_id: str) -> Optional[JobStatusResponse]:
        """Current record of a job, or None if this server instance does not know it."""
        response = await self._client.post(
            "/api/analyze/status",
            json=StatusRequest(job_id=job_id).model_dump(by_alias=True),
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return JobStatusResponse.model_validate(response.json())

    async def final_result(self, job_id: str) -> FinalResultResponse:
        """Terminal-result lookup; ``status == "processing"`` when not (yet) available."""
        response = await self._client.post(
            "/api/analyze/status",
            json=StatusRequest(job_id=job_id, final_result=True).model_dump(by_alias=True),
        )
        response.raise_for_status()
        return FinalResultResponse.model_validate(response.json())

    async def recent_jobs(self) -> list[FinalResultResponse]:
        """Terminal jobs retained by the server, oldest first."""
        response = await self._client.get("/api/jobs")
        response.raise_for_status()
        return [FinalResultResponse.model_validate(item) for item in response.json()]
