"""Document text extraction client.

Turns uploaded bytes into searchable text:
- Images are not parsed; they get a fixed placeholder
- Plain-text formats are decoded locally
- Everything else is sent to LlamaParse (upload, poll job, fetch markdown)

When LLAMA_CLOUD_API_KEY is unset, remote parsing is disabled and parse()
returns an empty string for formats that would need it.
"""

import time
from collections.abc import Callable

import httpx

from researchhub.config import get_settings
from researchhub.logging import get_logger
from researchhub.storage.paths import get_file_extension

logger = get_logger(__name__)

IMAGE_PLACEHOLDER = "Image file - no text extraction"

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})
TEXT_EXTENSIONS = frozenset({".md", ".txt", ".csv", ".json"})
TEXT_MIME_TYPES = frozenset({"application/json"})

# LlamaParse job states
JOB_SUCCESS = "SUCCESS"
JOB_FAILED_STATES = frozenset({"ERROR", "CANCELED"})

DEFAULT_POLL_INTERVAL_S = 2.0
HTTP_TIMEOUT = 30.0


class ParserError(Exception):
    """Remote parsing failed or timed out."""

    def __init__(self, message: str, code: str = "E_PARSE_FAILED"):
        super().__init__(message)
        self.message = message
        self.code = code


def is_image(filename: str, mime_type: str | None = None) -> bool:
    if mime_type and mime_type.startswith("image/"):
        return True
    return get_file_extension(filename) in IMAGE_EXTENSIONS


def is_plain_text(filename: str, mime_type: str | None = None) -> bool:
    if mime_type and (mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES):
        return True
    return get_file_extension(filename) in TEXT_EXTENSIONS


class ParserClient:
    """Client for extracting text from uploaded documents.

    Args:
        api_key: LlamaParse API key. None disables remote parsing.
        base_url: LlamaParse API root.
        timeout_s: Overall budget for one remote parse, including polling.
        poll_interval_s: Delay between job status checks.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
        sleep: Sleep function used between polls.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.cloud.llamaindex.ai",
        timeout_s: float = 120.0,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._poll_interval_s = poll_interval_s
        self._transport = transport
        self._sleep = sleep

    @property
    def remote_enabled(self) -> bool:
        return bool(self._api_key)

    def parse(self, content: bytes, filename: str, mime_type: str | None = None) -> str:
        """Extract text from a document.

        Returns:
            Extracted text, the image placeholder, or "" when remote parsing
            is disabled.

        Raises:
            ParserError: If the remote parse fails or times out.
        """
        if is_image(filename, mime_type):
            return IMAGE_PLACEHOLDER

        if is_plain_text(filename, mime_type):
            return content.decode("utf-8", errors="replace")

        if not self.remote_enabled:
            return ""

        with self._client() as client:
            job_id = self._upload(client, content, filename, mime_type)
            self._wait_for_job(client, job_id)
            markdown = self._fetch_markdown(client, job_id)

        logger.info("document_parsed", filename=filename, job_id=job_id, chars=len(markdown))
        return markdown

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Accept": "application/json",
            },
            timeout=HTTP_TIMEOUT,
            transport=self._transport,
        )

    def _upload(
        self, client: httpx.Client, content: bytes, filename: str, mime_type: str | None
    ) -> str:
        files = {"file": (filename, content, mime_type or "application/octet-stream")}
        payload = self._request(client, "POST", "/api/parsing/upload", files=files)

        job_id = payload.get("id")
        if not job_id:
            raise ParserError("Parse upload returned no job id")
        return str(job_id)

    def _wait_for_job(self, client: httpx.Client, job_id: str) -> None:
        deadline = time.monotonic() + self._timeout_s

        while True:
            payload = self._request(client, "GET", f"/api/parsing/job/{job_id}")
            status = str(payload.get("status", "")).upper()

            if status == JOB_SUCCESS:
                return
            if status in JOB_FAILED_STATES:
                raise ParserError(f"Parse job {job_id} ended with status {status}")
            if time.monotonic() >= deadline:
                raise ParserError(f"Parse job {job_id} timed out", code="E_PARSE_TIMEOUT")

            self._sleep(self._poll_interval_s)

    def _fetch_markdown(self, client: httpx.Client, job_id: str) -> str:
        payload = self._request(client, "GET", f"/api/parsing/job/{job_id}/result/markdown")
        markdown = payload.get("markdown")
        if not isinstance(markdown, str):
            raise ParserError(f"Parse job {job_id} returned no markdown")
        return markdown

    def _request(self, client: httpx.Client, method: str, url: str, **kwargs) -> dict:
        try:
            response = client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ParserError(f"Parser request failed: {e}") from e

        if response.status_code != 200:
            raise ParserError(f"Parser returned {response.status_code}: {response.text[:200]}")

        try:
            payload = response.json()
        except ValueError as e:
            raise ParserError("Parser returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise ParserError("Parser returned unexpected payload")
        return payload


def get_parser_client() -> ParserClient:
    """Build a parser client from settings."""
    settings = get_settings()
    return ParserClient(
        api_key=settings.llama_cloud_api_key,
        base_url=settings.llama_cloud_base_url,
        timeout_s=settings.parser_timeout_s,
    )
