"""
Paper Repository Client
=======================

Fetch paper metadata from the Semantic Scholar Graph API.

The network builder only depends on the PaperRepository protocol, so any
object with ``fetch_by_identifier`` can stand in for the HTTP client.
"""

import logging
import re
import threading
import time
from typing import Any, Dict, List, Optional, Protocol, Tuple
from urllib.parse import quote

import requests

from citation_explorer.config import ExplorerConfig
from citation_explorer.exceptions import (
    MalformedRecordError,
    NotFoundError,
    TransportError,
)
from citation_explorer.models import PaperRecord

logger = logging.getLogger(__name__)

# Fields requested for a single paper, including the ids of its neighbours
PAPER_FIELDS = (
    "paperId,externalIds,title,abstract,year,venue,authors,citationCount,"
    "references.paperId,citations.paperId"
)

# Search does not support nested reference/citation fields
SEARCH_FIELDS = "paperId,externalIds,title,abstract,year,venue,authors,citationCount"

DOI_PATTERN = re.compile(r"^10\.\d{4,9}/\S+$")
ARXIV_PATTERN = re.compile(r"^(\d{4}\.\d{4,5}|[a-z\-]+(\.[A-Z]{2})?/\d{7})(v\d+)?$")


class PaperRepository(Protocol):
    """Source of paper records consumed by the network builder."""

    def fetch_by_identifier(self, identifier: str) -> PaperRecord: ...


class RateLimiter:
    """Thread-safe minimum interval between API calls."""

    def __init__(self) -> None:
        self.last_call: Dict[str, float] = {}
        self._lock = threading.Lock()

    def wait(self, api_name: str, min_interval: float) -> None:
        """Wait if needed to respect rate limits."""
        if min_interval <= 0:
            return
        with self._lock:
            now = time.time()
            if api_name in self.last_call:
                elapsed = now - self.last_call[api_name]
                if elapsed < min_interval:
                    time.sleep(min_interval - elapsed)
            self.last_call[api_name] = time.time()


def normalize_identifier(identifier: str) -> str:
    """Prefix bare DOIs and arXiv ids the way the Graph API expects them."""
    identifier = identifier.strip()
    if ":" in identifier.split("/", 1)[0]:
        return identifier  # already prefixed, e.g. DOI:10.1/x or CorpusId:123
    if DOI_PATTERN.match(identifier):
        return f"DOI:{identifier}"
    if ARXIV_PATTERN.match(identifier):
        return f"ARXIV:{identifier}"
    return identifier


def _collect_ids(data: Dict[str, Any], key: str, identifier: str) -> Tuple[str, ...]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise MalformedRecordError(identifier, f"{key} is not a list")
    ids = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        paper_id = entry.get("paperId")
        # Unresolved references come back with a null paperId
        if paper_id:
            ids.append(str(paper_id))
    return tuple(ids)


def _optional_text(data: Dict[str, Any], key: str, identifier: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRecordError(identifier, f"{key} is not a string")
    return value


def parse_paper(data: Any, identifier: str) -> PaperRecord:
    """Convert a Graph API paper payload into a PaperRecord.

    Args:
        data: Decoded JSON object for one paper.
        identifier: Identifier that was requested, used in error messages.

    Returns:
        The parsed record.

    Raises:
        MalformedRecordError: If a required field is missing, or any field
            has the wrong type.
    """
    if not isinstance(data, dict):
        raise MalformedRecordError(identifier, "payload is not an object")

    paper_id = data.get("paperId")
    if not paper_id or not isinstance(paper_id, str):
        raise MalformedRecordError(identifier, "missing paperId")

    title = _optional_text(data, "title", identifier).strip()
    if not title:
        raise MalformedRecordError(identifier, "missing title")

    raw_year = data.get("year")
    if raw_year is None or isinstance(raw_year, bool):
        raise MalformedRecordError(identifier, "missing publication year")
    try:
        year = int(raw_year)
    except (TypeError, ValueError):
        raise MalformedRecordError(identifier, f"invalid publication year {raw_year!r}")

    citations = _collect_ids(data, "citations", identifier)
    raw_count = data.get("citationCount")
    if raw_count is None:
        citation_count = len(citations)
    else:
        try:
            citation_count = int(raw_count)
        except (TypeError, ValueError):
            raise MalformedRecordError(identifier, f"invalid citation count {raw_count!r}")

    raw_authors = data.get("authors") or []
    if not isinstance(raw_authors, list):
        raise MalformedRecordError(identifier, "authors is not a list")
    authors = tuple(
        str(author["name"])
        for author in raw_authors
        if isinstance(author, dict) and author.get("name")
    )

    external_ids = data.get("externalIds") or {}
    if not isinstance(external_ids, dict):
        raise MalformedRecordError(identifier, "externalIds is not an object")
    doi = external_ids.get("DOI")

    return PaperRecord(
        identifier=paper_id,
        title=title,
        year=year,
        abstract=_optional_text(data, "abstract", identifier),
        citation_count=citation_count,
        references=_collect_ids(data, "references", identifier),
        cited_by=citations,
        authors=authors,
        venue=_optional_text(data, "venue", identifier),
        doi=str(doi) if doi else None,
    )


class SemanticScholarClient:
    """
    Paper repository backed by the Semantic Scholar Graph API.

    No caching is done here; callers are expected to avoid repeated fetches.
    """

    API_NAME = "s2"

    def __init__(
        self,
        config: Optional[ExplorerConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Client settings. Defaults to ExplorerConfig().
            session: HTTP session to use; one is created if omitted.
        """
        self.config = config or ExplorerConfig()
        self.base_url = self.config.api_base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if self.config.api_key:
            self.session.headers["x-api-key"] = self.config.api_key
        self.rate_limiter = RateLimiter()

    def __enter__(self) -> "SemanticScholarClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def fetch_by_identifier(self, identifier: str) -> PaperRecord:
        """
        Fetch one paper with the ids of its references and citers.

        Raises:
            NotFoundError: The API answered 404.
            TransportError: Any other failure to get a 200 response.
            MalformedRecordError: The response lacks required fields.
        """
        path = quote(normalize_identifier(identifier), safe=":/")
        data = self._get_json(f"{self.base_url}/paper/{path}", {"fields": PAPER_FIELDS}, identifier)
        return parse_paper(data, identifier)

    def search(self, query: str, limit: int = 10) -> List[PaperRecord]:
        """Keyword search; hits with missing required fields are skipped."""
        label = f"search:{query}"
        data = self._get_json(
            f"{self.base_url}/paper/search",
            {"query": query, "limit": limit, "fields": SEARCH_FIELDS},
            label,
        )
        if not isinstance(data, dict):
            raise MalformedRecordError(label, "search response is not an object")

        hits = data.get("data") or []
        if not isinstance(hits, list):
            raise MalformedRecordError(label, "search data is not a list")

        papers = []
        for item in hits:
            try:
                papers.append(parse_paper(item, label))
            except MalformedRecordError as e:
                logger.debug("Skipping search hit: %s", e)
        return papers

    def _get_json(self, url: str, params: Dict[str, Any], identifier: str) -> Any:
        response = None
        for attempt in range(self.config.max_retries + 1):
            self.rate_limiter.wait(self.API_NAME, self.config.rate_limit_seconds)
            logger.debug("GET %s params=%s", url, params)
            try:
                response = self.session.get(url, params=params, timeout=self.config.timeout)
            except requests.exceptions.RequestException as e:
                raise TransportError(identifier, f"Request error: {e}") from e

            if response.status_code == 429 and attempt < self.config.max_retries:
                delay = self._retry_delay(response, attempt)
                logger.info("Rate limited by S2 API, retrying %s in %.1fs", identifier, delay)
                time.sleep(delay)
                continue
            break

        if response.status_code == 404:
            raise NotFoundError(identifier)
        if response.status_code != 200:
            raise TransportError(
                identifier,
                f"API error {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedRecordError(identifier, f"invalid JSON: {e}") from e

    def _retry_delay(self, response: requests.Response, attempt: int) -> float:
        retry_after = response.headers.get("Retry-After", "")
        try:
            return max(float(retry_after), 0.0)
        except ValueError:
            return self.config.retry_backoff * (attempt + 1)
