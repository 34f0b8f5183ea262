"""Base class shared by all job-board source clients.

Provides HTTP request handling with error mapping onto the AdapterError
hierarchy, and the SearchHints passed to sources for server-side
pre-filtering.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from vacancy_bot.domain.models import Filter, RawPosting, Source
from vacancy_bot.logging import get_logger

from .exceptions import (
    AdapterConfigurationError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
)

logger = get_logger(__name__, component="adapter")


@dataclass(frozen=True)
class SearchHints:
    """Best-effort server-side filtering hints.

    Sources may ignore any of these; the matching engine re-applies the full
    filter to whatever comes back.
    """

    min_salary: Optional[int] = None
    max_salary: Optional[int] = None
    city: Optional[str] = None
    remote_only: bool = False

    @classmethod
    def from_filter(cls, filter_: Filter) -> "SearchHints":
        return cls(
            min_salary=filter_.min_salary,
            max_salary=filter_.max_salary,
            city=filter_.city or None,
            remote_only=filter_.remote_only,
        )


class SourceClient(ABC):
    """Base class for job-board clients.

    Subclasses implement search() for one keyword. Calls are synchronous and
    bounded by ``timeout``; nothing is retried here.

    Attributes:
        source: Source tag this client serves
        timeout: HTTP request timeout in seconds
        user_agent: User-Agent header for HTTP requests
        per_page: Page size requested from the API
    """

    source: Source

    def __init__(
        self,
        timeout: int = 30,
        user_agent: str = "VacancyBot/3.0",
        per_page: int = 50,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize client.

        Args:
            timeout: HTTP request timeout in seconds (5-300)
            user_agent: User-Agent header for requests
            per_page: Results requested per call
            session: Pre-built requests session (tests inject mocks here)

        Raises:
            AdapterConfigurationError: If timeout is out of range or user_agent is empty
        """
        if not 5 <= timeout <= 300:
            raise AdapterConfigurationError(
                f"Timeout must be between 5 and 300 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise AdapterConfigurationError("user_agent cannot be empty")

        self.timeout = timeout
        self.user_agent = user_agent.strip()
        self.per_page = per_page

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    @abstractmethod
    def search(self, keyword: str, hints: SearchHints, days_back: int) -> List[RawPosting]:
        """Query the source for one keyword.

        Args:
            keyword: Search text; empty string means an unrestricted search
            hints: Server-side pre-filtering hints
            days_back: Only postings published within this many days

        Returns:
            Raw postings; records the client cannot map are skipped

        Raises:
            AdapterError: On HTTP, timeout or response-shape failures
        """

    def close(self) -> None:
        self._session.close()

    def _make_request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises:
            AdapterHTTPError: On 4xx/5xx or connection failure
            AdapterTimeoutError: On request timeout
            AdapterResponseError: On a body that is not valid JSON
        """
        try:
            logger.debug(
                f"HTTP GET {url}",
                extra={
                    "event": "adapter.fetch.request",
                    "source": self.source.value,
                    "url": url,
                    "timeout": self.timeout,
                },
            )

            response = self._session.get(
                url, params=params, headers=headers, timeout=self.timeout
            )

            if response.status_code >= 400:
                is_retryable = response.status_code >= 500
                logger.log(
                    logging.WARNING if is_retryable else logging.ERROR,
                    f"HTTP {response.status_code} error from {url}",
                    extra={
                        "event": "adapter.fetch.retryable_error" if is_retryable else "adapter.fetch.error",
                        "source": self.source.value,
                        "status_code": response.status_code,
                        "url": url,
                    },
                )
                raise AdapterHTTPError(
                    f"HTTP {response.status_code}: {response.reason}",
                    status_code=response.status_code,
                    url=url,
                )

            try:
                return response.json()
            except ValueError as e:
                logger.error(
                    f"Failed to parse JSON response from {url}",
                    extra={
                        "event": "adapter.fetch.error",
                        "source": self.source.value,
                        "error_type": "JSONDecodeError",
                        "url": url,
                    },
                )
                raise AdapterResponseError(
                    f"Failed to parse JSON response from {url}: {e}"
                ) from e

        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={
                    "event": "adapter.fetch.retryable_error",
                    "source": self.source.value,
                    "error_type": "Timeout",
                    "url": url,
                },
            )
            raise AdapterTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds",
                url=url,
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Request to {url} failed: {e}",
                extra={
                    "event": "adapter.fetch.error",
                    "source": self.source.value,
                    "error_type": type(e).__name__,
                    "url": url,
                },
            )
            raise AdapterHTTPError(
                f"Request to {url} failed: {e}",
                status_code=0,
                url=url,
            ) from e
