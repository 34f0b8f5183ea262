"""Factory functions for instantiating source clients."""

from typing import Dict, Type

from vacancy_bot.config.models import AppConfig
from vacancy_bot.domain.models import Source
from vacancy_bot.logging import get_logger

from .base import SourceClient
from .exceptions import AdapterConfigurationError
from .hh import HeadHunterClient

logger = get_logger(__name__, component="adapter")

# Sources without an entry here are accepted in filters but return nothing
CLIENT_CLASSES: Dict[Source, Type[SourceClient]] = {
    Source.HH: HeadHunterClient,
}


def get_client(source: Source, app_config: AppConfig) -> SourceClient:
    """Instantiate the client for ``source`` with timeouts from ``app_config``.

    Args:
        source: Source tag
        app_config: Application configuration (advanced + search sections)

    Returns:
        Configured client instance

    Raises:
        AdapterConfigurationError: If no client exists for the source or construction fails
    """
    client_class = CLIENT_CLASSES.get(Source(source))
    if client_class is None:
        supported = ", ".join(sorted(s.value for s in CLIENT_CLASSES))
        raise AdapterConfigurationError(
            f"No client for source: {Source(source).value}. Supported sources: {supported}"
        )

    logger.debug(
        "Creating source client",
        extra={
            "event": "adapter.client.created",
            "source": Source(source).value,
            "client_class": client_class.__name__,
        },
    )

    try:
        return client_class(
            timeout=app_config.advanced.http_request_timeout,
            user_agent=app_config.advanced.user_agent,
            per_page=app_config.search.per_page,
        )
    except AdapterConfigurationError:
        raise
    except Exception as e:
        raise AdapterConfigurationError(
            f"Failed to create {Source(source).value} client: {e}"
        ) from e


def build_source_clients(app_config: AppConfig) -> Dict[Source, SourceClient]:
    """Build clients for every enabled source that has an implementation.

    Enabled sources without a client are logged once and left out; searches
    that include them simply get no postings from them.
    """
    clients: Dict[Source, SourceClient] = {}
    for source in app_config.sources.enabled:
        source = Source(source)
        if source not in CLIENT_CLASSES:
            logger.warning(
                f"Source {source.value} is enabled but has no client; it will return no postings",
                extra={"event": "adapter.client.unavailable", "source": source.value},
            )
            continue
        clients[source] = get_client(source, app_config)
    return clients
