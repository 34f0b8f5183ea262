"""Job-board source clients.

Implemented clients:
- HeadHunter: hh.HeadHunterClient

Build the clients for the configured sources with the factory:
    from vacancy_bot.adapters import build_source_clients
    clients = build_source_clients(app_config)
    raw = clients[Source.HH].search("python", SearchHints(), days_back=7)

Exception handling:
    from vacancy_bot.adapters.exceptions import AdapterError, AdapterHTTPError, AdapterTimeoutError
"""

from .base import SearchHints, SourceClient
from .exceptions import (
    AdapterConfigurationError,
    AdapterError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
)
from .factory import CLIENT_CLASSES, build_source_clients, get_client
from .hh import HeadHunterClient, area_id_for_city

__all__ = [
    # Base and factory
    "SourceClient",
    "SearchHints",
    "CLIENT_CLASSES",
    "get_client",
    "build_source_clients",
    # Clients
    "HeadHunterClient",
    "area_id_for_city",
    # Exceptions
    "AdapterError",
    "AdapterHTTPError",
    "AdapterTimeoutError",
    "AdapterResponseError",
    "AdapterConfigurationError",
]
