"""Store layer exceptions.

All store exceptions inherit from StoreError so callers can catch them with a
single except clause.
"""


class StoreError(Exception):
    """Base exception for filter/session store errors."""

    pass


class StoreLoadError(StoreError):
    """Persisted filters could not be read or decoded.

    The store recovers from this by starting empty; it is raised only by
    the low-level reader.
    """

    pass


class StoreWriteError(StoreError):
    """Persisted filters could not be written.

    The in-memory state stays authoritative; the next successful write
    persists it.
    """

    pass
