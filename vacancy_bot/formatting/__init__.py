"""Chat message formatting.

- MessageRenderer: Jinja2 rendering of posting cards, search results, filter
  summaries, help and error messages (HTML parse mode)
- build_posting_context: posting card template context
"""

from .exceptions import FormattingError
from .payloads import build_posting_context
from .renderer import MessageRenderer

__all__ = ["MessageRenderer", "FormattingError", "build_posting_context"]
