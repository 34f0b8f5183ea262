"""Chat message rendering using Jinja2.

Messages are sent with Telegram's HTML parse mode, so every template is
autoescaped and user-provided text (titles, keywords, cities) cannot inject
markup.
"""

from typing import Any, Dict, Iterable, List

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from vacancy_bot.domain.models import Filter, Posting, Source, source_name
from vacancy_bot.logging import get_logger
from vacancy_bot.pipeline.models import SearchRunResult

from .exceptions import FormattingError
from .payloads import build_posting_context

logger = get_logger(__name__, component="formatting")


class MessageRenderer:
    """Renders outgoing chat messages from the templates in vacancy_bot.formatting.

    Templates are loaded once per renderer and cached by the Jinja2 environment.
    """

    def __init__(self, template_dir: str = "templates"):
        """Initialize the Jinja2 environment.

        Args:
            template_dir: Directory name within the vacancy_bot.formatting package
        """
        self.env = Environment(
            loader=PackageLoader("vacancy_bot.formatting", template_dir),
            autoescape=True,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        logger.debug(f"Initialized MessageRenderer with templates from {template_dir}")

    def render_posting(self, posting: Posting) -> str:
        """Render one posting card."""
        return self._render("posting_card.html.j2", build_posting_context(posting))

    def render_results(self, result: SearchRunResult) -> List[str]:
        """Render a search result as chat messages: a header then one card per posting.

        An empty result renders as a single "nothing found" message.
        """
        if not result.postings:
            return [self._render("no_results.html.j2", {})]

        header = self._render(
            "results_header.html.j2",
            {"total": result.total_matched, "shown": len(result.postings)},
        )
        return [header] + [self.render_posting(p) for p in result.postings]

    def render_filters(self, filter_: Filter) -> str:
        return self._render(
            "filters.html.j2",
            {"summary": filter_.describe().rstrip("\n"), "active": filter_.is_active()},
        )

    def render_help(self, sources: Iterable[Source] = tuple(Source)) -> str:
        return self._render(
            "help.html.j2", {"source_names": [source_name(s) for s in sources]}
        )

    def render_error(self, message: str) -> str:
        return self._render("error.html.j2", {"message": message})

    def _render(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render ``template_name`` with ``context``.

        Raises:
            FormattingError: If the template is missing or fails to render
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed for {template_name}: {e}"
            logger.error(
                error_msg,
                extra={"event": "formatting.render.failed", "template": template_name},
                exc_info=True,
            )
            raise FormattingError(error_msg) from e
