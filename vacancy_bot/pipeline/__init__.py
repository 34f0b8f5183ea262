"""Search pipeline: source fan-out, normalization, filtering and ordering."""

from .models import SearchRunResult, SourceRunStats
from .runner import SearchPipeline

__all__ = ["SearchPipeline", "SearchRunResult", "SourceRunStats"]
