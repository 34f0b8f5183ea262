"""Template context builders for chat messages."""

from typing import Dict

from vacancy_bot.domain.models import Posting, source_emoji, source_name

NOT_SPECIFIED_F = "Не указана"
NOT_SPECIFIED_M = "Не указан"
REMOTE_SUFFIX = " (удаленно)"


def build_posting_context(posting: Posting) -> Dict:
    """Build the posting card context.

    Missing company and salary read "Не указана"; missing experience and city
    read "Не указан". Remote postings get "(удаленно)" after the city.

    Args:
        posting: Normalized posting

    Returns:
        Dictionary with keys emoji, title, company, agency, salary,
        experience, location, url, source_name
    """
    location = posting.city or NOT_SPECIFIED_M
    if posting.remote:
        location += REMOTE_SUFFIX

    return {
        "emoji": source_emoji(posting.source),
        "title": posting.title,
        "company": posting.company or NOT_SPECIFIED_F,
        "agency": posting.agency,
        "salary": posting.salary_raw or NOT_SPECIFIED_F,
        "experience": posting.experience_raw or NOT_SPECIFIED_M,
        "location": location,
        "url": posting.url,
        "source_name": source_name(posting.source),
    }
