"""HeadHunter (api.hh.ru) source client."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional

from vacancy_bot.domain.models import RawPosting, Source
from vacancy_bot.logging import get_logger
from vacancy_bot.utils.timestamps import utc_now

from .base import SearchHints, SourceClient
from .exceptions import AdapterResponseError

logger = get_logger(__name__, component="adapter")

# hh.ru area ids for the cities users most often type; anything else searches Moscow
CITY_AREA_IDS = {
    "москва": 1,
    "санкт-петербург": 2,
    "питер": 2,
    "спб": 2,
    "екатеринбург": 3,
    "новосибирск": 4,
    "казань": 88,
}
DEFAULT_AREA_ID = 1

NO_SALARY_TEXT = "Не указана"


def area_id_for_city(city: str) -> int:
    return CITY_AREA_IDS.get(city.strip().lower(), DEFAULT_AREA_ID)


class HeadHunterClient(SourceClient):
    """Client for the public HeadHunter vacancies API.

    API Details:
        Endpoint: https://api.hh.ru/vacancies
        Method: GET
        Authentication: None (public, User-Agent required)
        Response: JSON object with 'items' array
    """

    source = Source.HH
    API_URL = "https://api.hh.ru/vacancies"
    VACANCY_URL = "https://hh.ru/vacancy/{id}"

    def search(self, keyword: str, hints: SearchHints, days_back: int) -> List[RawPosting]:
        """Search vacancy titles for ``keyword`` published within ``days_back`` days.

        Salary bounds, city and remote-only are sent as API filters. Only
        vacancies with a published salary are requested.
        """
        params = self.build_params(keyword, hints, days_back)

        logger.info(
            "Fetching vacancies from HeadHunter",
            extra={
                "event": "adapter.hh.fetch",
                "source": self.source.value,
                "keyword": keyword,
            },
        )

        response = self._make_request(self.API_URL, params=params)

        if not isinstance(response, dict):
            raise AdapterResponseError(
                f"Expected JSON object response, got {type(response).__name__}"
            )

        items = response.get("items", [])
        if not isinstance(items, list):
            raise AdapterResponseError(
                f"Expected 'items' field to be array, got {type(items).__name__}"
            )

        postings = []
        for item in items:
            try:
                postings.append(self._transform_item(item))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning(
                    "Failed to transform HeadHunter vacancy",
                    extra={
                        "event": "adapter.hh.item_skipped",
                        "source": self.source.value,
                        "item_id": item.get("id") if isinstance(item, dict) else None,
                        "error": str(e),
                    },
                )

        logger.info(
            "Fetched vacancies from HeadHunter",
            extra={
                "event": "adapter.hh.fetched",
                "source": self.source.value,
                "keyword": keyword,
                "count": len(postings),
            },
        )
        return postings

    def build_params(self, keyword: str, hints: SearchHints, days_back: int) -> Dict[str, Any]:
        date_from = (utc_now() - timedelta(days=days_back)).replace(microsecond=0)

        params: Dict[str, Any] = {}
        if keyword:
            params["text"] = keyword
        params["search_field"] = "name"
        params["order_by"] = "publication_time"
        params["per_page"] = self.per_page
        params["date_from"] = date_from.isoformat()

        if hints.min_salary is not None:
            params["salary_from"] = hints.min_salary
        if hints.max_salary is not None:
            params["salary_to"] = hints.max_salary
        if hints.city:
            params["area"] = area_id_for_city(hints.city)
        if hints.remote_only:
            params["schedule"] = "remote"

        params["only_with_salary"] = "true"
        return params

    def _transform_item(self, item: Dict[str, Any]) -> RawPosting:
        vacancy_id = str(item["id"])

        employer = item.get("employer") or {}
        salary = item.get("salary") or {}
        experience = item.get("experience") or {}
        area = item.get("area") or {}
        schedule = item.get("schedule") or {}
        address = item.get("address") or {}

        return RawPosting(
            external_id=vacancy_id,
            title=item.get("name") or "",
            company=employer.get("name"),
            employer_type=employer.get("type"),
            salary_text=self._salary_text(salary),
            salary_from=salary.get("from"),
            salary_to=salary.get("to"),
            salary_currency=salary.get("currency"),
            experience_text=experience.get("name"),
            experience_id=experience.get("id"),
            city=area.get("name"),
            schedule=schedule.get("name"),
            address=address.get("raw"),
            url=item.get("alternate_url") or self.VACANCY_URL.format(id=vacancy_id),
            published_at=item.get("published_at"),
        )

    @staticmethod
    def _salary_text(salary: Dict[str, Any]) -> str:
        """Render the structured salary the way hh.ru shows it."""
        low: Optional[int] = salary.get("from")
        high: Optional[int] = salary.get("to")
        currency = salary.get("currency") or ""

        if low is not None and high is not None:
            text = f"{low} - {high}"
        elif low is not None:
            text = f"от {low}"
        elif high is not None:
            text = f"до {high}"
        else:
            return NO_SALARY_TEXT

        return f"{text} {currency}".strip()
