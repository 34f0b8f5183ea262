"""Unit tests for free-text field parsers."""

import pytest

from vacancy_bot.normalization.parsing import (
    SalaryRange,
    detect_currency,
    is_agency,
    is_remote,
    normalize_currency,
    parse_experience,
    parse_salary_text,
)


class TestParseSalaryText:
    """Tests for parse_salary_text."""

    def test_range_with_thousands_grouping(self):
        outcome = parse_salary_text("от 100 000 до 150 000 руб")

        assert outcome.ok
        assert outcome.value == SalaryRange(minimum=100000, maximum=150000)

    def test_from_only(self):
        assert parse_salary_text("от 100000 руб").value == SalaryRange(minimum=100000)

    def test_to_only(self):
        assert parse_salary_text("до 80000 руб").value == SalaryRange(maximum=80000)

    def test_not_specified(self):
        outcome = parse_salary_text("Не указана")

        assert not outcome.ok
        assert outcome.value is None
        assert outcome.diagnostic

    def test_dash_range(self):
        assert parse_salary_text("120000 - 180000 RUR").value == SalaryRange(120000, 180000)

    def test_nbsp_grouping(self):
        assert parse_salary_text("от 1\u00a0500\u00a0000 ₽").value == SalaryRange(minimum=1500000)

    def test_single_amount_without_direction_left_unset(self):
        outcome = parse_salary_text("100000 руб")

        assert outcome.value is None
        assert "от/до" in outcome.diagnostic

    def test_direction_is_case_insensitive(self):
        assert parse_salary_text("ОТ 90000").value == SalaryRange(minimum=90000)

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty(self, text):
        outcome = parse_salary_text(text)

        assert outcome.value is None
        assert outcome.diagnostic == "salary text is empty"

    def test_never_raises_on_garbage(self):
        assert parse_salary_text("¯\\_(ツ)_/¯ -- ---").value is None


class TestParseExperience:
    """Tests for parse_experience."""

    @pytest.mark.parametrize(
        "text,years",
        [
            ("3-6 лет", 3),
            ("без опыта", 0),
            ("Без опыта", 0),
            ("более 6 лет", 6),
            ("1-3 года", 1),
        ],
    )
    def test_known_texts(self, text, years):
        assert parse_experience(text).value == years

    def test_unrecognized_text(self):
        outcome = parse_experience("От 1 года до 3 лет")

        assert outcome.value is None
        assert outcome.diagnostic

    @pytest.mark.parametrize(
        "experience_id,years",
        [("noExperience", 0), ("between1And3", 1), ("between3And6", 3), ("moreThan6", 6)],
    )
    def test_structured_id_takes_precedence(self, experience_id, years):
        assert parse_experience("что угодно", experience_id).value == years

    def test_unknown_id_falls_back_to_text(self):
        assert parse_experience("3-6 лет", "somethingElse").value == 3


class TestFlags:
    """Tests for agency and remote detection."""

    @pytest.mark.parametrize(
        "company",
        ["Кадровое агентство Старт", "Best Recruitment Ltd", "HR Partners", "Персонал Плюс"],
    )
    def test_agency_by_name(self, company):
        assert is_agency(company) is True

    def test_agency_by_employer_type(self):
        assert is_agency("Ромашка", "agency") is True

    def test_direct_employer(self):
        assert is_agency("Яндекс", "company") is False
        assert is_agency(None) is False

    def test_remote_from_schedule(self):
        assert is_remote("Удаленная работа", None) is True

    def test_remote_from_address(self):
        assert is_remote("Полный день", "Удаленно, Москва") is True

    def test_not_remote(self):
        assert is_remote("Полный день", None) is False
        assert is_remote() is False


class TestCurrency:
    def test_rur_alias(self):
        assert normalize_currency("rur") == "RUB"

    def test_blank_code(self):
        assert normalize_currency("  ") is None

    @pytest.mark.parametrize(
        "text,currency",
        [("от 1000 $", "USD"), ("до 3000 EUR", "EUR"), ("100 000 руб.", "RUB"), ("50 000 ₽", "RUB")],
    )
    def test_detect(self, text, currency):
        assert detect_currency(text).value == currency

    def test_detect_none(self):
        assert detect_currency("от 1000").value is None
