"""
Infrastructure Tests

Configuration, structured logging, Sentry event filtering and the error
taxonomy shared by the API layer.

Run with: pytest tests/test_infrastructure.py -v
"""

import asyncio
import json
import logging

import pytest
from fastapi import HTTPException

from config import Settings
from logging_config import JSONFormatter, RequestContextFilter, clear_request_context, set_request_context
from sentry_integration import filter_sensitive_data
from utils.validation_errors import InvalidArgumentError, NotFoundError, to_http_exception


def make_settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


class TestSettings:

    def test_database_url_from_components(self):
        settings = make_settings(
            POSTGRES_HOST="db.internal", POSTGRES_USER="ledger", POSTGRES_PASSWORD="pw", POSTGRES_DB="books"
        )
        assert settings.get_database_url() == "postgresql+asyncpg://ledger:pw@db.internal:5432/books"

    def test_explicit_database_url_wins(self):
        settings = make_settings(DATABASE_URL="sqlite+aiosqlite:///ledger.db", POSTGRES_HOST="db.internal")
        assert settings.get_database_url() == "sqlite+aiosqlite:///ledger.db"

    def test_missing_database_configuration(self):
        with pytest.raises(ValueError):
            make_settings(DATABASE_URL="", POSTGRES_HOST="").get_database_url()

    def test_tax_calendar_defaults(self):
        settings = make_settings()
        assert settings.BUSINESS_TIMEZONE == "Australia/Sydney"
        assert settings.MIN_FINANCIAL_YEAR == 2000
        assert settings.FY_LOOKAHEAD_YEARS == 2

    def test_production_rejects_wildcard_cors_and_debug(self):
        settings = make_settings(
            ENVIRONMENT="production", DATABASE_URL="postgresql+asyncpg://u:p@db/ledger",
            CORS_ORIGINS="*", DEBUG=True,
        )
        errors = settings.validate_production_config()
        assert "CORS_ORIGINS cannot be '*' in production" in errors
        assert "DEBUG should be False in production" in errors

    def test_production_cors_has_no_localhost(self):
        settings = make_settings(ENVIRONMENT="production", CORS_ORIGINS="https://ledger.example.com")
        assert settings.cors_origins_list == ["https://ledger.example.com"]

    def test_development_cors_includes_localhost(self):
        settings = make_settings(ENVIRONMENT="development")
        assert "http://localhost:3000" in settings.cors_origins_list


class TestStructuredLogging:

    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord(
            name="services.recurring_expenses", level=logging.INFO, pathname=__file__,
            lineno=1, msg="Generated %s expenses", args=(2,), exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_format(self):
        record = self._record(template_id="t-1")
        set_request_context("req-42")
        try:
            RequestContextFilter().filter(record)
        finally:
            clear_request_context()

        payload = json.loads(JSONFormatter(service_name="ledger-core").format(record))

        assert payload["message"] == "Generated 2 expenses"
        assert payload["service"] == "ledger-core"
        assert payload["level"] == "INFO"
        assert payload["request_id"] == "req-42"
        assert payload["extra"] == {"template_id": "t-1"}

    def test_cleared_request_context(self):
        record = self._record()
        set_request_context("req-42")
        clear_request_context()
        RequestContextFilter().filter(record)

        assert record.request_id is None

    @pytest.mark.asyncio
    async def test_concurrent_requests_keep_their_own_id(self):
        async def handle(request_id: str, started: asyncio.Event, proceed: asyncio.Event):
            set_request_context(request_id)
            started.set()
            await proceed.wait()
            record = self._record()
            RequestContextFilter().filter(record)
            return record.request_id

        first_started, second_started, proceed = asyncio.Event(), asyncio.Event(), asyncio.Event()
        first = asyncio.create_task(handle("req-1", first_started, proceed))
        await first_started.wait()
        second = asyncio.create_task(handle("req-2", second_started, proceed))
        await second_started.wait()
        proceed.set()

        assert await asyncio.gather(first, second) == ["req-1", "req-2"]


class TestSentryFilter:

    def test_redacts_ledger_text(self):
        event = {
            "request": {"data": {"description": "Rent for unit 4", "amountCents": 110000}},
            "extra": {"abn_arn": "12 345 678 901", "path": "/api/recurring-expenses"},
        }

        filtered = filter_sensitive_data(event, {})

        assert filtered["request"]["data"]["description"] == "[REDACTED]"
        assert filtered["request"]["data"]["amountCents"] == 110000
        assert filtered["extra"]["abn_arn"] == "[REDACTED]"
        assert filtered["extra"]["path"] == "/api/recurring-expenses"


class TestErrorTaxonomy:

    def test_invalid_argument_is_400(self):
        error = InvalidArgumentError('Invalid quarter "Q9". Must be Q1, Q2, Q3, or Q4.', parameter="quarter", value="Q9")

        http_exc = to_http_exception(error)

        assert isinstance(http_exc, HTTPException)
        assert http_exc.status_code == 400
        assert http_exc.detail["parameter"] == "quarter"
        assert http_exc.detail["received_value"] == "Q9"

    def test_not_found_is_404(self):
        http_exc = to_http_exception(NotFoundError("Category", "c-404"))

        assert http_exc.status_code == 404
        assert http_exc.detail["message"] == 'Category with ID "c-404" not found'

    def test_other_errors_are_not_translated(self):
        with pytest.raises(TypeError):
            to_http_exception(RuntimeError("database unreachable"))
