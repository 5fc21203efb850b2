"""
Tests for teachteam.utils.config and teachteam.utils.logger.
"""

import pytest
from loguru import logger
from pydantic import ValidationError

from teachteam.utils.config import SelectionSettings, get_settings, reload_settings
from teachteam.utils.logger import _sanitize_for_logging, audit_log


@pytest.fixture
def restore_settings(monkeypatch):
    yield monkeypatch
    monkeypatch.undo()
    reload_settings()


class TestSettings:
    def test_testing_environment(self):
        assert get_settings().environment == "testing"

    def test_nested_defaults(self):
        settings = get_settings()
        assert settings.database.port == 27017
        assert settings.selection.strict_ranking is False

    def test_list_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            SelectionSettings(list_limit=0)

    def test_reload_reads_environment(self, restore_settings):
        restore_settings.setenv("SELECTION_STRICT_RANKING", "true")
        assert reload_settings().selection.strict_ranking is True


class TestSanitize:
    def test_redacts_nested_secrets(self):
        data = {"reviewer": "l@rmit.edu.au", "auth": {"password": "hunter2"}, "items": [{"api_key": "k"}]}
        assert _sanitize_for_logging(data) == {
            "reviewer": "l@rmit.edu.au",
            "auth": "***REDACTED***",
            "items": [{"api_key": "***REDACTED***"}],
        }


class TestAuditLog:
    def test_binds_audit_type(self):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="INFO")
        try:
            audit_log("candidate_ranked", {"application_id": "1", "to_rank": 2})
        finally:
            logger.remove(sink_id)

        assert records[0]["extra"]["audit_type"] == "DECISION"
        assert records[0]["message"].startswith("candidate_ranked | ")
