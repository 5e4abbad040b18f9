"""Test structured logging setup and analysis_id propagation."""

import json
import logging

from trading_journal.observability.logger import (
    get_analysis_id,
    get_logger,
    new_analysis_id,
    setup_logging,
)


class TestAnalysisId:
    def test_new_id_is_current(self):
        aid = new_analysis_id()
        assert get_analysis_id() == aid

    def test_new_id_replaces_current(self):
        first = new_analysis_id()
        fresh = new_analysis_id()
        assert fresh != first
        assert get_analysis_id() == fresh


class TestSetupLogging:
    def test_stdlib_records_rendered_as_json(self, capsys):
        setup_logging("INFO", "json")
        aid = new_analysis_id()
        logging.getLogger("trading_journal.test").info("Loaded %d trades", 3)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "Loaded 3 trades"
        assert entry["analysis_id"] == aid
        assert entry["level"] == "info"
        assert entry["logger"] == "trading_journal.test"

    def test_structlog_logger(self, capsys):
        setup_logging("INFO", "json")
        aid = new_analysis_id()
        get_logger("trading_journal.test").info("analysis_complete", trades=2)

        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["event"] == "analysis_complete"
        assert entry["trades"] == 2
        assert entry["analysis_id"] == aid

    def test_level_filters(self, capsys):
        setup_logging("WARNING", "json")
        logging.getLogger("trading_journal.test").info("hidden")
        assert "hidden" not in capsys.readouterr().err

    def test_console_format(self, capsys):
        setup_logging("INFO", "console")
        logging.getLogger("trading_journal.test").info("readable")
        assert "readable" in capsys.readouterr().err
