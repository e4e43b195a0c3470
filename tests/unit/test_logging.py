# =============================================================================
# tests/unit/test_logging.py
# Unit Tests for logging setup
# =============================================================================

import logging

import pytest

from tracker_core.logging import LogContext, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handler/level changes on the tracker_core logger"""
    package_logger = logging.getLogger("tracker_core")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in list(package_logger.handlers):
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)


class TestSetupLogging:
    """Test package logger configuration"""

    def test_level_by_name(self):
        package_logger = setup_logging("debug")

        assert package_logger.name == "tracker_core"
        assert package_logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        assert setup_logging("chatty").level == logging.INFO

    def test_repeated_setup_replaces_handlers(self):
        setup_logging("INFO")
        count = len(logging.getLogger("tracker_core").handlers)

        setup_logging("WARNING")

        assert len(logging.getLogger("tracker_core").handlers) == count

    def test_file_output(self, tmp_path):
        setup_logging("INFO", log_dir=tmp_path / "logs", log_filename="run.log")
        logging.getLogger("tracker_core.offline").info("hello from the cache")

        for handler in logging.getLogger("tracker_core").handlers:
            handler.flush()

        assert "hello from the cache" in (tmp_path / "logs" / "run.log").read_text(encoding="utf-8")

    def test_create_time_tracker_applies_settings(self, tmp_path):
        """Configured level and file logging take effect when the service is built"""
        from tracker_core.config import Settings
        from tracker_core.offline.time_tracker_service import create_time_tracker

        settings = Settings(data_dir=tmp_path, log_level="WARNING", log_to_file=True)

        create_time_tracker(settings)

        assert logging.getLogger("tracker_core").level == logging.WARNING
        assert (tmp_path / "logs").is_dir()


class TestLogContext:
    """Test operation timing"""

    def test_logs_start_and_completion(self, caplog):
        logger = logging.getLogger("tracker_core.tests")

        with caplog.at_level(logging.INFO, logger="tracker_core"):
            with LogContext(logger, "Syncing 2 entries"):
                pass

        assert "Syncing 2 entries... started" in caplog.text
        assert "Syncing 2 entries... completed" in caplog.text

    def test_failure_logged_and_reraised(self, caplog):
        logger = logging.getLogger("tracker_core.tests")

        with pytest.raises(RuntimeError):
            with LogContext(logger, "Persisting"):
                raise RuntimeError("disk full")

        assert "Persisting... failed" in caplog.text
