"""
Tests for logger functionality.
"""

import pytest
from companydir.codec import RecordCodec
from companydir.logger import StructuredLogger, get_logger, reset_logger
from companydir.storage import MemoryStore


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["storage_reads"] == 0
        assert logger.metrics["storage_failures"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # Should not raise exceptions
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is appended to the message as JSON."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Message with context", key="rushWorking_companies", count=5)

        content = next(tmp_path.glob("*.log")).read_text()
        assert '"key": "rushWorking_companies"' in content
        assert '"count": 5' in content

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_read()
        logger.record_read()
        logger.record_write("companies")
        logger.record_write("companies")
        logger.record_write("companyReviews")
        logger.record_storage_failure("write")
        logger.record_validation_failure()

        metrics = logger.get_metrics()

        assert metrics["storage_reads"] == 2
        assert metrics["storage_writes"] == 3
        assert metrics["storage_failures"] == 1
        assert metrics["validation_failures"] == 1
        assert metrics["errors_by_type"]["write"] == 1
        assert metrics["mutations_by_collection"] == {"companies": 2, "companyReviews": 1}

    def test_failure_rate_calculation(self, tmp_path):
        """Failure rate is failures over reads plus writes."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.get_metrics()["failure_rate"] == 0

        for _ in range(2):
            logger.record_read()
        logger.record_write("companies")
        logger.record_storage_failure("read")

        assert logger.get_metrics()["failure_rate"] == pytest.approx(0.333, rel=0.01)

    def test_get_metrics_returns_copy(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_storage_failure("parse")

        metrics = logger.get_metrics()
        metrics["errors_by_type"]["parse"] = 99

        assert logger.metrics["errors_by_type"]["parse"] == 1

    def test_metrics_summary_written(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_write("salaryReports")
        logger.record_storage_failure("write")

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "Storage Session Metrics" in content
        assert "salaryReports: 1" in content
        assert "write: 1" in content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        # Check that a log file was created
        log_files = list(tmp_path.glob("*.log"))
        assert len(log_files) == 1

        # Check that message was written
        log_content = log_files[0].read_text()
        assert "Test message" in log_content


class TestCodecMetrics:
    """Storage failures are swallowed by the codec but still counted."""

    def test_parse_failure_counted(self, quiet_logger):
        store = MemoryStore({"rushWorking_companies": "{broken"})
        codec = RecordCodec(store, logger=quiet_logger)

        assert codec.read_companies() == {}

        metrics = quiet_logger.get_metrics()
        assert metrics["storage_reads"] == 1
        assert metrics["errors_by_type"] == {"parse": 1}

    def test_write_failure_counted(self, flaky_store, quiet_logger):
        flaky_store.fail_writes_for.add("*")
        codec = RecordCodec(flaky_store, logger=quiet_logger)

        assert codec.write_blocked(["Acme"]) is False

        metrics = quiet_logger.get_metrics()
        assert metrics["storage_writes"] == 0
        assert metrics["errors_by_type"] == {"write": 1}


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()  # Start fresh

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_read()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        # Should be different instance with fresh metrics
        assert logger2 is not logger1
        assert logger2.metrics["storage_reads"] == 0

    def test_codec_defaults_to_global_logger(self, quiet_logger):
        codec = RecordCodec(MemoryStore())
        assert codec.logger is quiet_logger
