"""Unit tests for logging configuration module."""

import logging

import pytest

from common.logging_config import (
    ServiceLogger,
    configure_third_party_loggers,
    get_log_file_path,
    setup_logging,
    setup_service_logging,
)


@pytest.mark.unit
class TestSetupLogging:
    """Test setup_logging function."""

    @pytest.mark.parametrize("service_name", ["manager", "translator", "test-service"])
    def test_setup_logging_returns_named_logger(self, service_name):
        logger = setup_logging(service_name)

        assert isinstance(logger, logging.Logger)
        assert logger.name == service_name

    @pytest.mark.parametrize("log_level", ["DEBUG", "INFO", "WARNING", "ERROR"])
    def test_setup_logging_sets_root_level(self, log_level):
        setup_logging("test_service", log_level=log_level)

        root_logger = logging.getLogger()
        assert root_logger.level == getattr(logging, log_level)
        for handler in root_logger.handlers:
            assert handler.level == getattr(logging, log_level)

    def test_setup_logging_does_not_duplicate_handlers(self):
        setup_logging("test_service")
        first_count = len(logging.getLogger().handlers)

        setup_logging("test_service")

        assert len(logging.getLogger().handlers) == first_count

    def test_module_loggers_share_root_handlers(self, capsys):
        setup_logging("test_service", log_level="INFO")

        logging.getLogger("translator.translation_orchestrator").info("hello from module")

        assert "hello from module" in capsys.readouterr().out

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "service.log"

        setup_logging("test_service", log_file=str(log_file))

        file_handlers = [
            h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
        ]
        assert len(file_handlers) == 1
        assert log_file.parent.exists()
        for handler in file_handlers:
            handler.close()


@pytest.mark.unit
class TestLogFilePath:
    def test_get_log_file_path_format(self):
        path = get_log_file_path("manager")

        assert path.startswith("./logs/manager_")
        assert path.endswith(".log")


@pytest.mark.unit
class TestServiceLogger:
    def test_service_logger_without_file(self):
        service_logger = ServiceLogger("manager", enable_file_logging=False)

        assert service_logger.service_name == "manager"
        assert service_logger.logger.name == "manager"
        assert not any(
            isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers
        )

    def test_setup_service_logging_quiets_third_party(self):
        setup_service_logging("manager", enable_file_logging=False)

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("openai").level == logging.WARNING

    def test_configure_third_party_loggers_custom_level(self):
        configure_third_party_loggers("ERROR")

        assert logging.getLogger("httpcore").level == logging.ERROR
        configure_third_party_loggers()
