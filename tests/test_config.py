import logging

from crm.config import Settings, load_settings
from crm.logging_config import setup_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.log_file is None
        assert settings.seed_on_startup is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CRM_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CRM_SEED_ON_STARTUP", "false")
        settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.seed_on_startup is False

    def test_explicit_overrides(self):
        assert load_settings({"app_title": "Test CRM"}).app_title == "Test CRM"


class TestLogging:
    def test_console_only(self):
        logger = setup_logging(load_settings({"log_level": "warning"}))
        assert logger.name == "crm"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_rotating_file(self, tmp_path):
        log_file = tmp_path / "logs" / "crm.log"
        logger = setup_logging(load_settings({"log_file": str(log_file)}))
        logging.getLogger("crm.services.seller_service").info("hello from the service")
        for handler in logger.handlers:
            handler.flush()

        assert "hello from the service" in log_file.read_text(encoding="utf-8")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
