import logging

import jsonschema
import pytest

from schema_decorators import ConfigurationError, ValidationConfig


@pytest.fixture
def package_logger():
    logger = logging.getLogger("schema_decorators")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def test_defaults():
    config = ValidationConfig()

    assert config.abort_early
    assert config.format_check
    assert config.validator_class() is jsonschema.Draft202012Validator


def test_from_env(monkeypatch):
    monkeypatch.setenv("SCHEMA_DECORATORS_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SCHEMA_DECORATORS_ABORT_EARLY", "false")
    monkeypatch.setenv("SCHEMA_DECORATORS_FORMAT_CHECK", "FALSE")
    monkeypatch.setenv("SCHEMA_DECORATORS_DRAFT", "7")

    config = ValidationConfig.from_env()

    assert config.log_level == "DEBUG"
    assert not config.abort_early
    assert not config.format_check
    assert config.validator_class() is jsonschema.Draft7Validator


def test_unknown_draft():
    with pytest.raises(ConfigurationError, match="Unsupported JSON Schema draft"):
        ValidationConfig(draft="3").validator_class()


def test_set_logging_splits_streams(package_logger, capsys):
    logger = ValidationConfig(log_level="DEBUG", print_level="WARNING").set_logging()

    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2

    logging.getLogger("schema_decorators.registry").info("composed")
    logging.getLogger("schema_decorators.registry").warning("skipped")

    captured = capsys.readouterr()
    assert "composed" in captured.out
    assert "skipped" not in captured.out
    assert "skipped" in captured.err


def test_set_logging_replaces_handlers(package_logger):
    config = ValidationConfig()
    config.set_logging()
    config.set_logging()

    assert len(package_logger.handlers) == 2
