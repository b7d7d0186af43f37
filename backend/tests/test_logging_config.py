import logging

import pytest

from backend.logging_config import configure_logging


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    path = tmp_path / "logs"
    monkeypatch.setenv("AWARDSCOPE_LOG_DIR", str(path))
    yield path
    configure_logging(logging.WARNING)


def test_upstream_records_are_split_from_app_log(log_dir):
    paths = configure_logging(logging.INFO)
    assert paths["logs"] == log_dir
    assert paths["upstream_log"] == log_dir / "upstream.log"

    logging.getLogger("backend.connectors.usaspending").info("posted search")
    logging.getLogger("backend.services.awards").info("ranked recipients")

    upstream = paths["upstream_log"].read_text(encoding="utf-8")
    app_log = paths["app_log"].read_text(encoding="utf-8")
    assert "posted search" in upstream
    assert "posted search" not in app_log
    assert "ranked recipients" in app_log


def test_upstream_level_is_independent(log_dir):
    paths = configure_logging(logging.INFO, upstream_level=logging.DEBUG)

    logging.getLogger("backend.connectors.usaspending").debug("payload detail")
    logging.getLogger("backend.app").debug("app detail")

    assert "payload detail" in paths["upstream_log"].read_text(encoding="utf-8")
    assert "app detail" not in paths["app_log"].read_text(encoding="utf-8")


def test_urllib3_is_held_at_warning(log_dir):
    configure_logging(logging.DEBUG)
    assert logging.getLogger("urllib3").level == logging.WARNING
