# File: tests/test_logger.py
import logging

import pytest
from site_graph.logger import configure, get_logger


@pytest.fixture()
def restore_logger():
    yield
    configure(level="WARNING")


def test_child_loggers_share_project_handlers(tmp_path, restore_logger):
    log_file = tmp_path / "crawl.log"
    root = configure(level="DEBUG", log_file=log_file)

    child = get_logger("crawler")
    assert child.name == "SiteGraph.crawler"
    assert get_logger() is root
    assert len(root.handlers) == 2

    child.info("visited %s", "https://ex.com/")
    for handler in root.handlers:
        handler.flush()
    assert "SiteGraph.crawler | visited https://ex.com/" in log_file.read_text(encoding="utf-8")


def test_reconfigure_replaces_or_appends_handlers(restore_logger):
    root = configure(level="INFO")
    assert len(root.handlers) == 1
    configure(level="INFO", replace_handlers=False)
    assert len(root.handlers) == 2
    assert root.level == logging.INFO
    assert root.propagate is False
