from __future__ import annotations

import json
import logging

import pytest

from conftest import html_page
from sitegraph import cli
from sitegraph.engine import crawl as real_crawl


ROOT = "https://example.com"


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_crawl(monkeypatch, make_fetcher):
    calls = []

    def _install(pages):
        fetcher, site = make_fetcher(pages)

        def _crawl(root, config=None):
            calls.append((root, config))
            return real_crawl(root, config, fetcher=fetcher)

        monkeypatch.setattr(cli, "crawl", _crawl)
        return site

    _install.calls = calls
    return _install


def test_prints_link_map_and_exits_zero(fake_crawl, capsys):
    fake_crawl({ROOT: html_page("/about", "https://other.com"), ROOT + "/about": html_page()})

    code = cli.main([ROOT])

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed == {ROOT: [ROOT + "/about"], ROOT + "/about": []}


def test_invalid_root_exits_non_zero(fake_crawl, capsys):
    fake_crawl({})

    assert cli.main(["example.com"]) == 2
    assert cli.main(["ftp://example.com"]) == 2
    assert fake_crawl.calls == []
    assert capsys.readouterr().out == ""


def test_invalid_config_exits_non_zero(fake_crawl):
    fake_crawl({})
    assert cli.main([ROOT, "--concurrency", "0"]) == 2


def test_flags_override_config_file(fake_crawl, tmp_path):
    config_path = tmp_path / "crawl.yaml"
    config_path.write_text("max_concurrency: 7\nretries: 1\n", encoding="utf-8")
    fake_crawl({ROOT: html_page()})

    assert cli.main([ROOT, "--config", str(config_path), "--concurrency", "3"]) == 0

    _, config = fake_crawl.calls[0]
    assert config.max_concurrency == 3
    assert config.retries == 1


def test_root_accepted_warning_still_exits_zero(fake_crawl, capsys):
    fake_crawl({ROOT: (202, "")})

    assert cli.main([ROOT]) == 0

    captured = capsys.readouterr()
    assert json.loads(captured.out) == {}
    assert "warning:" in captured.err
    assert "202" in captured.err


def test_output_file_and_failures(fake_crawl, tmp_path, capsys):
    fake_crawl({ROOT: html_page("/missing")})
    out_path = tmp_path / "result.json"

    assert cli.main([ROOT, "--output", str(out_path), "--include_failures"]) == 0

    printed = json.loads(capsys.readouterr().out)
    assert ROOT + "/missing" in printed["failures"]
    saved = json.loads(out_path.read_text(encoding="utf-8"))
    assert saved["pages"] == {ROOT: [ROOT + "/missing"]}


def test_unsupported_output_suffix_is_rejected_before_crawling(fake_crawl, tmp_path, capsys):
    site = fake_crawl({ROOT: html_page("/a"), ROOT + "/a": html_page()})
    out_path = tmp_path / "graph.txt"

    assert cli.main([ROOT, "--output", str(out_path)]) == 2

    assert fake_crawl.calls == []
    assert site.requests == []
    assert not out_path.exists()
    assert capsys.readouterr().out == ""


def test_output_write_failure_still_prints_result(fake_crawl, tmp_path, capsys):
    fake_crawl({ROOT: html_page()})
    blocked = tmp_path / "taken.json"
    blocked.mkdir()

    assert cli.main([ROOT, "--output", str(blocked)]) == 1

    assert json.loads(capsys.readouterr().out) == {ROOT: []}
