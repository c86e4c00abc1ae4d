import pytest

import mirror_the_site
from crawler.downloader import FAILED, SAVED, SKIPPED
from utils.error_handler import BadStatus, CrawlAborted


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "logging:\n"
        "  level: INFO\n"
        f"  file: {tmp_path / 'logs' / 'mirror.log'}\n",
        encoding="utf-8",
    )
    return str(path)


def test_update_config_applies_command_line_overrides(config_file, tmp_path):
    args = mirror_the_site.parse_args([
        "-c", config_file,
        "-u", "http://example.test/theme/",
        "-i", "home.html",
        "-o", str(tmp_path / "out"),
        "-p", "0",
        "--proxy", "http://proxy.test:3128",
        "--timeout", "4",
        "--user-agent", "UA",
    ])
    config = mirror_the_site.update_config(args)

    assert config["themes_url"] == "http://example.test/theme/"
    assert config["index_url"] == "home.html"
    assert config["save_folder"] == str(tmp_path / "out")
    assert config["crawl"]["threads"] == 1
    assert config["crawl"]["timeout"] == 4
    assert config["crawl"]["user_agent"] == "UA"
    assert config["proxy"] == {"enable": True, "url": "http://proxy.test:3128"}


def test_no_proxy_wins(config_file):
    args = mirror_the_site.parse_args(["-c", config_file, "--proxy", "http://p:1", "--no-proxy"])
    assert mirror_the_site.update_config(args)["proxy"]["enable"] is False


class StubCrawler:
    def __init__(self, error=None):
        self.error = error

    def crawl_site(self):
        if self.error is not None:
            raise self.error
        return {SAVED: 3, SKIPPED: 1, FAILED: 0}


def test_main_returns_zero_on_success(config_file, tmp_path, monkeypatch):
    monkeypatch.setattr(mirror_the_site.CrawlSite, "from_config", classmethod(lambda cls, config: StubCrawler()))

    assert mirror_the_site.main(["-c", config_file]) == 0
    assert (tmp_path / "logs" / "mirror.log").exists()


def test_main_returns_one_when_aborted(config_file, monkeypatch):
    error = CrawlAborted(BadStatus("http://x/about.html", 404))
    monkeypatch.setattr(mirror_the_site.CrawlSite, "from_config", classmethod(lambda cls, config: StubCrawler(error)))

    assert mirror_the_site.main(["-c", config_file]) == 1
