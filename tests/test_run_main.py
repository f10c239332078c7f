"""
Tests for run.py main() with an injected container.
Providers are overridden so nothing touches the network or a real database.
"""
import json
from unittest.mock import Mock, patch

from dependency_injector import providers
from sqlalchemy import create_engine, inspect

from run import main
from kbcrawl.container import Container
from kbcrawl.domain.crawl_job import CrawlJob
from kbcrawl.domain.crawl_result import CrawlResult, CrawlStats, CrawlStatus
from kbcrawl.exceptions import InactiveSourceError
from kbcrawl.services.crawl_runner import CrawlOutcome
from kbcrawl.services.crawler import Crawler
from kbcrawl.services.http_service import HttpService
from fakes import FakeSite, page


def _container_with_site(site):
    container = Container()
    container.http_service.override(providers.Object(HttpService(user_agent="TestBot/1.0", http_client=site)))
    return container


def test_container_creates_services():
    container = Container()
    container.config.USER_AGENT.from_value("TestBot/1.0")

    http_service = container.http_service()
    assert http_service.user_agent == "TestBot/1.0"
    assert container.fetch_retrier().http_service is http_service
    assert container.crawl_registry() is container.crawl_registry()
    repo = Mock()
    container.sources_repository.override(repo)
    assert container.crawl_recovery().sources_repo is repo

    job = CrawlJob(start_url="https://example.com/", max_depth=1, max_pages=1, overall_timeout=5)
    crawler = container.crawler(job=job)
    assert isinstance(crawler, Crawler)
    assert crawler.fetch_retrier is container.fetch_retrier()
    assert container.crawler(job=job) is not crawler


def test_main_serve_is_default():
    repo = Mock()
    repo.mark_incomplete_crawls.return_value = [2]
    container = Container()
    container.sources_repository.override(repo)

    with patch('run.uvicorn.run') as mock_uvicorn:
        assert main(container=container, argv=[]) == 0

    mock_uvicorn.assert_called_once()
    app = mock_uvicorn.call_args.args[0]
    assert app.state.container is container
    assert mock_uvicorn.call_args.kwargs["port"] == int(container.config.KBCRAWL_API_PORT())
    repo.mark_incomplete_crawls.assert_called_once_with("crawl found incomplete on startup")


def test_init_db_creates_table():
    engine = create_engine("sqlite:///:memory:", future=True)
    container = Container()
    container.db_engine.override(providers.Object(engine))

    assert main(container=container, argv=["init-db"]) == 0
    assert "rag_urls" in inspect(engine).get_table_names()


def test_crawl_url_prints_summary(capsys):
    site = FakeSite({"http://example.com/": (200, page(text="hello"))})
    container = _container_with_site(site)

    code = main(container=container, argv=["crawl-url", "http://example.com/", "--depth", "1", "--pages", "1"])

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["stats"]["pagesProcessed"] == 1
    assert out["pages"][0]["url"] == "http://example.com/"
    assert out["stopped"] is False


def test_crawl_url_with_no_pages_exits_nonzero(capsys):
    container = _container_with_site(FakeSite({}))
    assert main(container=container, argv=["crawl-url", "http://example.com/"]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["stats"]["failedPages"] == ["http://example.com/"]


def test_crawl_url_rejects_invalid_url():
    container = _container_with_site(FakeSite({}))
    assert main(container=container, argv=["crawl-url", "not-a-url"]) == 2
    assert main(container=container, argv=["crawl-url", "http://[bad/"]) == 2


def test_crawl_source_reports_outcome(capsys):
    stats = CrawlStats(pages_found=1, pages_processed=1, total_tokens=5, crawl_duration=3)
    runner = Mock()
    runner.run.return_value = CrawlOutcome(4, CrawlResult(pages=[], stats=stats), CrawlStatus.SUCCESS, None)
    container = Container()
    container.crawl_runner.override(providers.Object(runner))

    assert main(container=container, argv=["crawl", "4", "--actor", "alice"]) == 0
    runner.run.assert_called_once_with(4, actor="alice")
    assert json.loads(capsys.readouterr().out)["status"] == "success"


def test_crawl_source_configuration_error_exits_2():
    runner = Mock()
    runner.run.side_effect = InactiveSourceError(4)
    container = Container()
    container.crawl_runner.override(providers.Object(runner))

    assert main(container=container, argv=["crawl", "4"]) == 2
