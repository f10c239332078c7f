"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests
from sqlalchemy.orm import sessionmaker

from kbcrawl.db.engine import make_engine
from kbcrawl.repository.sources import SourcesRepository
from kbcrawl.services.crawl_registry import InMemoryCrawlRegistry
from kbcrawl.services.crawl_recovery import DEFAULT_RECOVERY_MESSAGE, CrawlRecovery
from kbcrawl.services.crawl_runner import CrawlRunner
from kbcrawl.services.crawler import Crawler
from kbcrawl.services.fetch_retrier import FetchRetrier
from kbcrawl.services.html_text_extractor import HtmlTextExtractor
from kbcrawl.services.http_service import HttpService
from kbcrawl.services.link_extractor import LinkExtractor
from kbcrawl.services.link_policy import AllowAllLinkPolicy
from kbcrawl import config as env


# Environment variables used by the container (read via `kbcrawl.config` helpers).
#
# DATABASE_URL (str | optional)
#   Connection string for the knowledge-source table. Required once a
#   repository is first used.
#
# USER_AGENT (str, default: "Mozilla/5.0 (compatible; KBCrawlBot/1.0)")
#   User-Agent header for outbound page fetches.
#
# HTTP_TIMEOUT (int seconds, default: 10)
#   Per-request timeout; lowered further when the crawl deadline is closer.
#
# KBCRAWL_MAX_RETRIES (int, default: 3)
#   Extra attempts after a transient fetch failure (4 attempts in total).
#
# KBCRAWL_BACKOFF_BASE_SECONDS (float seconds, default: 1.0)
#   Retry n waits base * 2**n seconds (1s, 2s, 4s).
#
# KBCRAWL_PROGRESS_INTERVAL_SECONDS / _BATCH_SIZE / _MAX_FAILURES (10 / 3 / 3)
#   Progress snapshots go out on the first page and every BATCH_SIZE pages,
#   at most once per INTERVAL; reporting switches off after MAX_FAILURES
#   consecutive sink errors.
#
# KBCRAWL_TIMEOUT_{SINGLE,LIMITED,DEEP}_SECONDS (30 / 300 / 600)
#   Overall crawl deadline per crawl mode.
#
# KBCRAWL_MAX_COMPLETED_RECORDS (int, default: 1000)
#   Finished crawls kept in the in-memory registry.
#
# KBCRAWL_RECOVERY_MESSAGE (str, default: "crawl found incomplete on startup")
#   Error message stored on sources found in progress when the API starts.
#
# KBCRAWL_API_HOST / KBCRAWL_API_PORT (default: 0.0.0.0 / 8000)
#   Bind address for the HTTP API started by run.py.
ENV = {
    "DATABASE_URL": env.get_optional_str_env("DATABASE_URL"),
    "USER_AGENT": env.get_str_env("USER_AGENT", "Mozilla/5.0 (compatible; KBCrawlBot/1.0)"),
    "HTTP_TIMEOUT": env.get_int_env("HTTP_TIMEOUT", 10),
    "KBCRAWL_MAX_RETRIES": env.get_int_env("KBCRAWL_MAX_RETRIES", 3),
    "KBCRAWL_BACKOFF_BASE_SECONDS": env.get_float_env("KBCRAWL_BACKOFF_BASE_SECONDS", 1.0),
    "KBCRAWL_PROGRESS_INTERVAL_SECONDS": env.get_float_env("KBCRAWL_PROGRESS_INTERVAL_SECONDS", 10.0),
    "KBCRAWL_PROGRESS_BATCH_SIZE": env.get_int_env("KBCRAWL_PROGRESS_BATCH_SIZE", 3),
    "KBCRAWL_PROGRESS_MAX_FAILURES": env.get_int_env("KBCRAWL_PROGRESS_MAX_FAILURES", 3),
    "KBCRAWL_MODE_TIMEOUTS": env.mode_timeouts(),
    "KBCRAWL_MAX_COMPLETED_RECORDS": env.get_int_env("KBCRAWL_MAX_COMPLETED_RECORDS", 1000),
    "KBCRAWL_RECOVERY_MESSAGE": env.get_str_env("KBCRAWL_RECOVERY_MESSAGE", DEFAULT_RECOVERY_MESSAGE),
    "KBCRAWL_API_HOST": env.get_str_env("KBCRAWL_API_HOST", "0.0.0.0"),
    "KBCRAWL_API_PORT": env.get_int_env("KBCRAWL_API_PORT", 8000),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for the KBCrawl application."""

    # Configuration
    config = providers.Configuration(default=ENV)

    # Database engine - Singleton to reuse connection pool
    db_engine = providers.Singleton(
        make_engine,
        database_url=config.DATABASE_URL
    )
    # Session factory bound to the engine
    session_factory = providers.Factory(
        sessionmaker,
        bind=db_engine,
        future=True
    )

    sources_repository = providers.Singleton(
        SourcesRepository,
        session_factory=session_factory
    )

    crawl_registry = providers.Singleton(
        InMemoryCrawlRegistry,
        max_completed_records=config.KBCRAWL_MAX_COMPLETED_RECORDS.as_(int),
    )

    # Services - Singleton instances
    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        timeout=config.HTTP_TIMEOUT.as_(int)
    )

    fetch_retrier = providers.Singleton(
        FetchRetrier,
        http_service=http_service,
        max_retries=config.KBCRAWL_MAX_RETRIES.as_(int),
        backoff_base_seconds=config.KBCRAWL_BACKOFF_BASE_SECONDS.as_(float),
    )

    link_extractor = providers.Singleton(LinkExtractor)

    text_extractor = providers.Singleton(HtmlTextExtractor)

    link_policy = providers.Singleton(AllowAllLinkPolicy)

    # One Crawler per job; callers supply job= and stop_event=
    crawler = providers.Factory(
        Crawler,
        fetch_retrier=fetch_retrier,
        link_extractor=link_extractor,
        text_extractor=text_extractor,
        link_policy=link_policy,
        progress_interval_seconds=config.KBCRAWL_PROGRESS_INTERVAL_SECONDS.as_(float),
        progress_batch_size=config.KBCRAWL_PROGRESS_BATCH_SIZE.as_(int),
        progress_max_failures=config.KBCRAWL_PROGRESS_MAX_FAILURES.as_(int),
    )

    crawl_runner = providers.Singleton(
        CrawlRunner,
        sources_repo=sources_repository,
        crawler_factory=crawler.provider,
        mode_timeouts=config.KBCRAWL_MODE_TIMEOUTS,
    )

    crawl_recovery = providers.Singleton(
        CrawlRecovery,
        sources_repo=sources_repository,
        message=config.KBCRAWL_RECOVERY_MESSAGE.as_(str),
    )
