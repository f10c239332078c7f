import pytest

from kbcrawl.domain.crawl_result import CrawlStatus
from kbcrawl.domain.source import CrawlBudgets, CrawlSettings, KnowledgeSource
from kbcrawl.exceptions import InvalidCrawlConfigError


def test_single_mode_budgets():
    settings = CrawlSettings.from_dict({"mode": "single"})
    assert settings.budgets() == CrawlBudgets(max_depth=1, max_pages=1, overall_timeout=30.0)


def test_limited_mode_defaults_and_explicit_pages():
    assert CrawlSettings.from_dict({"mode": "limited"}).budgets() == CrawlBudgets(2, 10, 300.0)
    assert CrawlSettings.from_dict({"mode": "limited", "maxPages": 25}).budgets() == CrawlBudgets(2, 25, 300.0)


def test_deep_mode_defaults_and_explicit_depth():
    assert CrawlSettings.from_dict({"mode": "deep"}).budgets() == CrawlBudgets(2, 100, 600.0)
    assert CrawlSettings.from_dict({"mode": "deep", "maxDepth": 3}).budgets() == CrawlBudgets(3, 100, 600.0)


def test_budgets_use_configured_timeouts():
    settings = CrawlSettings.from_dict({"mode": "limited"})
    budgets = settings.budgets({"single": 5, "limited": 42, "deep": 99})
    assert budgets.overall_timeout == 42.0


@pytest.mark.parametrize(
    "config,message",
    [
        ({}, "Crawl mode is required"),
        ({"mode": "turbo"}, "Invalid crawl mode"),
        ({"mode": "single", "maxPages": 3}, "Single crawl mode should not specify maxPages"),
        ({"mode": "single", "maxDepth": 2}, "Single crawl mode should not specify maxDepth"),
        ({"mode": "limited", "maxDepth": 2}, "Limited crawl mode should not specify maxDepth"),
        ({"mode": "limited", "maxPages": 0}, "between 1 and 50"),
        ({"mode": "limited", "maxPages": 51}, "between 1 and 50"),
        ({"mode": "limited", "maxPages": "5"}, "maxPages must be an integer"),
        ({"mode": "deep", "maxPages": 10}, "Deep crawl mode should not specify maxPages"),
        ({"mode": "deep", "maxDepth": 4}, "maxDepth must be 2 or 3"),
        ({"mode": "deep", "maxDepth": True}, "maxDepth must be an integer"),
    ],
)
def test_invalid_configs_are_rejected(config, message):
    with pytest.raises(InvalidCrawlConfigError, match=message):
        CrawlSettings.from_dict(config)


def test_non_mapping_config_is_rejected():
    with pytest.raises(InvalidCrawlConfigError):
        CrawlSettings.from_dict(None)


def test_to_dict_omits_unset_limits():
    assert CrawlSettings.from_dict({"mode": "single"}).to_dict() == {"mode": "single"}
    assert CrawlSettings.from_dict({"mode": "deep", "maxDepth": 3}).to_dict() == {"mode": "deep", "maxDepth": 3}


def test_knowledge_source_defaults():
    source = KnowledgeSource(source_id=None, url="https://example.com/")
    assert source.namespace == "default"
    assert source.crawl_status == CrawlStatus.PENDING
    assert source.settings().mode == "single"
