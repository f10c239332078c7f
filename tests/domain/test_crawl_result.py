from kbcrawl.domain.crawl_result import (
    CrawlStats,
    CrawlStatus,
    PageResult,
    build_crawl_stats,
    derive_crawl_status,
)


def _stats(processed=1, failed=None, errors=None):
    return CrawlStats(
        pages_found=processed + len(failed or []),
        pages_processed=processed,
        total_tokens=0,
        crawl_duration=0,
        failed_pages=failed or [],
        errors=errors or [],
    )


def test_build_stats_sums_content_and_converts_duration():
    pages = [PageResult("http://example.com/", "hello"), PageResult("http://example.com/a", "abc")]
    stats = build_crawl_stats(
        seen_count=3,
        pages=pages,
        failed_pages=["http://example.com/b"],
        errors=["Error crawling http://example.com/b: HTTP 404"],
        started_at=10.0,
        finished_at=11.25,
    )
    assert stats.pages_found == 3
    assert stats.pages_processed == 2
    assert stats.total_tokens == 8
    assert stats.crawl_duration == 1250
    assert stats.failed_pages == ["http://example.com/b"]
    assert len(stats.errors) == 1


def test_build_stats_never_reports_negative_duration():
    stats = build_crawl_stats(seen_count=0, pages=[], failed_pages=[], errors=[], started_at=5.0, finished_at=4.0)
    assert stats.crawl_duration == 0


def test_build_stats_copies_lists():
    failed = ["http://example.com/x"]
    stats = build_crawl_stats(seen_count=1, pages=[], failed_pages=failed, errors=[], started_at=0, finished_at=0)
    failed.append("http://example.com/y")
    assert stats.failed_pages == ["http://example.com/x"]


def test_status_success_when_clean():
    assert derive_crawl_status(_stats(processed=2)) == CrawlStatus.SUCCESS


def test_status_partial_when_some_pages_failed():
    status = derive_crawl_status(_stats(processed=2, failed=["u"], errors=["Error crawling u: boom"]))
    assert status == CrawlStatus.PARTIAL_SUCCESS


def test_status_partial_when_only_errors():
    assert derive_crawl_status(_stats(processed=1, errors=["Crawl aborted: cancelled"])) == CrawlStatus.PARTIAL_SUCCESS


def test_status_failed_when_nothing_processed():
    assert derive_crawl_status(_stats(processed=0)) == CrawlStatus.FAILED
    assert derive_crawl_status(_stats(processed=0, failed=["u"])) == CrawlStatus.FAILED


def test_status_values_match_stored_strings():
    assert [s.value for s in CrawlStatus] == ["pending", "in_progress", "success", "partial_success", "failed"]
