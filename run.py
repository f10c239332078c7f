import argparse
import json
import logging
import sys

import uvicorn

from kbcrawl.api.server import create_app
from kbcrawl.container import Container
from kbcrawl.db.models import Base
from kbcrawl.domain.crawl_job import CrawlJob
from kbcrawl.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kbcrawl", description="Knowledge-base crawler")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="start the HTTP API (default)")
    sub.add_parser("init-db", help="create the knowledge-source table if missing")

    crawl = sub.add_parser("crawl", help="crawl a stored knowledge source and record its status")
    crawl.add_argument("source_id", type=int)
    crawl.add_argument("--actor", default="cli")

    crawl_url = sub.add_parser("crawl-url", help="crawl a URL without touching the database")
    crawl_url.add_argument("url")
    crawl_url.add_argument("--depth", type=int, default=1)
    crawl_url.add_argument("--pages", type=int, default=1)
    crawl_url.add_argument("--timeout", type=float, default=30.0)
    return parser


def _summary(result) -> dict:
    return {
        "pages": [{"url": p.url, "chars": len(p.content)} for p in result.pages],
        "stats": {
            "pagesFound": result.stats.pages_found,
            "pagesProcessed": result.stats.pages_processed,
            "totalTokens": result.stats.total_tokens,
            "crawlDuration": result.stats.crawl_duration,
            "failedPages": result.stats.failed_pages,
            "errors": result.stats.errors,
        },
        "stopped": result.stopped,
    }


def main(container: Container = None, argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = _build_parser().parse_args(argv)
    container = container or Container()
    command = args.command or "serve"

    if command == "init-db":
        Base.metadata.create_all(container.db_engine())
        logger.info("Knowledge-source schema is ready")
        return 0

    if command == "crawl":
        try:
            outcome = container.crawl_runner().run(args.source_id, actor=args.actor)
        except ConfigurationError as e:
            logger.error("Cannot crawl source %s: %s", args.source_id, e)
            return 2
        print(json.dumps({"status": outcome.status.value, "errorMessage": outcome.error_message, **_summary(outcome.result)}, indent=2))
        return 0 if outcome.status.value != "failed" else 1

    if command == "crawl-url":
        try:
            job = CrawlJob(start_url=args.url, max_depth=args.depth, max_pages=args.pages, overall_timeout=args.timeout)
        except ConfigurationError as e:
            logger.error("Invalid crawl: %s", e)
            return 2
        result = container.crawler(job=job).crawl()
        print(json.dumps(_summary(result), indent=2))
        return 0 if result.pages else 1

    # crawls run in-process, so anything still in progress died with the previous server
    container.crawl_recovery().recover()
    app = create_app(container)
    host = container.config.KBCRAWL_API_HOST()
    port = int(container.config.KBCRAWL_API_PORT())
    uvicorn.run(app, host=host, port=port)
    return 0


if __name__ == '__main__':
    sys.exit(main())
