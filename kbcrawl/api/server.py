from fastapi import FastAPI

from kbcrawl.api.routers import create_crawls_router, create_sources_router, create_systems_router
from kbcrawl.container import ENV, Container


def create_app(container: Container = None) -> FastAPI:
    """Build the FastAPI app with routers wired from `container`."""
    container = container or Container()
    app = FastAPI(title="KBCrawl", description="Knowledge-base crawl control API")
    crawl_registry = container.crawl_registry()

    app.include_router(create_systems_router(ENV))
    app.include_router(
        create_sources_router(
            container.sources_repository(),
            container.crawl_runner(),
            crawl_registry,
        )
    )
    app.include_router(create_crawls_router(crawl_registry))
    app.state.container = container
    return app
