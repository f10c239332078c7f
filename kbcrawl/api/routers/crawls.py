from fastapi import APIRouter, HTTPException

from kbcrawl.services.crawl_registry import InMemoryCrawlRegistry


def create_crawls_router(crawl_registry: InMemoryCrawlRegistry):
    router = APIRouter(prefix="/crawls", tags=["Crawls"])

    @router.get("")
    def list_active():
        return crawl_registry.list_active()

    @router.get("/{crawl_id}")
    def get_crawl(crawl_id: str):
        rec = crawl_registry.get(crawl_id)
        if rec is None:
            raise HTTPException(status_code=404, detail="crawl not found")
        return rec

    @router.post("/{crawl_id}/cancel")
    def cancel(crawl_id: str):
        if not crawl_registry.cancel(crawl_id):
            raise HTTPException(status_code=404, detail="crawl not found or not running")
        return {"crawl_id": crawl_id, "status": "cancelled"}

    return router
