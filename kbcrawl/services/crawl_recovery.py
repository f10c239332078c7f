import logging
from typing import List

logger = logging.getLogger(__name__)

DEFAULT_RECOVERY_MESSAGE = "crawl found incomplete on startup"


class CrawlRecovery:
    """Best-effort recovery for crawls left `in_progress` by a previous process.

    A crawl runs inside the process that started it, so on startup any source
    still marked in progress belongs to a crawl that died with its process.
    Those sources are marked failed so they can be crawled again.
    """

    def __init__(self, *, sources_repo, message: str = DEFAULT_RECOVERY_MESSAGE) -> None:
        self.sources_repo = sources_repo
        self.message = message

    def recover(self) -> List[int]:
        """Mark incomplete crawls failed; return the recovered source ids."""
        logger.info("Recovery: scanning knowledge sources for incomplete crawls")
        try:
            recovered = self.sources_repo.mark_incomplete_crawls(self.message)
        except Exception:
            logger.exception("Recovery: failed marking incomplete crawls")
            return []

        for source_id in recovered:
            logger.warning("Recovery: source %s was left in progress; marked failed", source_id)
        logger.info("Recovery: marked %d incomplete crawl(s)", len(recovered))
        return list(recovered)
