"""Protocol (interface) definitions for services."""

from typing import List, Optional, Protocol

from kbcrawl.domain.source import KnowledgeSource, StatusUpdate


class StatusSink(Protocol):
    """Persists crawl progress and final status for a knowledge source.

    The crawler calls into it but never owns it; failures raised from here
    are logged by callers and never change a crawl's outcome.
    """

    def update_status(self, source_id: int, update: StatusUpdate, actor: str) -> None:
        ...


class SourceProvider(Protocol):
    """Minimal read interface for knowledge-source configuration."""

    def get_source(self, source_id: int) -> Optional[KnowledgeSource]:
        ...

    def list_sources(self) -> List[KnowledgeSource]:
        ...
