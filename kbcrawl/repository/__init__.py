from .sources import SourcesRepository

__all__ = ["SourcesRepository"]
