from .engine import make_engine
from .models import Base, RagUrl

__all__ = [
    "make_engine",
    "Base",
    "RagUrl",
]
