from landchain.core.config import settings
from landchain.core.database import get_db, Base, get_engine

__all__ = ["settings", "get_db", "Base", "get_engine"]
