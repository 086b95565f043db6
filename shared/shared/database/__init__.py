from shared.database.functions import greatest
from shared.database.postgres import Base, get_async_engine
from shared.database.upsert import upsert

__all__ = [
    "Base",
    "get_async_engine",
    "greatest",
    "upsert",
]
