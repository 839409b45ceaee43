from interaction_data.storage.backends import STORAGE_ERRORS, KPIStorage, MemoryStorage, SQLStorage, RedisStorage
from interaction_data.storage.model import InteractionDataModel

__all__ = ["STORAGE_ERRORS", "KPIStorage", "MemoryStorage", "SQLStorage", "RedisStorage", "InteractionDataModel"]
