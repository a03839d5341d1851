from .config import WriterConfig, load_config
from .storage import InMemoryStorage, JsonFileStorage, Storage

__all__ = ["WriterConfig", "load_config", "InMemoryStorage", "JsonFileStorage", "Storage"]
