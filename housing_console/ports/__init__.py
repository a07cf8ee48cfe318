from .storage import FileSessionStorage, MemorySessionStorage, SessionStorage

__all__ = ["SessionStorage", "FileSessionStorage", "MemorySessionStorage"]
