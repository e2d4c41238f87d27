from .events import AuthExpired, AuthExpiredHandler
from .token_store import FileTokenStore, InMemoryTokenStore, TokenProvider

__all__ = [
    "AuthExpired",
    "AuthExpiredHandler",
    "FileTokenStore",
    "InMemoryTokenStore",
    "TokenProvider",
]
