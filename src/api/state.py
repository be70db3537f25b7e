from typing import Optional

from api.backend import BackendAPI
from storage.options_store import OptionsStore

# Global instances initialized at startup (or lazily on first request)
backend: Optional[BackendAPI] = None
options_store: Optional[OptionsStore] = None
