import os
import threading

def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ["true", "1", "yes", "on"]

class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        self.DATABASE_URL = os.environ.get("DATABASE_URL","sqlite:///pythy.db")
        # Bootstrap settings
        self.SERIALIZE_BOOTSTRAP = _flag("SERIALIZE_BOOTSTRAP", "false")
        # Impersonation settings
        self.ENABLE_IMPERSONATION = _flag("ENABLE_IMPERSONATION", "true")

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

settings = BackendSettings()
