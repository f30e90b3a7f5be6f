"""Runtime settings, read from the environment (and a ``.env`` file if present)."""

import os
from pydantic import BaseModel
from dotenv import load_dotenv

CF_API_URL = "https://codeforces.com/api"
BACKEND_URL = "http://localhost:3000"

def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes"}

class Settings(BaseModel):
    api_url: str = CF_API_URL
    backend_url: str = BACKEND_URL
    min_request_interval: float = 2.0
    request_timeout: float = 15.0
    timezone: str = "UTC"
    handle_file: str = ".cf_handle.json"
    log_level: str = "INFO"
    log_visits: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            api_url=os.getenv("CF_API_URL", CF_API_URL).rstrip("/"),
            backend_url=os.getenv("CF_BACKEND_URL", BACKEND_URL).rstrip("/"),
            min_request_interval=float(os.getenv("CF_MIN_REQUEST_INTERVAL", "2")),
            request_timeout=float(os.getenv("CF_REQUEST_TIMEOUT", "15")),
            timezone=os.getenv("CF_TIMEZONE", "UTC"),
            handle_file=os.getenv("CF_HANDLE_FILE", ".cf_handle.json"),
            log_level=os.getenv("CF_LOGLEVEL", "INFO").upper(),
            log_visits=_flag(os.getenv("CF_LOG_VISITS", "1")),
        )
