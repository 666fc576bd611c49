import os
from pathlib import Path

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self) -> None:
        self.TEMPLATES_DIR: Path = Path(os.getenv("CAPTION_TEMPLATES_DIR", "templates"))
        self.RESOURCE_ROOT: Path = Path(os.getenv("CAPTION_RESOURCE_ROOT", "."))
        self.STRICT_FIELDS: bool = _as_bool(os.getenv("CAPTION_STRICT_FIELDS"), True)
        self.LOG_LEVEL: str = os.getenv("CAPTION_LOG_LEVEL", "INFO").upper()


settings = Settings()
