"""Environment-driven settings for the watch party server."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv


def _parse_allowed_origins(raw: Optional[str]) -> Union[str, List[str]]:
    """Comma-separated origins, or ``*`` (allow all) when unset."""
    if not raw or raw.strip() == "*":
        return "*"
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class Settings:
    port: int = 3000
    host: str = "0.0.0.0"
    log_level: str = "INFO"
    static_dir: Path = Path("public")
    video_path: Path = Path("public") / "sample-video.mp4"
    allowed_origins: Union[str, List[str]] = "*"
    reload: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        static_dir = Path(os.getenv("STATIC_DIR", "public"))
        video_path = os.getenv("VIDEO_PATH")
        return cls(
            port=int(os.getenv("PORT", "3000")),
            host=os.getenv("HOST", "0.0.0.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            static_dir=static_dir,
            video_path=Path(video_path) if video_path else static_dir / "sample-video.mp4",
            allowed_origins=_parse_allowed_origins(os.getenv("WS_ALLOWED_ORIGINS")),
            reload=os.getenv("RELOAD", "false").lower() == "true",
        )


@lru_cache()
def get_settings() -> Settings:
    """Load settings once, reading a local .env file if present."""
    load_dotenv()
    return Settings.from_env()
