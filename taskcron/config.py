"""Configuration management - taskcron daemon settings."""
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Daemon settings."""

    # Storage
    db_path: Path = field(default_factory=lambda: Path.home() / ".taskcron" / "tasks.db")

    # Clock
    timezone: str = "Asia/Shanghai"

    # First boot
    seed_examples: bool = True

    # Run the scripted add/remove demonstration after startup
    demo: bool = False

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            db_path=Path(os.getenv(
                "TASKCRON_DB_PATH", str(Path.home() / ".taskcron" / "tasks.db")
            )).expanduser(),
            timezone=os.getenv("TASKCRON_TIMEZONE", "Asia/Shanghai"),
            seed_examples=_env_flag("TASKCRON_SEED_EXAMPLES", "true"),
            demo=_env_flag("TASKCRON_DEMO"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


# Global settings instance
settings = Settings.from_env()
