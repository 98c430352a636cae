"""
Runtime configuration: directories, thresholds and scheduling knobs.

Values come from the constructor, or from ALIENSHOT_* environment
variables (optionally loaded from a .env file) via PipelineConfig.from_env().
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BASE_DIR = Path.home() / "DCIM"
WATCH_DIR_NAME = "Imaging Edge Mobile"
EDITED_DIR_NAME = "alienshotEdited"
ARCHIVE_DIR_NAME = "alienshotRaw"

MIN_FILE_SIZE = 1024  # below this a capture is assumed to be still transferring
IMAGE_EXTENSIONS = (".jpg", ".jpeg")
IGNORED_PREFIXES = (".pending-",)


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the orchestrator, watcher and job queue."""

    watch_dir: Path = DEFAULT_BASE_DIR / WATCH_DIR_NAME
    edited_dir: Path = DEFAULT_BASE_DIR / EDITED_DIR_NAME
    archive_dir: Path = DEFAULT_BASE_DIR / ARCHIVE_DIR_NAME
    min_file_size: int = MIN_FILE_SIZE
    extensions: tuple[str, ...] = IMAGE_EXTENSIONS
    ignored_prefixes: tuple[str, ...] = IGNORED_PREFIXES
    settle_delay: float = 0.5  # seconds between detection and submission
    poll_interval: float = 1.0
    parallel_filters: bool = False
    create_dirs: bool = True
    max_workers: int = 1

    def __post_init__(self):
        for name in ("watch_dir", "edited_dir", "archive_dir"):
            object.__setattr__(self, name, Path(getattr(self, name)).expanduser())
        object.__setattr__(
            self, "extensions", tuple(self._normalize_ext(e) for e in self.extensions)
        )
        object.__setattr__(self, "ignored_prefixes", tuple(self.ignored_prefixes))

        if self.min_file_size <= 0:
            raise ValueError("min_file_size must be positive")
        if self.settle_delay < 0 or self.poll_interval <= 0:
            raise ValueError("settle_delay must be >= 0 and poll_interval > 0")
        if not self.extensions:
            raise ValueError("At least one image extension is required")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @staticmethod
    def _normalize_ext(ext: str) -> str:
        ext = ext.strip().lower()
        return ext if ext.startswith(".") else f".{ext}"

    @classmethod
    def from_env(cls, env_file: str | Path | None = None, **overrides) -> "PipelineConfig":
        """
        Build a configuration from ALIENSHOT_* environment variables.

        Args:
            env_file: Optional .env file to load first (existing variables win)
            **overrides: Explicit values that take precedence over the environment

        Recognized variables: ALIENSHOT_BASE_DIR, ALIENSHOT_WATCH_DIR,
        ALIENSHOT_EDITED_DIR, ALIENSHOT_ARCHIVE_DIR, ALIENSHOT_MIN_FILE_SIZE,
        ALIENSHOT_EXTENSIONS (comma separated), ALIENSHOT_SETTLE_DELAY,
        ALIENSHOT_POLL_INTERVAL, ALIENSHOT_PARALLEL_FILTERS, ALIENSHOT_MAX_WORKERS.
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        base_dir = Path(os.getenv("ALIENSHOT_BASE_DIR", str(DEFAULT_BASE_DIR)))
        values = {
            "watch_dir": os.getenv("ALIENSHOT_WATCH_DIR", str(base_dir / WATCH_DIR_NAME)),
            "edited_dir": os.getenv("ALIENSHOT_EDITED_DIR", str(base_dir / EDITED_DIR_NAME)),
            "archive_dir": os.getenv("ALIENSHOT_ARCHIVE_DIR", str(base_dir / ARCHIVE_DIR_NAME)),
            "min_file_size": int(os.getenv("ALIENSHOT_MIN_FILE_SIZE", str(MIN_FILE_SIZE))),
            "settle_delay": float(os.getenv("ALIENSHOT_SETTLE_DELAY", "0.5")),
            "poll_interval": float(os.getenv("ALIENSHOT_POLL_INTERVAL", "1.0")),
            "parallel_filters": _env_flag("ALIENSHOT_PARALLEL_FILTERS"),
            "max_workers": int(os.getenv("ALIENSHOT_MAX_WORKERS", "1")),
        }
        extensions = os.getenv("ALIENSHOT_EXTENSIONS")
        if extensions:
            values["extensions"] = tuple(e for e in extensions.split(",") if e.strip())

        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**values)
        logger.debug(f"Loaded configuration: {config}")
        return config

    def with_overrides(self, **overrides) -> "PipelineConfig":
        """Copy of this configuration with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def ensure_dirs(self) -> None:
        """Create the edited-output and archive directories if missing."""
        for directory in (self.edited_dir, self.archive_dir):
            if not directory.exists():
                logger.info(f"Creating directory: {directory}")
                directory.mkdir(parents=True, exist_ok=True)

    def is_image_name(self, name: str) -> bool:
        """True for names with a configured extension and no ignored prefix."""
        if any(name.startswith(prefix) for prefix in self.ignored_prefixes):
            return False
        return Path(name).suffix.lower() in self.extensions


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}
