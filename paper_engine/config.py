"""
Service configuration from environment variables.

Environment files are loaded with python-dotenv: `.env.local` (local dev,
highest priority) or `.env`, looked up in the working directory. Values from
the file override the process environment; with neither file present only the
process environment is used.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    cache_path: str = "paper-engine-cache.pec"
    host: str = "127.0.0.1"
    port: int = 42069
    log_level: str = "INFO"
    log_file: str = "logs/paper-engine.log"


def load_env(base_dir: Path = None) -> None:
    """Load .env.local (preferred) or .env into os.environ"""
    base_dir = Path(base_dir) if base_dir else Path.cwd()
    env_local = base_dir / ".env.local"
    env_file = base_dir / ".env"

    if env_local.exists():
        load_dotenv(env_local, override=True)
    elif env_file.exists():
        load_dotenv(env_file, override=True)


def load_settings() -> Settings:
    """Build Settings from the current environment"""
    defaults = Settings()
    return Settings(
        cache_path=os.getenv("PAPER_ENGINE_CACHE_PATH", defaults.cache_path),
        host=os.getenv("PAPER_ENGINE_HOST", defaults.host),
        port=int(os.getenv("PAPER_ENGINE_PORT", str(defaults.port))),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        log_file=os.getenv("PAPER_ENGINE_LOG_FILE", defaults.log_file),
    )
