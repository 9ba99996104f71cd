"""Server settings read from the environment (and a .env file, if any)."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from stateflow.execution.node_runner import DEFAULT_TIMEOUT

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "stateflow.db"


@dataclass
class Settings:
    db_path: Path = DEFAULT_DB_PATH
    # use comma-separated values for multiple origins, or "*" for all (development only)
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    node_run_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()  # load environment variables from .env file
        return cls(
            db_path=Path(os.getenv("STATEFLOW_DB_PATH", str(DEFAULT_DB_PATH))),
            cors_origins=[
                origin.strip()
                for origin in os.getenv("CORS_ORIGINS", "*").split(",")
                if origin.strip()
            ],
            node_run_timeout=float(os.getenv("NODE_RUN_TIMEOUT", str(DEFAULT_TIMEOUT))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
