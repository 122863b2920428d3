"""Configuration for ring buffers built from the environment."""
import os
from dataclasses import dataclass, asdict
from dotenv import load_dotenv

load_dotenv()

LOG_LEVELS = ["debug", "info", "warn", "error"]


@dataclass
class BufferConfig:
    """Settings for a named ring buffer and its observability."""

    name: str = "ringbuf"
    capacity: int = 1024

    # Observability
    log_level: str = "info"
    enable_metrics: bool = False
    metrics_port: int = 9102

    @classmethod
    def from_env(cls) -> "BufferConfig":
        """Load configuration from environment variables."""
        return cls(
            name=os.getenv("RINGBUF_NAME", "ringbuf"),
            capacity=int(os.getenv("RINGBUF_CAPACITY", "1024")),
            # RINGBUF_LOG_LEVEL wins over the generic LOG_LEVEL
            log_level=os.getenv("RINGBUF_LOG_LEVEL", os.getenv("LOG_LEVEL", "info")).lower(),
            enable_metrics=os.getenv("RINGBUF_ENABLE_METRICS", "false").lower() == "true",
            metrics_port=int(os.getenv("RINGBUF_METRICS_PORT", "9102")),
        )

    def validate(self) -> None:
        """Validate configuration."""
        if not self.name:
            raise ValueError("RINGBUF_NAME cannot be empty")

        if self.capacity <= 0:
            raise ValueError(f"RINGBUF_CAPACITY must be positive, got {self.capacity}")

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.enable_metrics and not 1 <= self.metrics_port <= 65535:
            raise ValueError(f"RINGBUF_METRICS_PORT must be 1-65535, got {self.metrics_port}")

    def as_dict(self) -> dict:
        return asdict(self)
