from dataclasses import dataclass, field
from typing import Tuple

USER_AGENT = "concurl/2.0"
DEFAULT_CONCURRENCY = 20
DEFAULT_PER_DOMAIN_DELAY = 5.0
DEFAULT_OUTPUT_DIR = "out"
REQUEST_TIMEOUT = 30.0
MAX_RESPONSE_SIZE = 10 * 1024 * 1024  # 10 MiB
MAX_URL_LENGTH = 2048  # bytes
MAX_REDIRECTS = 10
UNKNOWN_DOMAIN = "unknown"
HASH_PREFIX_LEN = 16
ARTIFACT_DELIMITER = "------"
READ_CHUNK_SIZE = 64 * 1024
LOG_MAX_BYTES = 5_000_000
LOG_BACKUP_COUNT = 3


@dataclass(frozen=True)
class FetchConfig:
    """Process-wide settings, fixed at startup and shared by every worker."""
    concurrency: int = DEFAULT_CONCURRENCY
    delay: float = DEFAULT_PER_DOMAIN_DELAY
    output_dir: str = DEFAULT_OUTPUT_DIR
    timeout: float = REQUEST_TIMEOUT
    max_size: int = MAX_RESPONSE_SIZE
    insecure: bool = False
    user_agent: str = USER_AGENT
    verbose: bool = False
    headers: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")
        if self.max_size <= 0:
            raise ValueError(f"max_size must be > 0, got {self.max_size}")

    @property
    def queue_size(self) -> int:
        return self.concurrency * 2
