from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a single item within a batch mutation."""

    hash: str | None
    success: bool
    error: str | None = None
    shortcode: str | None = None
    short_url: str | None = None
    target: str | None = None
    expires_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        # fmt: off
        data = {
            'hash': self.hash,
            'success': self.success,
            'error': self.error,
            'shortCode': self.shortcode,
            'shortUrl': self.short_url,
            'url': self.target,
            'expiresAt': self.expires_at,
        }
        # fmt: on
        return {k: v for k, v in data.items() if v is not None or k in ('hash', 'success')}


@dataclass(frozen=True)
class BatchResult:
    """Partition of batch item outcomes into successes and failures."""

    successes: list[OperationResult] = field(default_factory=list)
    failures: list[OperationResult] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: list[OperationResult]) -> 'BatchResult':
        return cls(
            successes=[r for r in results if r.success],
            failures=[r for r in results if not r.success],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'successes': [r.to_dict() for r in self.successes],
            'failures': [r.to_dict() for r in self.failures],
        }


@dataclass
class SweepResult:
    """Summary of one expiration sweep."""

    deleted_count: int = 0
    cache_cleaned_count: int = 0
    error_messages: list[str] = field(default_factory=list)
    execution_time_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            'deletedCount': self.deleted_count,
            'cacheCleanedCount': self.cache_cleaned_count,
            'errorMessages': list(self.error_messages),
            'executionTimeMs': self.execution_time_ms,
        }


@dataclass(frozen=True)
class RedirectTarget:
    location: str
    hash: str
    shortcode: str
    domain: str


@dataclass(frozen=True)
class PreviewDocument:
    html: str
    hash: str
    location: str | None = None


@dataclass(frozen=True)
class NotFound:
    hash: str
