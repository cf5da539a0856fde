from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class BulkSummary:
    """Outcome of a row-by-row operation that keeps going after a failed row."""

    processed: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def succeed(self) -> None:
        self.processed += 1
        self.successful += 1

    def skip(self) -> None:
        self.processed += 1
        self.skipped += 1

    def fail(self, ref: Any, message: str) -> None:
        self.processed += 1
        self.failed += 1
        self.errors.append({"ref": ref, "error": message})
