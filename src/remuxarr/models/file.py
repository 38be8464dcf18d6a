"""Container file data models."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal, Optional


class ContainerType(Enum):
    """Supported container formats."""

    MKV = "mkv"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_probe(cls, type_name: Optional[str]) -> "ContainerType":
        """Map mkvmerge's container type (e.g. "Matroska") to a ContainerType."""
        if type_name and ("matroska" in type_name.lower() or "webm" in type_name.lower()):
            return cls.MKV
        return cls.UNSUPPORTED


@dataclass
class ProcessResult:
    """Result of processing a single file."""

    status: Literal["success", "skipped", "failed", "error", "dry_run"]
    file_path: Optional[Path] = None
    stripped: int = 0
    extracted: int = 0
    converted: int = 0
    merged: int = 0
    changed: bool = False  # Whether the container itself was rewritten
    reason: Optional[str] = None  # Reason for skip/failure
    error: Optional[str] = None  # Error message if failed

    def _counts(self) -> str:
        return (
            f"stripped {self.stripped}, extracted {self.extracted}, "
            f"converted {self.converted}, merged {self.merged}"
        )

    def __str__(self) -> str:
        """Human-readable representation."""
        name = self.file_path.name if self.file_path else "<unknown>"
        if self.status == "success":
            return f"✓ {name}: {self._counts()}"
        elif self.status == "skipped":
            return f"⊘ {name}: Skipped ({self.reason})"
        elif self.status == "dry_run":
            return f"⊙ {name}: Would have {self._counts()} (dry run)"
        else:
            return f"✗ {name}: Failed ({self.error or self.reason})"
