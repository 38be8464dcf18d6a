"""Per-file working directory management."""

import hashlib
from pathlib import Path

from remuxarr.errors import WorkspaceError
from remuxarr.utils.logger import get_logger

logger = get_logger(__name__)


def working_dir_for(container: Path) -> Path:
    """Derive the working directory for a container.

    The name only depends on the container's file name, so repeated runs on
    the same file reuse the same directory. It lives next to the container so
    the final copy back stays on one filesystem.
    """
    stem = container.stem
    digest = hashlib.sha256(stem.encode("utf-8")).hexdigest()
    return container.parent / f"{stem}_{digest}"


class WorkingArea:
    """Scratch directory owned by one container session."""

    def __init__(self, container: Path):
        self.container = container
        self.path = working_dir_for(container)

    def create(self) -> Path:
        """Create the directory if needed.

        Raises:
            WorkspaceError: If the directory cannot be created
        """
        try:
            self.path.mkdir(exist_ok=True)
        except OSError as e:
            logger.error(
                "Failed to create working directory",
                file=str(self.container),
                directory=str(self.path),
                error=str(e),
            )
            raise WorkspaceError(f"Cannot create working directory {self.path}: {e}") from e

        logger.debug("Working directory ready", directory=str(self.path))
        return self.path

    def contains(self, path: Path) -> bool:
        return path.parent == self.path

    def remove(self) -> bool:
        """Remove the directory. Only succeeds when it is empty."""
        if not self.path.exists():
            return True
        try:
            self.path.rmdir()
        except OSError as e:
            logger.warning(
                "Failed to remove working directory",
                directory=str(self.path),
                error=str(e),
            )
            return False

        logger.debug("Removed working directory", directory=str(self.path))
        return True
