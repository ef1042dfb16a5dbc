"""
Recording Artifact

Finalized recording: one immutable byte buffer with a name and MIME type.

materialize() writes the downloadable file (the transient, revocable
resource); revoke() deletes it. The bytes stay in memory either way.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from config.settings import RECORDING_DOWNLOAD_DIR

logger = logging.getLogger(__name__)


@dataclass
class RecordingArtifact:
    name: str
    mime_type: str
    data: bytes
    chunk_count: int = 0
    created_at: float = field(default_factory=time.time)

    path: Optional[Path] = field(default=None, repr=False)
    revoked: bool = field(default=False, repr=False)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)

    def materialize(self, directory: Path = RECORDING_DOWNLOAD_DIR) -> Path:
        """
        Write the artifact to directory/name.

        Calling it again returns the existing file.

        Raises:
            RuntimeError: If the artifact was revoked
        """
        if self.revoked:
            raise RuntimeError(f"Artifact {self.name} was revoked")

        if self.path is not None and self.path.exists():
            return self.path

        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.name
        path.write_bytes(self.data)
        self.path = path

        logger.info(f"Recording saved: {path} ({self.size_mb:.1f} MB)")
        return path

    def revoke(self) -> bool:
        """
        Release the downloadable file. Idempotent.

        Returns:
            True if this call revoked the artifact
        """
        if self.revoked:
            return False
        self.revoked = True

        if self.path is not None:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not delete {self.path}: {e}")
            self.path = None

        logger.debug(f"Artifact revoked: {self.name}")
        return True

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "chunk_count": self.chunk_count,
            "created_at": self.created_at,
            "path": str(self.path) if self.path else None,
        }
