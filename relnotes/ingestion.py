"""
Changelog file ingestion and persistence.

Loads changelog files through the InputInterface so every document is
validated and normalized the same way, and writes edited changelogs back
atomically.
"""

import os
import stat
import tempfile
import threading
from pathlib import Path

from relnotes.core.input_interface import InputInterface, SourceDocument
from relnotes.core.logging_config import get_logger

logger = get_logger("ingestion")


class ChangelogLoader:
    """Loads UTF-8 changelog files into SourceDocuments."""

    def __init__(self, input_interface: InputInterface | None = None) -> None:
        self._input_interface = input_interface or InputInterface()

    def read_raw(self, file_path: Path) -> str:
        """
        Read a file's exact text, line endings and trailing newlines included.

        Raises:
            FileNotFoundError: If file doesn't exist
            UnicodeDecodeError: If the file is not valid UTF-8
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        text = file_path.read_bytes().decode("utf-8")
        logger.debug("Read %d characters from %s", len(text), file_path)
        return text

    def load(self, file_path: Path) -> SourceDocument:
        """
        Load a changelog file.

        Args:
            file_path: Path to the markdown file

        Returns:
            Validated SourceDocument whose source is the file path

        Raises:
            FileNotFoundError: If file doesn't exist
            UnicodeDecodeError: If the file is not valid UTF-8
            InputError: If the file is empty or too large
        """
        return self.load_text(self.read_raw(file_path), source=str(file_path))

    def load_text(self, text: str, *, source: str) -> SourceDocument:
        return self._input_interface.accept(text, source=source)

    def load_batch(
        self, file_paths: list[Path]
    ) -> tuple[list[SourceDocument], list[tuple[Path, Exception]]]:
        """
        Load multiple changelogs with failure isolation.

        Returns:
            Tuple of (loaded_documents, failed_paths_with_exceptions)
        """
        documents: list[SourceDocument] = []
        failures: list[tuple[Path, Exception]] = []

        for file_path in file_paths:
            try:
                documents.append(self.load(file_path))
            except Exception as e:
                logger.warning("Failed to load %s: %s", file_path, e)
                failures.append((file_path, e))

        return documents, failures


def _default_mode() -> int:
    # os.umask can only be read by setting it; callers hold the writer lock
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class ChangelogWriter:
    """
    Thread-safe atomic writer for changelog files.

    Text is written to a temporary file next to the real target and moved
    into place with ``os.replace``, so readers never observe a partial file.
    Symlinks are followed and the target's permission bits are kept.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

    def write(self, file_path: Path, text: str) -> None:
        with self._lock:
            target = file_path.resolve()
            if target.exists():
                mode = stat.S_IMODE(target.stat().st_mode)
            else:
                mode = _default_mode()

            fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                    f.write(text)
                os.chmod(tmp_name, mode)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            logger.info("Wrote %s", file_path)
