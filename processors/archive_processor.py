"""
ArchiveInspector module

Walks the entries of a zip container (plain zip or an Office Open XML
package) and decides whether it is safe to accept.
- Rejects containers that cannot be parsed (fail-closed).
- Rejects entry paths that escape the extraction root (zip slip).
- Rejects blocked inner payloads (executables, scripts, libraries, installers).
- Rejects macro-enabled Office documents (vbaProject.bin part).

Nothing is extracted or decompressed: only the central directory is read.

API:
class ArchiveInspector:
    def inspect(self, data: bytes, ext: str) -> InspectionResult
"""

from __future__ import annotations

import io
import posixpath
import re
import zipfile
from typing import FrozenSet, List, Optional, Protocol

from config import policy
from config.settings import settings
from models.schemas import ArchiveEntry, InspectionResult
from services.extension_table import ExtensionTable
from utils.logger import get_logger

logger = get_logger(__name__)

_DRIVE_ROOT_RE = re.compile(r"^[A-Za-z]:")


class ArchiveReadError(Exception):
    """Raised when a buffer cannot be opened as an archive."""


class EntryLister(Protocol):
    def list_entries(self, data: bytes) -> List[ArchiveEntry]:
        ...


def _entry_extension(path: str) -> str:
    leaf = posixpath.basename(path.replace("\\", "/").rstrip("/"))
    return posixpath.splitext(leaf)[1].lstrip(".").lower()


class ZipEntryLister:
    """Lists entries from the zip central directory."""

    def list_entries(self, data: bytes) -> List[ArchiveEntry]:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                return [
                    ArchiveEntry(
                        path=info.filename,
                        extension=_entry_extension(info.filename),
                        is_dir=info.is_dir(),
                    )
                    for info in zf.infolist()
                ]
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError, EOFError) as e:
            raise ArchiveReadError(str(e)) from e


class ArchiveInspector:
    UNREADABLE = "Archive could not be read."
    MACROS = "Document contains macros (vbaProject.bin)."

    def __init__(
        self,
        lister: Optional[EntryLister] = None,
        extension_table: Optional[ExtensionTable] = None,
        blocked_extensions: FrozenSet[str] = policy.BLOCKED_ARCHIVE_EXTENSIONS,
        max_entries: Optional[int] = None,
    ) -> None:
        self.lister = lister or ZipEntryLister()
        self.extension_table = extension_table or ExtensionTable()
        self.blocked_extensions = blocked_extensions
        self.max_entries = max_entries if max_entries is not None else settings.MAX_ARCHIVE_ENTRIES

    def inspect(self, data: bytes, ext: str) -> InspectionResult:
        try:
            entries = self.lister.list_entries(data)
        except ArchiveReadError as e:
            logger.debug(f"Archive unreadable: {e}")
            return InspectionResult(safe=False, reason=self.UNREADABLE)

        if len(entries) > self.max_entries:
            return InspectionResult(
                safe=False,
                reason=f"Archive contains too many entries ({len(entries)}).",
            )

        check_macros = self.extension_table.is_macro_capable(ext)

        for entry in entries:
            if self.escapes_root(entry.path):
                return InspectionResult(
                    safe=False,
                    reason=f"Suspicious path in archive (zip slip): {entry.path}",
                )

            if not entry.is_dir and entry.extension in self.blocked_extensions:
                return InspectionResult(
                    safe=False,
                    reason=f"Archive contains blocked file: .{entry.extension}",
                )

            if check_macros and self._is_macro_project(entry.path):
                return InspectionResult(safe=False, reason=self.MACROS)

        return InspectionResult(safe=True)

    @staticmethod
    def escapes_root(path: str) -> bool:
        normalized = path.replace("\\", "/")
        if normalized.startswith("/") or _DRIVE_ROOT_RE.match(normalized):
            return True
        return ".." in normalized.split("/")

    @staticmethod
    def _is_macro_project(path: str) -> bool:
        leaf = posixpath.basename(path.replace("\\", "/"))
        return leaf.lower() == policy.MACRO_PROJECT_ENTRY
