import re
from typing import Iterable, List, Optional

from config.settings import settings

# Bare leaf names only: no separators, no whitespace, no control characters
SAFE_FILENAME_RE = re.compile(r"[A-Za-z0-9._-]{1,255}")


class FilenameValidator:
    """Purely syntactic checks on the submitted filename."""

    INVALID_NAME = "Invalid filename."
    DOUBLE_EXTENSION = "Suspicious double extension."

    def __init__(self, allowlist: Optional[Iterable[str]] = None) -> None:
        if allowlist is None:
            allowlist = settings.DOUBLE_EXTENSION_ALLOWLIST
        self.allowlist = frozenset(fragment.lower() for fragment in allowlist)

    def validate(self, name: str) -> List[str]:
        reasons: List[str] = []
        if not SAFE_FILENAME_RE.fullmatch(name or ""):
            reasons.append(self.INVALID_NAME)
        if self.has_double_extension(name or ""):
            reasons.append(self.DOUBLE_EXTENSION)
        return reasons

    def has_double_extension(self, name: str) -> bool:
        # name.txt.exe is flagged, backup.tar.gz and db.bak.sql are not
        labels = name.split(".")
        return len(labels) > 2 and labels[-2].lower() not in self.allowlist
