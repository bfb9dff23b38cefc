import os
from typing import FrozenSet, Mapping, Optional

from config import policy


def extension_of(filename: str) -> str:
    """Lowercase extension without the dot; '' when the name has none."""
    return os.path.splitext(filename)[1].lstrip(".").lower()


class ExtensionTable:
    """
    Read-only lookup from a declared extension to the content types that may
    legitimately carry it.
    """

    def __init__(
        self,
        types: Mapping[str, FrozenSet[str]] = policy.EXTENSION_TYPES,
        text_extensions: FrozenSet[str] = policy.TEXT_EXTENSIONS,
        archive_extensions: FrozenSet[str] = policy.ARCHIVE_EXTENSIONS,
        macro_capable_extensions: FrozenSet[str] = policy.MACRO_CAPABLE_EXTENSIONS,
    ) -> None:
        self._types = types
        self._text = text_extensions
        self._archive = archive_extensions
        self._macro_capable = macro_capable_extensions

    @staticmethod
    def _normalize(ext: str) -> str:
        return (ext or "").strip().lstrip(".").lower()

    def accepted_types(self, ext: str) -> Optional[FrozenSet[str]]:
        return self._types.get(self._normalize(ext))

    def is_registered(self, ext: str) -> bool:
        return self._normalize(ext) in self._types

    def is_text(self, ext: str) -> bool:
        return self._normalize(ext) in self._text

    def is_archive(self, ext: str) -> bool:
        return self._normalize(ext) in self._archive

    def is_macro_capable(self, ext: str) -> bool:
        return self._normalize(ext) in self._macro_capable
