"""
Content sniffing service.

Determines what a buffer actually is from its leading bytes, independent of
the filename, and cross-checks the result against the declared extension.

Sniffers are interchangeable: anything with ``sniff(data) -> Optional[str]``
can be plugged into ContentClassifier. Identifiers are short lowercase type
names ("png", "zip", "exe", "txt", ...) matching the keys used by the
extension table.

Backends:
- FiletypeSniffer: pure-python signature matching via ``filetype`` (default)
- MagicSniffer: libmagic via ``python-magic``, lazily initialised
- TextSniffer: recognises plain text and HTML, which carry no signature
"""

import codecs
import threading
from typing import Any, List, Optional, Protocol, Sequence

import filetype

from config.settings import settings
from services.extension_table import ExtensionTable
from utils.logger import get_logger

logger = get_logger(__name__)


class Sniffer(Protocol):
    def sniff(self, data: bytes) -> Optional[str]:
        ...


class FiletypeSniffer:
    """Magic-number detection backed by the filetype package."""

    def sniff(self, data: bytes) -> Optional[str]:
        if not data:
            return None
        try:
            kind = filetype.guess(data)
        except Exception as e:
            logger.debug(f"Filetype detection failed: {e}")
            return None
        return kind.extension if kind is not None else None


class TextSniffer:
    """
    Identifies signature-less text.

    A sample with no NUL bytes that decodes as UTF-8 is "txt", or "html"
    when it opens with a doctype or <html> tag.
    """

    SAMPLE_SIZE = 8192
    HTML_OPENERS = (b"<!doctype html", b"<html")

    def sniff(self, data: bytes) -> Optional[str]:
        sample = data[:self.SAMPLE_SIZE]
        if not sample or b"\x00" in sample:
            return None
        try:
            # final=False tolerates a multibyte sequence cut at the boundary
            codecs.getincrementaldecoder("utf-8")().decode(sample, final=False)
        except UnicodeDecodeError:
            return None

        head = sample.lstrip(b"\xef\xbb\xbf").lstrip().lower()
        if head.startswith(self.HTML_OPENERS):
            return "html"
        return "txt"


class MagicSniffer:
    """
    libmagic-backed detection.

    python-magic is imported and initialised on first use under a lock, so
    constructing the sniffer never fails on hosts without libmagic.
    """

    SAMPLE_SIZE = 16384

    MIME_TO_TYPE = {
        # Images
        "image/png": "png",
        "image/jpeg": "jpg",
        "image/gif": "gif",

        # Documents
        "application/pdf": "pdf",
        "text/plain": "txt",
        "text/html": "html",
        "text/csv": "csv",
        "text/markdown": "md",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.template": "dotx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",

        # Archives
        "application/zip": "zip",
        "application/x-zip-compressed": "zip",

        # Videos
        "video/mp4": "mp4",
        "video/webm": "webm",

        # Executables
        "application/x-dosexec": "exe",
        "application/x-msdownload": "exe",
        "application/x-executable": "elf",
        "application/x-sharedlib": "elf",
        "application/x-mach-binary": "macho",
    }

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._magic: Optional[Any] = None
        self._init_attempted = False

    def _ensure_initialized(self) -> bool:
        if self._init_attempted:
            return self._magic is not None

        with self._lock:
            if self._init_attempted:
                return self._magic is not None
            self._init_attempted = True
            try:
                import magic
                self._magic = magic.Magic(mime=True)
                logger.info("python-magic initialized")
            except Exception as e:
                logger.error(f"Failed to initialize python-magic: {e}", exc_info=True)
                self._magic = None
        return self._magic is not None

    def sniff(self, data: bytes) -> Optional[str]:
        if not data or not self._ensure_initialized():
            return None
        try:
            with self._lock:
                mime = self._magic.from_buffer(data[:self.SAMPLE_SIZE])
        except Exception as e:
            logger.error(f"Magic detection failed: {e}", exc_info=True)
            return None

        mime = (mime or "").split(";")[0].strip().lower()
        detected = self.MIME_TO_TYPE.get(mime)
        if detected is None:
            logger.debug(f"Unmapped MIME type from libmagic: {mime}")
        return detected


class ChainedSniffer:
    """Asks each sniffer in turn; the first non-empty answer wins."""

    def __init__(self, sniffers: Sequence[Sniffer]) -> None:
        self.sniffers = list(sniffers)

    def sniff(self, data: bytes) -> Optional[str]:
        for sniffer in self.sniffers:
            detected = sniffer.sniff(data)
            if detected:
                return detected
        return None


def build_sniffer(backend: Optional[str] = None) -> Sniffer:
    backend = (backend or settings.SNIFFER_BACKEND).lower()
    if backend == "magic":
        return ChainedSniffer([MagicSniffer(), TextSniffer()])
    if backend != "filetype":
        raise ValueError(f"Unknown sniffer backend: {backend}")
    return ChainedSniffer([FiletypeSniffer(), TextSniffer()])


class ContentClassifier:
    """Classifies a buffer and checks it against the declared extension."""

    UNDETERMINED = "File type undetermined."

    def __init__(
        self,
        sniffer: Optional[Sniffer] = None,
        extension_table: Optional[ExtensionTable] = None,
    ) -> None:
        self.sniffer = sniffer or build_sniffer()
        self.extension_table = extension_table or ExtensionTable()

    def classify(self, data: bytes) -> Optional[str]:
        try:
            return self.sniffer.sniff(data)
        except Exception as e:
            logger.error(f"Content classification failed: {e}", exc_info=True)
            return None

    def cross_check(self, ext: str, detected: Optional[str]) -> List[str]:
        if not detected:
            return [self.UNDETERMINED]

        accepted = self.extension_table.accepted_types(ext)
        if accepted is None or detected not in accepted:
            declared = f".{ext}" if ext else "none"
            logger.debug(f"Extension mismatch | extension={declared} | detected={detected} | accepted={accepted}")
            return [f"Extension does not match content (detected: {detected}, extension: {declared})."]
        return []
