from typing import Callable, List, Optional

from models.schemas import UploadedFile, Verdict
from processors.archive_processor import ArchiveInspector
from services.extension_table import ExtensionTable, extension_of
from services.filename_validator import FilenameValidator
from services.mime_sniffing import ContentClassifier
from services.text_scanner import TextScanner
from utils.logger import get_logger

logger = get_logger(__name__)


class UploadVerificationWorkflow:
    """
    Runs every check against one upload and collects the reasons.

    Checks run in a fixed order (filename, content type, text, archive) and
    none of them stops the next one. The upload is safe iff no check produced
    a reason.
    """

    NO_FILE = "No file supplied."

    def __init__(
        self,
        extension_table: Optional[ExtensionTable] = None,
        filename_validator: Optional[FilenameValidator] = None,
        content_classifier: Optional[ContentClassifier] = None,
        text_scanner: Optional[TextScanner] = None,
        archive_inspector: Optional[ArchiveInspector] = None,
    ) -> None:
        self.extension_table = extension_table or ExtensionTable()
        self.filename_validator = filename_validator or FilenameValidator()
        self.content_classifier = content_classifier or ContentClassifier(
            extension_table=self.extension_table
        )
        self.text_scanner = text_scanner or TextScanner()
        self.archive_inspector = archive_inspector or ArchiveInspector(
            extension_table=self.extension_table
        )

    def evaluate(self, file: Optional[UploadedFile]) -> Verdict:
        if file is None:
            logger.warning("Upload rejected: no file supplied")
            return Verdict(reasons=(self.NO_FILE,))

        reasons: List[str] = []
        ext = extension_of(file.name)

        self._run("filename", reasons, lambda: self.filename_validator.validate(file.name))

        detected = self.content_classifier.classify(file.content)
        self._run("content type", reasons, lambda: self.content_classifier.cross_check(ext, detected))

        if self.extension_table.is_text(ext):
            self._run("text", reasons, lambda: self.text_scanner.scan(file.content))

        if self.extension_table.is_archive(ext):
            self._run("archive", reasons, lambda: self._inspect_archive(file.content, ext))

        verdict = Verdict(reasons=tuple(reasons), detected_type=detected)

        if verdict.safe:
            logger.info(
                "Upload accepted | name=%s | size=%s | detected=%s",
                file.name, file.declared_size, detected,
            )
        else:
            logger.warning(
                "Upload rejected | name=%s | size=%s | detected=%s | reasons=%s",
                file.name, file.declared_size, detected, "; ".join(verdict.reasons),
            )
        return verdict

    def _inspect_archive(self, data: bytes, ext: str) -> List[str]:
        result = self.archive_inspector.inspect(data, ext)
        if result.safe:
            return []
        return [result.reason or ArchiveInspector.UNREADABLE]

    @staticmethod
    def _run(stage: str, reasons: List[str], check: Callable[[], List[str]]) -> None:
        try:
            reasons.extend(check())
        except Exception as e:
            logger.error(f"Error during {stage} check: {e}", exc_info=True)
            reasons.append(f"Internal error during {stage} check.")
