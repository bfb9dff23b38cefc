"""End-to-end tests for the verdict workflow."""

import pytest

from models.schemas import UploadedFile, Verdict
from processors.archive_processor import ArchiveInspector
from services.filename_validator import FilenameValidator
from services.mime_sniffing import ContentClassifier
from workflows.upload_verification import UploadVerificationWorkflow


def upload(name, content):
    return UploadedFile(name=name, content=content, declared_size=len(content))


class BrokenScanner:
    def scan(self, data):
        raise RuntimeError("scanner crashed")


@pytest.fixture
def workflow():
    return UploadVerificationWorkflow(filename_validator=FilenameValidator(allowlist=["tar", "gz", "bak"]))


class TestVerdict:
    def test_safe_iff_no_reasons(self):
        assert Verdict().safe
        assert not Verdict(reasons=("nope",)).safe

    def test_verdict_is_immutable(self):
        verdict = Verdict(reasons=("nope",))
        with pytest.raises(Exception):
            verdict.reasons = ()


class TestUploadVerificationWorkflow:
    def test_missing_file(self, workflow):
        verdict = workflow.evaluate(None)
        assert not verdict.safe
        assert verdict.reasons == (UploadVerificationWorkflow.NO_FILE,)
        assert verdict.detected_type is None

    def test_valid_png_is_safe(self, workflow, png_bytes):
        verdict = workflow.evaluate(upload("photo.png", png_bytes))
        assert verdict.safe
        assert verdict.reasons == ()
        assert verdict.detected_type == "png"

    def test_executable_disguised_as_text(self, workflow, exe_bytes):
        verdict = workflow.evaluate(upload("invoice.txt", exe_bytes))
        assert not verdict.safe
        assert verdict.detected_type == "exe"
        assert any("does not match content" in reason and "exe" in reason for reason in verdict.reasons)

    def test_docx_with_macros(self, workflow, make_docx):
        verdict = workflow.evaluate(upload("report.docx", make_docx({"word/vbaProject.bin": b"\xd0\xcf\x11\xe0"})))
        assert not verdict.safe
        assert verdict.reasons == (ArchiveInspector.MACROS,)
        assert verdict.detected_type in {"zip", "docx"}

    def test_clean_docx_is_safe(self, workflow, make_docx):
        assert workflow.evaluate(upload("report.docx", make_docx())).safe

    def test_zip_slip_archive(self, workflow, make_zip):
        verdict = workflow.evaluate(upload("bundle.zip", make_zip({"ok.txt": b"x", "../../evil.txt": b"y"})))
        assert not verdict.safe
        assert any("zip slip" in reason for reason in verdict.reasons)

    def test_clean_zip_is_safe(self, workflow, make_zip):
        verdict = workflow.evaluate(upload("bundle.zip", make_zip({"a.txt": b"x", "img/b.png": b"y"})))
        assert verdict.safe
        assert verdict.detected_type == "zip"

    def test_plain_text_is_safe(self, workflow):
        verdict = workflow.evaluate(upload("notes.md", b"# Notes\n\nNothing to see here.\n"))
        assert verdict.safe
        assert verdict.detected_type == "txt"

    def test_script_in_text_file(self, workflow):
        verdict = workflow.evaluate(upload("notes.txt", b"hello <script>alert(1)</script>"))
        assert not verdict.safe
        assert verdict.reasons == ("Suspicious text content detected (<script).",)

    def test_text_scan_only_for_text_extensions(self, workflow, png_bytes):
        verdict = workflow.evaluate(upload("photo.png", png_bytes + b"<script>"))
        assert verdict.safe

    def test_reasons_accumulate_in_check_order(self, workflow, exe_bytes):
        verdict = workflow.evaluate(upload("invoice.txt.exe", exe_bytes))
        assert verdict.reasons[0] == FilenameValidator.DOUBLE_EXTENSION
        assert "does not match content" in verdict.reasons[1]
        assert len(verdict.reasons) == 2

    def test_undetermined_type(self, workflow):
        verdict = workflow.evaluate(upload("data.txt", bytes(range(8))))
        assert not verdict.safe
        assert ContentClassifier.UNDETERMINED in verdict.reasons
        assert verdict.detected_type is None

    def test_zip_renamed_to_text(self, workflow, make_zip):
        verdict = workflow.evaluate(upload("notes.txt", make_zip({"a.exe": b"MZ"})))
        assert not verdict.safe
        assert verdict.detected_type == "zip"
        # archive rules follow the declared extension only
        assert not any("blocked file" in reason for reason in verdict.reasons)

    def test_corrupt_archive(self, workflow):
        data = b"PK\x03\x04" + b"\x00" * 40
        verdict = workflow.evaluate(upload("bundle.zip", data))
        assert not verdict.safe
        assert ArchiveInspector.UNREADABLE in verdict.reasons

    def test_stage_failure_becomes_reason(self):
        workflow = UploadVerificationWorkflow(text_scanner=BrokenScanner())
        verdict = workflow.evaluate(upload("notes.txt", b"plain"))
        assert not verdict.safe
        assert verdict.reasons == ("Internal error during text check.",)
