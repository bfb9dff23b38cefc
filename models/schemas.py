from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, computed_field


class UploadedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes
    declared_size: int


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    reasons: Tuple[str, ...] = ()
    detected_type: Optional[str] = None

    @computed_field  # type: ignore[misc]
    @property
    def safe(self) -> bool:
        return not self.reasons


class ArchiveEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    extension: str
    is_dir: bool = False


class InspectionResult(BaseModel):
    safe: bool
    reason: Optional[str] = None


class UploadResponse(BaseModel):
    ok: bool
    verdict: str
    filename: Optional[str] = None
    size: Optional[int] = None
    detected: str = "unknown"
    reasons: List[str]
    stored_as: Optional[str] = None
