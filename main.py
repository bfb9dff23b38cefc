import asyncio
from typing import Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
import uvicorn

from config.policy import POLICY_VERSION
from config.settings import settings
from models.schemas import UploadedFile, UploadResponse, Verdict
from services.file_storage import FileStorageService
from utils.logger import get_logger
from workflows.upload_verification import UploadVerificationWorkflow

app = FastAPI(title="Upload Verification Service", version="1.0.0")
logger = get_logger(__name__)

# Initialize workflow and storage
workflow = UploadVerificationWorkflow()
storage = FileStorageService()


def _render(verdict: Verdict, file: Optional[UploadedFile], stored_as: Optional[str] = None) -> UploadResponse:
    return UploadResponse(
        ok=verdict.safe,
        verdict="SAFE" if verdict.safe else "UNSAFE",
        filename=file.name if file else None,
        size=file.declared_size if file else None,
        detected=verdict.detected_type or "unknown",
        reasons=list(verdict.reasons),
        stored_as=stored_as,
    )


@app.post("/upload", response_model=UploadResponse)
async def upload_file(file: Optional[UploadFile] = File(default=None)):
    """
    Verify a single uploaded file and store it when it is safe
    """
    try:
        if file is None:
            return _render(workflow.evaluate(None), None)

        limit = settings.MAX_UPLOAD_BYTES
        content = await file.read(limit + 1)
        name = file.filename or ""

        if len(content) > limit:
            logger.warning("Upload rejected: %s exceeds %s bytes", name, limit)
            return UploadResponse(
                ok=False,
                verdict="UNSAFE",
                filename=name,
                size=len(content),
                reasons=[f"File too large. Max {limit // (1024 * 1024)} MB."],
            )

        uploaded = UploadedFile(name=name, content=content, declared_size=file.size or len(content))
        verdict = await asyncio.to_thread(workflow.evaluate, uploaded)

        stored_as = None
        if verdict.safe:
            target = await asyncio.to_thread(storage.store, settings.RECEIVED_DIR, uploaded.name, uploaded.content)
            stored_as = target.name

        return _render(verdict, uploaded, stored_as)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Upload handling failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/health")
async def health_check():
    """
    Health check endpoint
    """
    return {"status": "healthy", "service": "upload-verification", "policy_version": POLICY_VERSION}


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
