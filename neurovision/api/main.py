import logging
import time
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from neurovision.config import load_config
from neurovision.errors import (
    EntryNotFound,
    InferenceFailure,
    InferenceTimeout,
    TooLarge,
    UnsupportedType,
)
from neurovision.models.scan import ScanSubmission
from neurovision.orchestrator.detection_pipeline import DetectionService, build_detection_service
from neurovision.telemetry import init_telemetry

config = load_config()

# --- 1. SETUP AUDIT LOGGING ---
logging.basicConfig(
    filename=config.audit_log,
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
audit_logger = logging.getLogger("audit")

# --- 2. SWAGGER METADATA ---
tags_metadata = [
    {
        "name": "Detection",
        "description": "Upload a scan and run it through the **mock** detection model.",
    },
    {
        "name": "History",
        "description": "Read-only view of past detections and summary statistics.",
    },
    {
        "name": "System",
        "description": "Health checks and operational metadata.",
    },
]

app = FastAPI(
    title="NeuroVision Detection API",
    description="""
    **Demo** brain tumour detection workflow.

    * **Validation:** JPG, PNG and DICOM only, 10MB limit.
    * **Mock Inference:** randomized outcome, the image is never analysed.
    * **History:** in-memory ledger, cleared on restart.

    Not a diagnostic tool.
    """,
    version="0.1.0",
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc"
)

init_telemetry()

app.state.detection_service = build_detection_service(config)


# --- 3. MIDDLEWARE: AUDIT TRAIL ---
@app.middleware("http")
async def audit_middleware(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    client_host = request.client.host if request.client else "unknown"
    audit_logger.info(
        f"METHOD={request.method} PATH={request.url.path} "
        f"STATUS={response.status_code} CLIENT={client_host} "
        f"DURATION={process_time:.4f}s"
    )
    return response


# --- DATA MODELS ---
class RegionModel(BaseModel):
    x: int
    y: int
    width: int
    height: int
    confidence: float

class DetectionResponse(BaseModel):
    detected: bool
    confidence: float
    regions: List[RegionModel]
    processingTime: float

class HistoryItemResponse(BaseModel):
    id: str
    patientId: str
    scanName: str
    date: str
    result: Literal["positive", "negative"]
    confidence: float
    outcome: DetectionResponse

class SummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    positive_count: int = Field(alias="positiveCount")
    negative_count: int = Field(alias="negativeCount")
    positive_rate: float = Field(alias="positiveRate")
    average_confidence: float = Field(alias="averageConfidence")


def get_detection_service(request: Request) -> DetectionService:
    return request.app.state.detection_service


UPLOAD_CHUNK_BYTES = 1024 * 1024


async def measure_upload_size(scan: Any, limit: int) -> int:
    """
    Size of the upload without buffering it.
    Uses the size recorded while the form was parsed; otherwise reads in
    chunks and stops once `limit` is exceeded.
    """
    size: Optional[int] = getattr(scan, "size", None)
    if size is not None:
        return size

    size = 0
    while size <= limit:
        chunk = await scan.read(min(UPLOAD_CHUNK_BYTES, limit + 1 - size))
        if not chunk:
            break
        size += len(chunk)
    return size


# --- ENDPOINTS ---

@app.post("/api/analyze", response_model=DetectionResponse, tags=["Detection"])
async def analyze_scan(
    scan: UploadFile = File(...),
    service: DetectionService = Depends(get_detection_service),
):
    """
    Submit one scan (multipart field `scan`) for mock tumour detection.
    """
    submission = ScanSubmission(
        file_name=scan.filename or "upload",
        mime_type=scan.content_type or "",
        size_bytes=await measure_upload_size(scan, service.config.max_upload_bytes),
    )

    try:
        result = await service.submit(submission)
    except UnsupportedType as e:
        raise HTTPException(status_code=415, detail=e.message)
    except TooLarge as e:
        raise HTTPException(status_code=413, detail=e.message)
    except InferenceTimeout as e:
        audit_logger.error(f"INFERENCE_TIMEOUT: {e}")
        raise HTTPException(status_code=504, detail="Analysis timed out. Please resubmit the scan.")
    except InferenceFailure as e:
        audit_logger.error(f"INFERENCE_ERROR: {e}")
        raise HTTPException(status_code=500, detail="Analysis failed. Please resubmit the scan.")
    except Exception as e:
        audit_logger.error(f"ENGINE_ERROR: {type(e).__name__}")
        raise HTTPException(status_code=500, detail="Internal error")

    return result.outcome.to_dict()


@app.get("/api/history", response_model=List[HistoryItemResponse], tags=["History"])
def read_history(
    result: Literal["all", "positive", "negative"] = "all",
    sort: Literal["newest", "oldest"] = "newest",
    service: DetectionService = Depends(get_detection_service),
):
    return [entry.to_dict() for entry in service.history(result=result, sort=sort)]


@app.get("/api/history/summary", response_model=SummaryResponse, tags=["History"])
def read_summary(service: DetectionService = Depends(get_detection_service)):
    return service.summary()


@app.get("/api/detection/{entry_id}", response_model=DetectionResponse, tags=["History"])
def read_detection(entry_id: str, service: DetectionService = Depends(get_detection_service)):
    try:
        entry = service.get_entry(entry_id)
    except EntryNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return entry.outcome.to_dict()


@app.get("/health", tags=["System"])
def health(service: DetectionService = Depends(get_detection_service)) -> Dict[str, Any]:
    return {
        "status": "online",
        "modules": ["Validator", "MockInference", "HistoryLedger", "Aggregator"],
        "backend": getattr(service.classifier, "backend_name", "unknown"),
    }


if __name__ == "__main__":
    import os
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
