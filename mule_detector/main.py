import logging
from typing import Optional

from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import LOG_LEVEL, SAMPLE_PATH, DetectionConfig
from .core.parser import parse_csv
from .errors import CSVSchemaError, InputTooLargeError
from .models import AnalysisReport, DetectionResponse
from .orchestrator import analyze_transactions, build_graph_payload, build_report_payload

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(title="Money Muling Detection Engine", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Cache the last analysis result for report download
_last_report: Optional[AnalysisReport] = None


def _run(content: bytes) -> DetectionResponse:
    global _last_report
    try:
        parsed = parse_csv(content)
    except CSVSchemaError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not parsed.transactions:
        raise HTTPException(
            status_code=422,
            detail={"message": "No valid transactions found in the file.", "parse_errors": parsed.errors},
        )

    try:
        report = analyze_transactions(parsed.transactions, DetectionConfig.from_env())
    except InputTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))

    _last_report = report
    response = report.to_response()
    response.parse_errors = parsed.errors
    response.graph_data = build_graph_payload(report)
    return response


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "Money Muling Detection Engine"}


@app.post("/detect", response_model=DetectionResponse)
def detect_money_muling(file: UploadFile = File(...)):
    # Sync route: FastAPI runs it in the threadpool, off the event loop
    content = file.file.read()
    if len(content) == 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    return _run(content)


@app.get("/sample", response_model=DetectionResponse)
def analyze_sample():
    if not SAMPLE_PATH.exists():
        raise HTTPException(status_code=404, detail="Sample transactions file not found")
    return _run(SAMPLE_PATH.read_bytes())


@app.get("/report.json")
def download_report():
    """Returns the last analysis in the exportable JSON format."""
    if _last_report is None:
        raise HTTPException(status_code=404, detail="No analysis available. Upload a ledger to /detect first.")

    return JSONResponse(
        content=build_report_payload(_last_report),
        headers={"Content-Disposition": "attachment; filename=fraud_report.json"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
