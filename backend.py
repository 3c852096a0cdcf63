"""
FastAPI backend for the Efficiency Auditor.

Classifies code, audits its efficiency across an input-size ladder and
serves the theoretical bounds database.
"""

import json
import time
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field

from auditor.analyzer import EfficiencyAuditor
from auditor.bounds import format_citation, get_bounds_map, get_optimal_algorithm
from auditor.config import logger, settings
from auditor.models import CamelModel

# Load environment variables
load_dotenv()

MAX_LADDER_SIZE = 1_000_000


# Request Models
class ClassifyRequest(CamelModel):
    """Request model - source code only."""
    code: str = Field(..., description="Code to classify")


class AuditRequest(CamelModel):
    """Request model for a full efficiency audit."""
    code: str = Field(..., description="Python source defining entryPoint(arr, counts)")
    entry_point: str = Field(default="solve", description="Function to measure")
    sizes: Optional[list[int]] = Field(default=None, max_length=8, description="Input-size ladder")


# Initialize FastAPI
app = FastAPI(
    title="Algorithmic Efficiency Auditor",
    description="Measure how close code comes to the theoretical minimum for its problem",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _new_request_id() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S-%f")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _success(result) -> JSONResponse:
    # Round-trip through model_dump_json so infinite ratios serialise as strings
    return JSONResponse(content={
        "success": True,
        "result": json.loads(result.model_dump_json(by_alias=True)),
    })


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Algorithmic Efficiency Auditor API",
        "version": "1.0.0",
        "endpoints": {
            "/classify": "POST - Classify code into a problem class",
            "/audit": "POST - Measure efficiency against the theoretical minimum",
            "/bounds": "GET - Theoretical bounds database",
            "/health": "GET - Health check"
        }
    }


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "healthy", "oracle": settings.ORACLE_PROVIDER}


@app.get("/bounds")
async def bounds():
    """All registered theoretical bounds with formatted citations."""
    entries = []
    for problem_class, bound in get_bounds_map().items():
        entry = bound.model_dump(mode="json", by_alias=True)
        entry["formattedCitation"] = format_citation(bound.citation)
        entry["optimalAlgorithm"] = get_optimal_algorithm(problem_class)
        entries.append(entry)
    return {"success": True, "bounds": entries}


@app.post("/classify")
async def classify(request: ClassifyRequest):
    """Classify code into one of the known problem classes."""
    request_id = _new_request_id()
    start_time = time.time()

    logger.info(f"[{request_id}] CLASSIFY RECEIVED - Code length: {len(request.code)} chars")

    if not request.code.strip():
        logger.warning(f"[{request_id}] CLASSIFY REJECTED - empty code")
        return _error(400, "Code cannot be empty")

    try:
        async with EfficiencyAuditor() as auditor:
            result = await auditor.classify(request.code)
    except Exception as e:
        elapsed_time = time.time() - start_time
        logger.error(f"[{request_id}] CLASSIFY FAILED - Time taken: {elapsed_time:.3f}s - Error: {str(e)}")
        return _error(500, str(e))

    elapsed_time = time.time() - start_time
    logger.info(
        f"[{request_id}] CLASSIFY COMPLETED - Time taken: {elapsed_time:.3f}s - "
        f"Result: {result.problem_class.value} ({result.confidence:.2f})"
    )
    return _success(result)


@app.post("/audit")
async def audit(request: AuditRequest):
    """
    Audit code efficiency.

    Runs `entryPoint(arr, counts)` under instrumentation at each size and
    compares operation counts with the theoretical minimum.
    """
    request_id = _new_request_id()
    start_time = time.time()

    logger.info(
        f"[{request_id}] AUDIT RECEIVED - Code length: {len(request.code)} chars - "
        f"Entry point: {request.entry_point}"
    )

    if request.sizes is not None and any(s < 1 or s > MAX_LADDER_SIZE for s in request.sizes):
        return _error(400, f"Sizes must be between 1 and {MAX_LADDER_SIZE}")

    try:
        async with EfficiencyAuditor() as auditor:
            report = await auditor.audit(
                request.code,
                entry_point=request.entry_point,
                sizes=request.sizes,
            )
    except ValueError as e:
        logger.warning(f"[{request_id}] AUDIT REJECTED - {str(e)}")
        return _error(400, str(e))
    except Exception as e:
        elapsed_time = time.time() - start_time
        logger.error(f"[{request_id}] AUDIT FAILED - Time taken: {elapsed_time:.3f}s - Error: {str(e)}")
        return _error(500, str(e))

    elapsed_time = time.time() - start_time
    logger.info(
        f"[{request_id}] AUDIT COMPLETED - Time taken: {elapsed_time:.3f}s - "
        f"Result: {report.classification.problem_class.value}, {report.formatted_efficiency}, "
        f"{report.empirical.complexity}"
    )
    return _success(report)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backend:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
