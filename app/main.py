from fastapi import FastAPI, Body
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
from typing import Dict, Any

from .annotation_parser import AnnotationFormatError, parse_annotation_response
from .config import LivenessConfig
from .liveness_evaluator import LivenessEvaluator
from .models.verdict import Verdict, VerdictReason


# Logging setup
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Annotation Liveness API",
    description="An API that judges liveness from pre-computed face and object annotations of a video.",
    version="1.0.0"
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

evaluator = None


@app.on_event("startup")
async def startup_event():
    """Application startup initialization."""
    global evaluator

    logger.info("Initializing liveness evaluator...")
    config = LivenessConfig.from_env()
    evaluator = LivenessEvaluator(config)
    logger.info(
        f"Liveness evaluator initialized: presence ratio {config.min_presence_ratio}, "
        f"position jump {config.max_position_jump}"
    )


@app.get("/", include_in_schema=False)
async def root():
    return {"message": "Annotation Liveness API is running. See /docs for details."}


@app.get("/health", summary="Health check")
async def health():
    return {"status": "ok"}


@app.get("/liveness/config", summary="Show the active evaluator configuration")
async def liveness_config() -> JSONResponse:
    return JSONResponse(content=evaluator.config.to_dict())


@app.post("/liveness/evaluate", summary="Judge liveness from an annotation document")
async def liveness_evaluate(document: Dict[str, Any] = Body(...)) -> JSONResponse:
    """
    Evaluates liveness for one video.

    Receives the annotation document produced by the video annotation
    provider for that video and returns the verdict with its reason.
    """
    try:
        annotation_result = parse_annotation_response(document)
    except AnnotationFormatError as e:
        logger.error(f"Rejected annotation document: {e}")
        verdict = Verdict.failure(VerdictReason.EVALUATION_ERROR)
    else:
        verdict = evaluator.evaluate(annotation_result)

    logger.info(f"Liveness verdict: {verdict.reason.value}")
    return JSONResponse(content=verdict.to_dict())
