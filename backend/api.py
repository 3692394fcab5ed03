import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .config import allowed_origins
from .db.repo import BlobPropertyRepository, get_repository
from .models.property import (
    ErrorResponse,
    HealthResponse,
    PropertiesResponse,
    Property,
    Space,
)
from .utils.logging import get_logger

LOGGER = get_logger("api")


@asynccontextmanager
async def lifespan(_: FastAPI):
    # missing blob configuration should stop the process here, not on first request
    get_repository()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Rent Roll Portfolio API",
    description="Properties, spaces and rent roll history read from a single storage blob",
    version="1.0.0",
)
router = APIRouter(prefix="/api")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    trace_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.trace_id = trace_id
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    LOGGER.info(
        "request method=%s path=%s status=%d duration_ms=%.1f trace_id=%s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        trace_id,
    )
    response.headers["X-Request-ID"] = trace_id
    return response


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or "unknown"


def _error(payload: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=payload.status, content=payload.model_dump(by_alias=True))


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("unhandled_error path=%s", request.url.path)
    return _error(ErrorResponse.internal_server_error(f"An error occurred: {exc}", _trace_id(request)))


@router.get("/properties", response_model=PropertiesResponse)
def list_properties(repo: BlobPropertyRepository = Depends(get_repository)):
    result = repo.list_all()
    LOGGER.info("properties_served count=%d source=%s", len(result.properties), result.source)
    return PropertiesResponse(
        properties=result.properties,
        total=len(result.properties),
        source=result.source,
        fallback_reason=result.fallback_reason,
    )


@router.delete("/properties/cache", status_code=204)
def invalidate_cache(repo: BlobPropertyRepository = Depends(get_repository)):
    repo.invalidate_cache()
    return Response(status_code=204)


@router.get(
    "/properties/{property_id}",
    response_model=Property,
    responses={404: {"model": ErrorResponse}},
)
def get_property(property_id: str, request: Request, repo: BlobPropertyRepository = Depends(get_repository)):
    prop = repo.get_by_id(property_id)
    if prop is None:
        LOGGER.warning("property_missing id=%s", property_id)
        return _error(ErrorResponse.not_found(f"Property with ID '{property_id}' not found", _trace_id(request)))
    return prop


@router.get(
    "/properties/{property_id}/spaces",
    response_model=List[Space],
    responses={404: {"model": ErrorResponse}},
)
def get_property_spaces(property_id: str, request: Request, repo: BlobPropertyRepository = Depends(get_repository)):
    spaces = repo.get_spaces(property_id)
    if spaces is None:
        return _error(ErrorResponse.not_found(f"Property with ID '{property_id}' not found", _trace_id(request)))
    return spaces


@app.get("/health", response_model=HealthResponse, responses={503: {"model": HealthResponse}})
@router.get("/health", response_model=HealthResponse, responses={503: {"model": HealthResponse}})
def health(response: Response, repo: BlobPropertyRepository = Depends(get_repository)):
    blob = repo.check_health()
    if not blob.healthy:
        response.status_code = 503
    return HealthResponse(status="healthy" if blob.healthy else "unhealthy", blob=blob)


app.include_router(router)
