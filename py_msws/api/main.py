"""FastAPI service exposing seeded MSWS generator sessions."""

import threading
import uuid
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Union

import structlog
from fastapi import FastAPI, HTTPException, Query, Response
from pydantic import BaseModel, Field

from .. import __version__
from ..config import settings
from ..core.msws_prng import MASK32, MswsPRNG
from ..utils.log_setup import configure_logging
from ..utils.random import make_seed

configure_logging()
logger = structlog.get_logger()


class GeneratorSession:
    """A generator plus the lock that serializes access to its state."""

    def __init__(self, seed_value: int):
        self.prng = MswsPRNG(seed_value)
        self.lock = threading.Lock()


# In-memory generator registry
_sessions: Dict[str, GeneratorSession] = {}
_sessions_lock = threading.Lock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting MSWS generator API", host=settings.api_host, port=settings.api_port)
    yield
    logger.info("Shutting down MSWS generator API", open_sessions=len(_sessions))
    with _sessions_lock:
        _sessions.clear()


# Initialize FastAPI app
app = FastAPI(
    title="MSWS Random Number API",
    description="Middle Square Weyl Sequence pseudo-random numbers (not cryptographically secure)",
    version=__version__,
    lifespan=lifespan,
)


# Request/Response models
class GeneratorRequest(BaseModel):
    """Request to create a generator session."""

    seed: Optional[int] = Field(
        None, ge=0, le=MASK32, description="32-bit seed; drawn from the system when omitted"
    )


class GeneratorResponse(BaseModel):
    """A created generator session."""

    generator_id: str
    seed: int


class ValuesResponse(BaseModel):
    """A batch of generated values."""

    generator_id: str
    kind: str
    values: List[Union[int, str]]
    call_count: int


def _get_session(generator_id: str) -> GeneratorSession:
    with _sessions_lock:
        session = _sessions.get(generator_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Generator not found")
    return session


def _format(value: int, width: int, fmt: str) -> Union[int, str]:
    if fmt == "hex":
        return f"{value:0{width}X}"
    return value


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "MSWS Random Number API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    with _sessions_lock:
        count = len(_sessions)
    return {"status": "healthy", "sessions": count}


@app.post("/generators", response_model=GeneratorResponse, status_code=201)
def create_generator(request: GeneratorRequest):
    """Create a generator session from the given or a system-derived seed."""
    seed_value = make_seed() if request.seed is None else request.seed
    generator_id = str(uuid.uuid4())
    session = GeneratorSession(seed_value)
    with _sessions_lock:
        if len(_sessions) >= settings.max_sessions:
            logger.warning("Generator limit reached", max_sessions=settings.max_sessions)
            raise HTTPException(status_code=503, detail="Generator limit reached")
        _sessions[generator_id] = session

    logger.info("Generator created", generator_id=generator_id, seed=seed_value)
    return GeneratorResponse(generator_id=generator_id, seed=seed_value)


@app.delete("/generators/{generator_id}", status_code=204)
def delete_generator(generator_id: str):
    """Discard a generator session."""
    with _sessions_lock:
        session = _sessions.pop(generator_id, None)
    if session is None:
        raise HTTPException(status_code=404, detail="Generator not found")

    logger.info("Generator deleted", generator_id=generator_id)
    return Response(status_code=204)


@app.get("/generators/{generator_id}/uint32", response_model=ValuesResponse)
def get_uint32(
    generator_id: str,
    count: int = Query(1, ge=1, le=settings.max_batch),
    fmt: str = Query("dec", pattern="^(hex|dec)$"),
):
    """Draw 32-bit values."""
    session = _get_session(generator_id)
    with session.lock:
        values = [_format(v, 8, fmt) for v in session.prng.uint32_array(count).tolist()]
        call_count = session.prng.call_count
    return ValuesResponse(generator_id=generator_id, kind="uint32", values=values, call_count=call_count)


@app.get("/generators/{generator_id}/uint64", response_model=ValuesResponse)
def get_uint64(
    generator_id: str,
    count: int = Query(1, ge=1, le=settings.max_batch),
    fmt: str = Query("dec", pattern="^(hex|dec)$"),
):
    """Draw 64-bit values."""
    session = _get_session(generator_id)
    with session.lock:
        values = [_format(session.prng.uint64(), 16, fmt) for _ in range(count)]
        call_count = session.prng.call_count
    return ValuesResponse(generator_id=generator_id, kind="uint64", values=values, call_count=call_count)


@app.get("/generators/{generator_id}/bounded", response_model=ValuesResponse)
def get_bounded(
    generator_id: str,
    max_value: int = Query(..., ge=1, le=MASK32),
    count: int = Query(1, ge=1, le=settings.max_batch),
):
    """Draw values uniformly from [0, max_value)."""
    session = _get_session(generator_id)
    with session.lock:
        values = [session.prng.bounded(max_value) for _ in range(count)]
        call_count = session.prng.call_count
    return ValuesResponse(generator_id=generator_id, kind="bounded", values=values, call_count=call_count)


@app.get("/generators/{generator_id}/bytes")
def get_bytes(
    generator_id: str,
    length: int = Query(..., ge=1, le=settings.max_batch),
):
    """Draw raw bytes."""
    session = _get_session(generator_id)
    with session.lock:
        data = session.prng.bytes(length)
    return Response(content=data, media_type="application/octet-stream")


def run():
    """Serve the API with uvicorn."""
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
