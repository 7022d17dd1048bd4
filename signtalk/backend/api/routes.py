"""
FastAPI routes for the SignTalk backend: vocabulary lookup and classifier snapshot storage.
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from signtalk.backend.api.schemas import (
    ClassifierSnapshot,
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    SnapshotEntry,
    VocabularyEntryOut,
)
from signtalk.backend.core.config import API_PREFIX, Settings, get_settings
from signtalk.backend.core.logging import configure_logging, get_logger
from signtalk.backend.storage import (
    EmptySnapshotError,
    SnapshotNotFoundError,
    SnapshotStore,
    SnapshotStoreError,
    VocabularyStore,
    create_engine,
    create_session_factory,
)

logger = get_logger(__name__)

router = APIRouter(prefix=API_PREFIX)
snapshot_adapter = TypeAdapter(ClassifierSnapshot)


def get_vocabulary_store(request: Request) -> VocabularyStore:
    return request.app.state.vocabulary_store


def get_snapshot_store(request: Request) -> SnapshotStore:
    return request.app.state.snapshot_store


@router.get("/vocabulario", response_model=List[VocabularyEntryOut])
async def list_vocabulary(store: VocabularyStore = Depends(get_vocabulary_store)):
    """Return the whole vocabulary."""
    entries = await store.get_all()
    return [VocabularyEntryOut.model_validate(entry) for entry in entries]


@router.get(
    "/vocabulario/{palavra}",
    response_model=VocabularyEntryOut,
    responses={404: {"model": ErrorResponse}},
)
async def get_vocabulary_entry(palavra: str, store: VocabularyStore = Depends(get_vocabulary_store)):
    """Look up one gesture by word or letter, case-insensitively."""
    entry = await store.get_by_key(palavra)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Gesture not found")
    return VocabularyEntryOut.model_validate(entry)


# Snapshot routes are plain functions: file IO runs in FastAPI's threadpool
@router.post(
    "/modelo",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def save_model(
    snapshot: Optional[Dict[str, SnapshotEntry]] = Body(default=None),
    store: SnapshotStore = Depends(get_snapshot_store),
):
    """Replace the stored classifier snapshot."""
    payload = {label: entry.model_dump() for label, entry in (snapshot or {}).items()}
    try:
        store.save(payload)
    except EmptySnapshotError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No model data sent")
    return MessageResponse(message="Model saved on the server")


@router.get(
    "/modelo",
    response_model=ClassifierSnapshot,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def load_model(store: SnapshotStore = Depends(get_snapshot_store)):
    """Return the last saved classifier snapshot."""
    try:
        data = store.load()
    except SnapshotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No saved model found on the server")
    try:
        return snapshot_adapter.validate_python(data)
    except ValidationError as e:
        raise SnapshotStoreError(f"Stored model has an unexpected format: {e}") from e


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("database_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


async def snapshot_error_handler(request: Request, exc: SnapshotStoreError):
    logger.error("snapshot_store_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "Could not access the saved model"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application with its stores attached to ``app.state``."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.logging_json)

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    engine = create_engine(settings.database_dsn)
    app.state.settings = settings
    app.state.engine = engine
    app.state.vocabulary_store = VocabularyStore(engine, create_session_factory(engine))
    app.state.snapshot_store = SnapshotStore(settings.snapshot_path)

    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(SnapshotStoreError, snapshot_error_handler)

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > settings.max_body_bytes:
            return JSONResponse(status_code=413, content={"detail": "Request body too large"})
        return await call_next(request)

    @app.on_event("startup")
    async def startup_event():
        """Create and seed the vocabulary table."""
        await app.state.vocabulary_store.initialize()
        logger.info(
            "startup",
            database=settings.database_dsn,
            snapshot_path=str(settings.snapshot_path),
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        await engine.dispose()

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            vocabulary_entries=await app.state.vocabulary_store.count(),
            snapshot_saved=app.state.snapshot_store.exists(),
        )

    app.include_router(router)
    return app


app = create_app()
