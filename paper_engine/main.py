"""
Paper Engine - FastAPI service around the in-process TF-IDF index

- Submit local documents (PDF or text) by path
- Search them with ranked TF-IDF results
- Index is loaded from a snapshot at startup and written back at shutdown

Handlers are plain `def` functions: FastAPI runs them on its thread pool, so
searches share the store's read lock while submissions take it exclusively.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .analysis import count_terms, query_terms, tokenize
from .config import Settings, load_env, load_settings
from .extraction import ExtractionError, extract_document
from .index import (
    DocumentStore,
    DuplicateTitle,
    DupePolicy,
    FieldTooLong,
    LockFailure,
    PaperEngineError,
    TfIdfRanker,
)
from .logging_config import setup_logging
from .snapshot import load_snapshot, save_snapshot

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the snapshot on startup, write it back on shutdown"""
    settings: Settings = app.state.settings

    # A snapshot that fails to decode aborts startup
    app.state.store = load_snapshot(settings.cache_path)
    app.state.started_at = datetime.utcnow()

    yield

    logger.info("Shutting down...")
    try:
        save_snapshot(app.state.store, settings.cache_path)
    except (OSError, PaperEngineError) as e:
        logger.error(f"Failed to write snapshot {settings.cache_path}: {e}")


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    documents: int
    terms: int
    uptime_seconds: float


class SubmitResponse(BaseModel):
    status: str  # "indexed" or "ignored"
    title: str
    path: str
    distinct_terms: int


class SearchHit(BaseModel):
    score: int
    path: str
    title: str


class DocumentInfo(BaseModel):
    title: str
    path: str
    distinct_terms: int


router = APIRouter(prefix="/api/document")


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


@router.get("/submit", response_model=SubmitResponse)
def submit_document(request: Request, path: Optional[str] = None, dupe: Optional[str] = None):
    """
    Index a document from a local path

    Query parameters:
    - path: file to index (PDF or text)
    - dupe: what to do if the title is already indexed:
      fail (default), replace, rename, ignore
    """
    if not path:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing `path` parameter; give path to document",
        )
    try:
        policy = DupePolicy(dupe) if dupe else DupePolicy.FAIL
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown dupe policy {dupe!r}; use one of: {', '.join(p.value for p in DupePolicy)}",
        )

    logger.info(f"Submitting document... {path!r}")
    try:
        extracted = extract_document(path)
    except ExtractionError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    store = get_store(request)
    counts = count_terms(tokenize(extracted.text), store.pool)
    try:
        title = store.ingest(extracted.title, extracted.path, counts, policy)
    except DuplicateTitle as e:
        logger.warning(str(e))
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except FieldTooLong as e:
        logger.warning(f"Rejected {extracted.path!r}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LockFailure as e:
        logger.error(f"Could not take document store lock: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return SubmitResponse(
        status="ignored" if title is None else "indexed",
        title=title if title is not None else extracted.title,
        path=extracted.path,
        distinct_terms=len(counts),
    )


@router.get("/search", response_model=List[SearchHit])
def search_document(request: Request, s: Optional[str] = None):
    """Rank indexed documents against the search terms in `s`"""
    if s is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing `s` parameter; give search terms",
        )

    store = get_store(request)
    terms = query_terms(s, store.pool)
    try:
        results = TfIdfRanker().rank(store, terms)
    except LockFailure as e:
        logger.error(f"Could not take document store read lock: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    logger.info(f"Search {s!r}: {len(results)} results")
    return [SearchHit(score=hit.score, path=hit.path, title=hit.title) for hit in results]


@router.get("/info", response_model=DocumentInfo)
def document_info(request: Request, title: str):
    """Metadata of one indexed document"""
    document = get_store(request).get(title)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No document titled {title!r}",
        )
    return DocumentInfo(title=document.title, path=document.path, distinct_terms=document.distinct_terms)


def create_app(settings: Settings = None) -> FastAPI:
    """Build the FastAPI app; the index itself is created by the lifespan"""
    app = FastAPI(
        title="Paper Engine API",
        description="Local document search with TF-IDF ranking",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings or load_settings()

    @app.get("/", response_model=dict)
    async def root():
        """Root endpoint"""
        return {
            "service": "Paper Engine API",
            "version": APP_VERSION,
            "status": "running",
            "docs": "/docs",
        }

    @app.get("/health", response_model=HealthResponse)
    def health(request: Request):
        """Health check with index size"""
        store = get_store(request)
        with store.read():
            documents = len(store.documents)
            terms = len(store.global_term_count)
        uptime = (datetime.utcnow() - request.app.state.started_at).total_seconds()
        return HealthResponse(
            status="healthy",
            version=APP_VERSION,
            documents=documents,
            terms=terms,
            uptime_seconds=round(uptime, 2),
        )

    @app.exception_handler(PaperEngineError)
    async def index_exception_handler(request, exc):
        """Index errors not handled by a route"""
        logger.error(f"Unhandled index error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "detail": str(exc),
            },
        )

    app.include_router(router)
    return app


def run():
    """Console entry point: configure from the environment and serve"""
    import uvicorn

    load_env()
    settings = load_settings()
    setup_logging(settings)

    logger.info(f"Now serving at: {settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
