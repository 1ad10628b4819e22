# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""System endpoints — health, readiness, metrics."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from chama.core.dependencies import get_settings, get_store
from chama.core.errors import StoreUnavailable
from chama.repositories.base import CollectionStore

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check(store: CollectionStore = Depends(get_store), cfg=Depends(get_settings)):
    return {
        "status": "ok",
        "service": cfg.SERVICE_NAME,
        "version": cfg.SERVICE_VERSION,
        "store": store.backend,
    }


@router.get("/health/ready")
def readiness_check(store: CollectionStore = Depends(get_store)):
    try:
        store.ping()
        collections = store.names()
    except StoreUnavailable as exc:
        return JSONResponse(status_code=503, content={"error": exc.message})
    return {"status": "ready", "store": store.backend, "collections": collections}


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
