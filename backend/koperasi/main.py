import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from koperasi.core.config import settings
from koperasi.core.errors import KoperasiError
from koperasi.core.logging import setup_logging
from koperasi.api.routes.auth import router as auth_router
from koperasi.api.routes.users import router as members_router
from koperasi.api.routes.savings import router as savings_router
from koperasi.api.routes.loans import router as loans_router
from koperasi.api.routes.installments import router as installments_router
from koperasi.api.routes.shu import router as shu_router
from koperasi.api.routes.transactions import router as tx_router

setup_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "not_found": 404,
    "invalid_state": 422,
    "conflict": 409,
    "validation_error": 400,
}

app = FastAPI(title="Koperasi API")

origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KoperasiError)
async def _domain_error(request: Request, exc: KoperasiError):
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(exc.kind, 400),
        content={"detail": exc.code, "kind": exc.kind, "message": exc.message},
    )


@app.exception_handler(SQLAlchemyError)
async def _storage_error(request: Request, exc: SQLAlchemyError):
    logger.exception("storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "storage_error", "kind": "infrastructure", "message": "Storage is unavailable"},
    )


@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}

app.include_router(auth_router)
app.include_router(members_router)
app.include_router(savings_router)
app.include_router(loans_router)
app.include_router(installments_router)
app.include_router(shu_router)
app.include_router(tx_router)
