from __future__ import annotations

import logging
import os
import re
from contextlib import asynccontextmanager

from archive_cms.db import load_env_once

# -------------------------------------------------------------------
# ENV LOADING (must run before importing anything that reads env)
# -------------------------------------------------------------------
load_env_once()

from fastapi import Depends, FastAPI  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.exc import SQLAlchemyError  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402

from archive_cms import messages, repo  # noqa: E402
from archive_cms.auth import ARCHIVES_WRITE, Principal, require_capability  # noqa: E402
from archive_cms.dashboard import router as dashboard_router  # noqa: E402
from archive_cms.db import db_ping, dispose_engine, get_engine  # noqa: E402
from archive_cms.errors import (  # noqa: E402
    ApiError,
    NotFound,
    PersistenceFailure,
    ServiceUnavailable,
    ValidationError,
    api_error_handler,
    http_exception_handler,
    ok,
    request_validation_handler,
    unhandled_exception_handler,
)
from archive_cms.schemas import (  # noqa: E402
    ArchiveEnvelope,
    ArchiveIndexIn,
    ArchiveListEnvelope,
    MessageEnvelope,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    try:
        yield
    finally:
        # The engine is created lazily on first use; release its pool on shutdown.
        dispose_engine()


app = FastAPI(title="Archive CMS API", version="1.0.0", lifespan=lifespan)

app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(dashboard_router)


# -----------------------------
# Health checks
# -----------------------------
@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.get("/readyz")
def readyz(engine: Engine = Depends(get_engine)):
    try:
        db_ping(engine)
    except SQLAlchemyError:
        logger.exception("Readiness check failed")
        raise ServiceUnavailable(messages.DATABASE_UNAVAILABLE)
    return {"status": "ready", "db": "ok"}


# -----------------------------
# Helpers
# -----------------------------
_ARCHIVE_ID = re.compile(r"[0-9]+")
_MAX_ARCHIVE_ID = 2**63 - 1


def _parse_archive_id(archive_id: str) -> int:
    # Plain ASCII digits within a signed 64-bit range; anything else cannot match a row.
    if not _ARCHIVE_ID.fullmatch(archive_id):
        raise NotFound(messages.ARCHIVE_NOT_FOUND)
    pk = int(archive_id)
    if pk > _MAX_ARCHIVE_ID:
        raise NotFound(messages.ARCHIVE_NOT_FOUND)
    return pk


def _require_fields(body: ArchiveIndexIn) -> dict[str, str]:
    missing = body.missing_fields()
    if missing:
        logger.info("Archive payload missing fields: %s", ", ".join(missing))
        raise ValidationError(messages.ARCHIVE_FIELDS_REQUIRED)
    return {
        "class_name": body.class_name,
        "web_name": body.web_name,
        "org_name": body.org_name,
        "org_web_link": body.org_web_link,
    }


# -----------------------------
# Archive index endpoints
# -----------------------------
@app.get("/api/archives", response_model=ArchiveListEnvelope)
def list_archives(engine: Engine = Depends(get_engine)):
    try:
        return ok(repo.list_archives(engine))
    except SQLAlchemyError:
        logger.exception("Archives fetch error")
        raise PersistenceFailure(messages.ARCHIVE_LIST_FAILED)


@app.post("/api/archives", response_model=ArchiveEnvelope)
def create_archive(
    body: ArchiveIndexIn,
    engine: Engine = Depends(get_engine),
    principal: Principal = Depends(require_capability(ARCHIVES_WRITE)),
):
    fields = _require_fields(body)

    try:
        item = repo.create_archive(engine, **fields)
    except SQLAlchemyError:
        logger.exception("Archive creation error")
        raise PersistenceFailure(messages.ARCHIVE_CREATE_FAILED)

    logger.info("Archive %s created by %s", item["id"], principal.subject)
    return ok(item)


@app.get("/api/archives/{archive_id}", response_model=ArchiveEnvelope)
def get_archive(archive_id: str, engine: Engine = Depends(get_engine)):
    pk = _parse_archive_id(archive_id)

    try:
        return ok(repo.get_archive(engine, pk))
    except KeyError:
        raise NotFound(messages.ARCHIVE_NOT_FOUND)
    except SQLAlchemyError:
        logger.exception("Archive fetch error")
        raise PersistenceFailure(messages.ARCHIVE_FETCH_FAILED)


@app.put("/api/archives/{archive_id}", response_model=ArchiveEnvelope)
def update_archive(
    archive_id: str,
    body: ArchiveIndexIn,
    engine: Engine = Depends(get_engine),
    principal: Principal = Depends(require_capability(ARCHIVES_WRITE)),
):
    fields = _require_fields(body)
    pk = _parse_archive_id(archive_id)

    try:
        item = repo.update_archive(engine, pk, **fields)
    except KeyError:
        raise NotFound(messages.ARCHIVE_NOT_FOUND)
    except SQLAlchemyError:
        logger.exception("Archive update error")
        raise PersistenceFailure(messages.ARCHIVE_UPDATE_FAILED)

    logger.info("Archive %s updated by %s", pk, principal.subject)
    return ok(item)


@app.delete("/api/archives/{archive_id}", response_model=MessageEnvelope)
def delete_archive(
    archive_id: str,
    engine: Engine = Depends(get_engine),
    principal: Principal = Depends(require_capability(ARCHIVES_WRITE)),
):
    pk = _parse_archive_id(archive_id)

    try:
        repo.delete_archive(engine, pk)
    except KeyError:
        raise NotFound(messages.ARCHIVE_NOT_FOUND)
    except SQLAlchemyError:
        logger.exception("Archive deletion error")
        raise PersistenceFailure(messages.ARCHIVE_DELETE_FAILED)

    logger.info("Archive %s deleted by %s", pk, principal.subject)
    return ok(message=messages.ARCHIVE_DELETED)
