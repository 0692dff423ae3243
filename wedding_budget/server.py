"""FastAPI application exposing the wedding budget endpoints."""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import List

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session

from . import __version__, crud, database, schemas
from .enums import ExpenseCategory, PaymentStatus
from .logging import setup_logger
from .settings import load_settings

LOG = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logger()
    database.init_db()
    yield


def _not_found(exc: crud.EntityNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _bad_request(exc: crud.ExpenseValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _error_body(message: str, **extra) -> dict:
    # The front end reads ``message``; ``detail`` is the FastAPI convention.
    return {"detail": message, "message": message, **extra}


settings = load_settings()
app = FastAPI(title="Wedding Budget Expense Service", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time_ms = (time.perf_counter() - start_time) * 1000
    LOG.info(
        "%s %s - Status: %s - Time: %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        process_time_ms,
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": process_time_ms,
        },
    )
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in errors
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(message or "Invalid request", errors=jsonable_encoder(errors)),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOG.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error"),
    )


router = APIRouter(prefix="/api/expenses", tags=["expenses"])


@router.get("", response_model=List[schemas.ExpenseRead])
def list_expenses(db: Session = Depends(database.get_db)) -> List[schemas.ExpenseRead]:
    return crud.list_expenses(db)


@router.post("", response_model=schemas.ExpenseRead, status_code=status.HTTP_201_CREATED)
def create_expense(expense_in: schemas.ExpenseCreate, db: Session = Depends(database.get_db)) -> schemas.ExpenseRead:
    try:
        return crud.create_expense(db, expense_in)
    except crud.ExpenseValidationError as exc:
        raise _bad_request(exc) from exc


@router.get("/total", response_model=schemas.TotalRead)
def get_total(db: Session = Depends(database.get_db)) -> schemas.TotalRead:
    return schemas.TotalRead(total=crud.total_amount(db))


@router.get("/summary", response_model=List[schemas.StatusSummary])
def get_status_summary(db: Session = Depends(database.get_db)) -> List[schemas.StatusSummary]:
    return crud.status_summary(db)


@router.get("/summary/category", response_model=List[schemas.CategorySummary])
def get_category_summary(db: Session = Depends(database.get_db)) -> List[schemas.CategorySummary]:
    return crud.category_summary(db)


@router.get("/category/{category}", response_model=List[schemas.ExpenseRead])
def list_by_category(category: ExpenseCategory, db: Session = Depends(database.get_db)) -> List[schemas.ExpenseRead]:
    return crud.list_expenses_by_category(db, category)


@router.get("/status/{payment_status}", response_model=List[schemas.ExpenseRead])
def list_by_status(payment_status: PaymentStatus, db: Session = Depends(database.get_db)) -> List[schemas.ExpenseRead]:
    return crud.list_expenses_by_status(db, payment_status)


@router.get("/{expense_id}", response_model=schemas.ExpenseRead)
def get_expense(expense_id: int, db: Session = Depends(database.get_db)) -> schemas.ExpenseRead:
    try:
        return crud.get_expense(db, expense_id)
    except crud.EntityNotFoundError as exc:
        raise _not_found(exc) from exc


@router.put("/{expense_id}", response_model=schemas.ExpenseRead)
def update_expense(
    expense_id: int,
    update_in: schemas.ExpenseUpdate,
    db: Session = Depends(database.get_db),
) -> schemas.ExpenseRead:
    try:
        return crud.update_expense(db, expense_id, update_in)
    except crud.EntityNotFoundError as exc:
        raise _not_found(exc) from exc
    except crud.ExpenseValidationError as exc:
        raise _bad_request(exc) from exc


@router.delete("/{expense_id}", response_model=schemas.MessageRead)
def delete_expense(expense_id: int, db: Session = Depends(database.get_db)) -> schemas.MessageRead:
    try:
        crud.delete_expense(db, expense_id)
    except crud.EntityNotFoundError as exc:
        raise _not_found(exc) from exc
    return schemas.MessageRead(message="Expense deleted")


@router.post(
    "/{expense_id}/payments",
    response_model=schemas.ExpenseRead,
    status_code=status.HTTP_201_CREATED,
)
def record_payment(
    expense_id: int,
    payment_in: schemas.PaymentCreate,
    db: Session = Depends(database.get_db),
) -> schemas.ExpenseRead:
    try:
        return crud.record_payment(db, expense_id, payment_in)
    except crud.EntityNotFoundError as exc:
        raise _not_found(exc) from exc
    except crud.ExpenseValidationError as exc:
        raise _bad_request(exc) from exc


@router.get("/{expense_id}/payments", response_model=List[schemas.PaymentRead])
def list_payments(expense_id: int, db: Session = Depends(database.get_db)) -> List[schemas.PaymentRead]:
    try:
        return crud.list_payments(db, expense_id)
    except crud.EntityNotFoundError as exc:
        raise _not_found(exc) from exc


app.include_router(router)


@app.get("/health", tags=["system"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
