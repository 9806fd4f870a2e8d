"""Finance tracker HTTP API over FastAPI."""

import logging
import os
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from aggregation import (
    compute_category_breakdown,
    compute_key_metrics,
    compute_monthly_series,
    compute_summary,
)
from categories import CategoryDirectory
from database import TransactionType, get_db, init_db
from errors import EntityNotFoundError, ValidationError
from insights import generate_insights
from ledger import LedgerStore
from schemas import (
    CategoryResponse,
    CategoryShareResponse,
    FinancialSummaryResponse,
    InsightResponse,
    KeyMetricsResponse,
    MonthlySeriesResponse,
    SavingsGoalCreate,
    SavingsGoalResponse,
    SavingsGoalUpdate,
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
MAX_MONTHS = 24

app = FastAPI(title="Finance Tracker API", version="0.1.0")
router = APIRouter(prefix="/api")


def get_store(db: Session = Depends(get_db)) -> LedgerStore:
    return LedgerStore(db)


# --- Error handling ---

def _invalid_data_message(path: str) -> str:
    if "/savings-goals" in path:
        return "Invalid savings goal data"
    if "/transactions" in path:
        return "Invalid transaction data"
    return "Invalid request"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": _invalid_data_message(request.url.path),
            "code": ValidationError.code,
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": exc.message, "code": exc.code, "errors": [jsonable_encoder(exc.details)]},
    )


@app.exception_handler(EntityNotFoundError)
async def not_found_handler(request: Request, exc: EntityNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "code": "INTERNAL_ERROR"},
    )


# --- Summary & reports ---

@router.get("/summary", response_model=FinancialSummaryResponse)
def get_summary(store: LedgerStore = Depends(get_store)):
    return compute_summary(store.list_transactions())


@router.get("/reports/breakdown", response_model=List[CategoryShareResponse])
def get_breakdown(
    tx_type: TransactionType = Query(TransactionType.EXPENSE, alias="type"),
    store: LedgerStore = Depends(get_store),
):
    directory = CategoryDirectory(store.list_categories())
    return compute_category_breakdown(store.list_transactions(tx_type), directory, tx_type)


@router.get("/reports/monthly", response_model=MonthlySeriesResponse)
def get_monthly_series(
    months: int = Query(6, ge=1, le=MAX_MONTHS),
    store: LedgerStore = Depends(get_store),
):
    series = compute_monthly_series(store.list_transactions(), months)
    return MonthlySeriesResponse.model_validate(series)


@router.get("/reports/metrics", response_model=KeyMetricsResponse)
def get_key_metrics(store: LedgerStore = Depends(get_store)):
    return compute_key_metrics(compute_summary(store.list_transactions()))


@router.get("/insights", response_model=List[InsightResponse])
def get_insights(store: LedgerStore = Depends(get_store)):
    return generate_insights(store.list_transactions(), store.list_goals(), store.list_categories())


# --- Categories ---

@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(
    tx_type: Optional[TransactionType] = Query(None, alias="type"),
    store: LedgerStore = Depends(get_store),
):
    return store.list_categories(tx_type)


@router.get("/categories/{tx_type}", response_model=List[CategoryResponse])
def list_categories_by_type(tx_type: TransactionType, store: LedgerStore = Depends(get_store)):
    return store.list_categories(tx_type)


# --- Transactions ---

@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    tx_type: Optional[TransactionType] = Query(None, alias="type"),
    limit: Optional[int] = Query(None, ge=1),
    store: LedgerStore = Depends(get_store),
):
    if limit is not None:
        return store.recent_transactions(limit, tx_type)
    return store.list_transactions(tx_type)


@router.get("/transactions/recent", response_model=List[TransactionResponse])
def recent_transactions(limit: int = Query(5, ge=1), store: LedgerStore = Depends(get_store)):
    return store.recent_transactions(limit)


@router.get("/transactions/{tx_type}", response_model=List[TransactionResponse])
def list_transactions_by_type(tx_type: TransactionType, store: LedgerStore = Depends(get_store)):
    return store.list_transactions(tx_type)


@router.post("/transactions", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(req: TransactionCreate, store: LedgerStore = Depends(get_store)):
    return store.create_transaction(**req.model_dump())


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(transaction_id: int, req: TransactionUpdate, store: LedgerStore = Depends(get_store)):
    return store.update_transaction(transaction_id, **req.model_dump(exclude_unset=True))


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(transaction_id: int, store: LedgerStore = Depends(get_store)):
    store.delete_transaction(transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Savings goals ---

@router.get("/savings-goals", response_model=List[SavingsGoalResponse])
def list_goals(store: LedgerStore = Depends(get_store)):
    return [SavingsGoalResponse.from_goal(g) for g in store.list_goals()]


@router.get("/savings-goals/{goal_id}", response_model=SavingsGoalResponse)
def get_goal(goal_id: int, store: LedgerStore = Depends(get_store)):
    return SavingsGoalResponse.from_goal(store.get_goal(goal_id))


@router.post("/savings-goals", response_model=SavingsGoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(req: SavingsGoalCreate, store: LedgerStore = Depends(get_store)):
    return SavingsGoalResponse.from_goal(store.create_goal(**req.model_dump()))


@router.put("/savings-goals/{goal_id}", response_model=SavingsGoalResponse)
def update_goal(goal_id: int, req: SavingsGoalUpdate, store: LedgerStore = Depends(get_store)):
    goal = store.update_goal(goal_id, **req.model_dump(exclude_unset=True))
    return SavingsGoalResponse.from_goal(goal)


@router.delete("/savings-goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(goal_id: int, store: LedgerStore = Depends(get_store)):
    store.delete_goal(goal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/health")
async def health():
    return {"status": "ok"}


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL)
    init_db()
    uvicorn.run("api_server:app", host="0.0.0.0", port=8001, reload=True)
