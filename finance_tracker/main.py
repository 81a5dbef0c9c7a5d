import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, Response, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import OAuth2PasswordRequestForm
from starlette.concurrency import run_in_threadpool
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession

from finance_tracker import repository
from finance_tracker.aggregation import build_trends, group_by_date
from finance_tracker.auth import create_access_token, get_current_user, get_password_hash, verify_password
from finance_tracker.avatars import AvatarError, AvatarStorage, get_avatar_storage, load_avatar, store_avatar
from finance_tracker.config import CORS_ORIGINS, DATABASE_URL, PORT, configure_logging
from finance_tracker.db import UserModel, create_tables, engine, get_db
from finance_tracker.ranges import DEFAULT_RANGE, DateRange, previous_range, resolve_range
from finance_tracker.schemas import (
    Dashboard,
    LedgerDay,
    Message,
    SettingsIn,
    SettingsOut,
    Token,
    TransactionIn,
    TransactionOut,
    TrendSummary,
    UserOut,
    UserRegister,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await create_tables()
    yield


# ----------------------------------------------------------------------------
# App setup
# ----------------------------------------------------------------------------
app = FastAPI(title="Personal Finance API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _active_range(selector: Optional[str], user: UserModel) -> DateRange:
    # Query param wins, then the user's saved view; unknown values resolve like last30days.
    return resolve_range(selector or user.default_view or DEFAULT_RANGE, datetime.now(timezone.utc))


async def _trends(db: AsyncSession, user_id: int, range_: DateRange) -> List[TrendSummary]:
    current = await repository.totals_by_type(db, user_id, range_)
    previous = await repository.totals_by_type(db, user_id, previous_range(range_))
    return build_trends(current, previous)


# ----------------------------------------------------------------------------
# Health & test
# ----------------------------------------------------------------------------
@app.get("/")
async def read_root():
    return {"message": "Personal Finance Backend is running"}


@app.get("/test")
async def test_database():
    info = {
        "backend": "✅ Running",
        "database_url": make_url(DATABASE_URL).render_as_string(hide_password=True),
        "using_sqlite_fallback": DATABASE_URL.startswith("sqlite"),
        "connection_status": "Not Connected",
        "database": "❌ Not Available",
    }
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        await create_tables()
        info["database"] = "✅ Available"
        info["connection_status"] = "Connected"
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        info["database"] = f"❌ Error: {str(e)[:160]}"
    return info


# ----------------------------------------------------------------------------
# Auth routes
# ----------------------------------------------------------------------------
@app.post("/auth/register", response_model=UserOut)
async def register(payload: UserRegister, db: AsyncSession = Depends(get_db)):
    existing = await repository.get_user_by_email(db, payload.email)
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    name = payload.name or payload.email.split("@")[0]
    return await repository.create_user(db, name, payload.email, get_password_hash(payload.password))


@app.post("/auth/login", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    user = await repository.get_user_by_email(db, form_data.username)
    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Incorrect email or password")

    access_token = create_access_token({"sub": str(user.id)})
    return {"access_token": access_token, "token_type": "bearer"}


@app.get("/auth/me", response_model=UserOut)
async def me(current_user: UserModel = Depends(get_current_user)):
    return current_user


# ----------------------------------------------------------------------------
# Transactions
# ----------------------------------------------------------------------------
@app.post("/transactions", response_model=TransactionOut, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    payload: TransactionIn,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return await repository.create_transaction(db, current_user.id, payload)


@app.get("/transactions", response_model=List[TransactionOut])
async def list_transactions(
    range: Optional[str] = None,
    offset: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    range_ = _active_range(range, current_user)
    return await repository.fetch_transactions(db, current_user.id, range_, offset, limit)


@app.put("/transactions/{transaction_id}", response_model=TransactionOut)
async def update_transaction(
    transaction_id: int,
    payload: TransactionIn,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    tx = await repository.update_transaction(db, current_user.id, transaction_id, payload)
    if tx is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return tx


@app.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    deleted = await repository.delete_transaction(db, current_user.id, transaction_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----------------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------------
@app.get("/dashboard", response_model=Dashboard)
async def dashboard(
    range: Optional[str] = None,
    offset: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    range_ = _active_range(range, current_user)
    rows = await repository.fetch_transactions(db, current_user.id, range_, offset, limit)
    transactions = [TransactionOut.model_validate(row) for row in rows]

    ledger: Dict[str, LedgerDay] = {
        day: LedgerDay(transactions=group.transactions, amount=group.amount)
        for day, group in group_by_date(transactions).items()
    }
    return Dashboard(
        range=range_,
        trends=await _trends(db, current_user.id, range_),
        transactions=ledger,
    )


@app.get("/trends", response_model=List[TrendSummary])
async def trends(
    range: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    return await _trends(db, current_user.id, _active_range(range, current_user))


# ----------------------------------------------------------------------------
# Settings
# ----------------------------------------------------------------------------
def _settings_out(user: UserModel) -> SettingsOut:
    return SettingsOut(
        full_name=user.name,
        default_view=user.default_view,
        has_avatar=bool(user.avatar or user.avatar_base64),
    )


@app.get("/settings", response_model=SettingsOut)
async def get_settings(current_user: UserModel = Depends(get_current_user)):
    return _settings_out(current_user)


@app.put("/settings", response_model=SettingsOut)
async def update_settings(
    payload: SettingsIn,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    current_user.name = payload.full_name
    current_user.default_view = payload.default_view
    await db.commit()
    await db.refresh(current_user)
    return _settings_out(current_user)


@app.post("/settings/avatar", response_model=Message)
async def upload_avatar(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    storage: AvatarStorage = Depends(get_avatar_storage),
):
    data = await file.read()
    try:
        message = await run_in_threadpool(
            store_avatar, current_user, data, file.content_type, file.filename, storage
        )
    except AvatarError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await db.commit()
    return {"message": message}


@app.get("/settings/avatar")
async def get_avatar(
    current_user: UserModel = Depends(get_current_user),
    storage: AvatarStorage = Depends(get_avatar_storage),
):
    try:
        avatar = await run_in_threadpool(load_avatar, current_user, storage)
    except AvatarError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if avatar is None:
        raise HTTPException(status_code=404, detail="No avatar set")
    media_type, data = avatar
    return Response(content=data, media_type=media_type)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
