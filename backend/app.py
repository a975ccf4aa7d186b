"""
Backend server for nightly temperature profiles.

Serves the two remote calls the profile form depends on
(getUserTemperatureProfile / updateUserTemperatureProfile) plus profile
deletion, backed by the relational profile store.
"""

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backend.database import make_engine, make_session_factory
from backend.models import Base
from backend.schemas import TemperatureProfile, TemperatureProfileInput, field_errors
from backend.store import (
    ProfileValidationError,
    UnknownUserError,
    delete_user_temperature_profile,
    get_user_temperature_profile,
    update_user_temperature_profile,
)

load_dotenv()

# Database setup
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./profiles.db")

engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)

INVALID_PROFILE_MESSAGE = "Invalid temperature profile"


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_email(x_user_email: str | None = Header(default=None)) -> str:
    """Identity of the caller; authentication happens upstream of this app."""
    if not x_user_email:
        raise HTTPException(status_code=401, detail="Missing X-User-Email header")
    return x_user_email.strip().lower()


# =============================================================================
# FASTAPI APP
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    Base.metadata.create_all(bind=engine)
    print(f"[server] database: {engine.dialect.name}")
    yield


app = FastAPI(title="Temperature Profile", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": INVALID_PROFILE_MESSAGE, "fields": field_errors(exc)},
    )


@app.exception_handler(ProfileValidationError)
async def profile_validation_handler(request: Request, exc: ProfileValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": INVALID_PROFILE_MESSAGE, "fields": exc.errors},
    )


@app.exception_handler(UnknownUserError)
async def unknown_user_handler(request: Request, exc: UnknownUserError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


# =============================================================================
# PROFILE ENDPOINTS
# =============================================================================

@app.get("/api/profile", response_model=TemperatureProfile | None, response_model_exclude_none=True)
async def read_profile(
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
):
    """Get the caller's profile, or null when none has been saved yet."""
    return get_user_temperature_profile(db, email)


@app.put("/api/profile", response_model=TemperatureProfile, response_model_exclude_none=True)
async def write_profile(
    payload: TemperatureProfileInput,
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
):
    """Create or replace the caller's profile and its mid-stage entries."""
    return update_user_temperature_profile(db, email, payload)


@app.delete("/api/profile")
async def remove_profile(
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
):
    """Delete the caller's profile (mid-stage rows cascade)."""
    deleted = delete_user_temperature_profile(db, email)
    return {"deleted": deleted}
