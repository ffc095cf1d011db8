import logging
import os
from contextlib import asynccontextmanager
from datetime import date

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session
import uvicorn

from auth import (
    SESSION_COOKIE,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    DuplicateUserError,
    SessionContext,
    authenticate_user,
    create_access_token,
    create_user,
    get_current_session,
    session_for,
)
from calendar_annotator import compute_annotations, month_grid
from db import create_db_and_tables, get_session
from entry_store import EntryStore
from export import MEDIA_TYPES, ExportFormat, content_disposition, export_filename, format_entries
from lookups import CLIENTS, TASKS
from repository import EntryRepository
from schemas import (
    AuthResponse,
    CalendarDayResponse,
    CalendarResponse,
    EntryListResponse,
    LoginRequest,
    LookupItem,
    OperationResult,
    RegisterRequest,
    SessionUser,
    SuggestionRequest,
    SuggestionResponse,
)
from suggestions import SuggestionService, past_entry_lines

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    "validation": 400,
    "auth_required": 401,
    "not_found": 404,
    "persistence": 500,
}

_suggestion_service: SuggestionService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    create_db_and_tables()
    logger.info("Database initialized")
    yield


# Create FastAPI app
app = FastAPI(title="TimeWise API", version="1.0.0", lifespan=lifespan)

allowed_origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_entry_store(
    session: Session = Depends(get_session),
    session_ctx: SessionContext | None = Depends(get_current_session),
) -> EntryStore:
    return EntryStore(EntryRepository(session), session_ctx)


def get_suggestion_service() -> SuggestionService:
    global _suggestion_service
    if _suggestion_service is None:
        _suggestion_service = SuggestionService()
    return _suggestion_service


def require_session(session_ctx: SessionContext | None = Depends(get_current_session)) -> SessionContext:
    if session_ctx is None:
        raise HTTPException(status_code=401, detail="Authentication required.")
    return session_ctx


def result_response(result: OperationResult, success_status: int = 200) -> JSONResponse:
    status_code = success_status if result.success else STATUS_BY_ERROR.get(result.error, 500)
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


def auth_response(user, response: Response) -> AuthResponse:
    session_ctx = session_for(user)
    token = create_access_token(session_ctx)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return AuthResponse(
        success=True,
        user=SessionUser(user_id=user.id, username=user.username, email=user.email),
        access_token=token,
    )


@app.post("/auth/register", response_model=AuthResponse)
def register(request: RegisterRequest, response: Response, session: Session = Depends(get_session)):
    """Create an account and sign it in."""
    logger.info(f"Register request for: {request.email}")

    try:
        user = create_user(session, request)
    except DuplicateUserError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except IntegrityError as e:
        # Another registration for the same email committed first
        session.rollback()
        logger.warning(f"Duplicate registration for {request.email}: {str(e)}")
        raise HTTPException(status_code=400, detail=f"An account already exists for {request.email}") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error registering user: {str(e)}")
        raise HTTPException(status_code=500, detail="An error occurred during registration.") from e

    return auth_response(user, response)


@app.post("/auth/login", response_model=AuthResponse)
def login(request: LoginRequest, response: Response, session: Session = Depends(get_session)):
    logger.info(f"Login request for: {request.email}")

    try:
        user = authenticate_user(session, request.email, request.password)
    except SQLAlchemyError as e:
        logger.error(f"Error during login: {str(e)}")
        raise HTTPException(status_code=500, detail="An error occurred during login.") from e

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    return auth_response(user, response)


@app.post("/auth/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"ok": True}


@app.get("/auth/me", response_model=SessionUser)
def current_user(session_ctx: SessionContext = Depends(require_session)):
    return SessionUser(user_id=session_ctx.user_id, username=session_ctx.username, email=session_ctx.email)


@app.get("/clients", response_model=list[LookupItem])
def list_clients():
    return CLIENTS


@app.get("/tasks", response_model=list[LookupItem])
def list_tasks():
    return TASKS


@app.get("/entries", response_model=EntryListResponse)
def get_entries(
    date_from: date | None = Query(None, description="Start date filter (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date filter (YYYY-MM-DD)"),
    store: EntryStore = Depends(get_entry_store),
):
    """Get the current user's entries, newest first, with optional date filtering."""
    logger.info(f"Entries request - from: {date_from}, to: {date_to}")

    result = store.load()
    body = EntryListResponse(
        success=result.success,
        message=result.message,
        error=result.error,
        entries=store.entries_between(date_from, date_to),
    )
    status_code = 200 if result.success else STATUS_BY_ERROR.get(result.error, 500)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.post("/entries", response_model=OperationResult, status_code=201)
def create_entry(draft: dict = Body(...), store: EntryStore = Depends(get_entry_store)):
    """Create a timeline entry for the current user."""
    logger.info("Create entry request")
    return result_response(store.save(draft), success_status=201)


@app.put("/entries/{entry_id}", response_model=OperationResult)
def update_entry(entry_id: int, draft: dict = Body(...), store: EntryStore = Depends(get_entry_store)):
    """Replace every editable field of an entry; id and owner are preserved."""
    logger.info(f"Update entry request for ID: {entry_id}")
    return result_response(store.save(draft, editing_id=entry_id))


@app.delete("/entries/{entry_id}", response_model=OperationResult)
def delete_entry(entry_id: int, store: EntryStore = Depends(get_entry_store)):
    """Delete a specific entry by ID."""
    logger.info(f"Delete entry request for ID: {entry_id}")
    return result_response(store.delete(entry_id))


@app.get("/entries/export")
def export_entries(
    format: ExportFormat = Query("csv", description="Export format: csv or tsv"),
    session_ctx: SessionContext = Depends(require_session),
    store: EntryStore = Depends(get_entry_store),
):
    """Download all of the current user's entries as CSV or TSV."""
    logger.info(f"Export request for user {session_ctx.user_id} as {format}")

    result = store.load()
    if not result.success:
        raise HTTPException(status_code=STATUS_BY_ERROR.get(result.error, 500), detail=result.message)
    if not store.entries:
        raise HTTPException(status_code=400, detail="There are no entries to export.")

    filename = export_filename(session_ctx.username, format)
    return Response(
        content=format_entries(store.entries, format),
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": content_disposition(filename)},
    )


@app.get("/calendar", response_model=CalendarResponse)
def get_calendar(
    year: int | None = Query(None, ge=1, le=9999, description="Displayed year (defaults to current)"),
    month: int | None = Query(None, ge=1, le=12, description="Displayed month (defaults to current)"),
    session_ctx: SessionContext = Depends(require_session),
    store: EntryStore = Depends(get_entry_store),
):
    """Days with entries and missed workdays for the displayed month."""
    today = date.today()
    year = year or today.year
    month = month or today.month
    logger.info(f"Calendar request for user {session_ctx.user_id}: {year}-{month:02d}")

    result = store.load()
    if not result.success:
        raise HTTPException(status_code=STATUS_BY_ERROR.get(result.error, 500), detail=result.message)

    annotations = compute_annotations(store.entries, year, month, today=today)
    weeks = [
        [CalendarDayResponse(date=cell.date, status=cell.status) if cell else None for cell in week]
        for week in month_grid(year, month, annotations)
    ]
    return CalendarResponse(
        year=year,
        month=month,
        highlighted_days=sorted(annotations.highlighted_days),
        missed_days=sorted(annotations.missed_days),
        weeks=weeks,
    )


@app.post("/suggestions", response_model=SuggestionResponse)
def get_suggestions(
    request: SuggestionRequest,
    session_ctx: SessionContext = Depends(require_session),
    store: EntryStore = Depends(get_entry_store),
    service: SuggestionService = Depends(get_suggestion_service),
):
    """Suggest descriptions and docket numbers from the user's past entries."""
    store.load()
    past_entries = past_entry_lines(store.entries, exclude_id=request.editing_id)
    return service.suggest(past_entries, request.current_entry)


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "TimeWise API", "docs": "/docs"}


def main():
    """Serve the API with uvicorn; HOST and PORT come from the environment."""
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
