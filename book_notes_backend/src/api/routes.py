from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Path, Request, status

from src.api.auth import Identity, TokenService, get_current_user, get_token_service
from src.api.database import db_healthcheck
from src.api.enhance import get_enhancement_client
from src.api.errors import NotFoundError, UnauthenticatedError
from src.api.logging import get_logger
from src.api.models import Note, User
from src.api.notes import NoteStore, get_note_store
from src.api.schemas import (
    AuthResponse,
    DeleteResponse,
    EnhanceRequest,
    EnhanceResponse,
    HealthResponse,
    LoginRequest,
    MeResponse,
    NoteCreateRequest,
    NoteResponse,
    NoteSummary,
    RegisterRequest,
    UserResponse,
)
from src.api.users import CredentialStore, get_credential_store

logger = get_logger(__name__)

router = APIRouter()
api = APIRouter(prefix="/api")


def _auth_response(user: User, tokens: TokenService) -> AuthResponse:
    token = tokens.issue({"id": user.id, "email": user.email})
    return AuthResponse(token=token, user=UserResponse(id=user.id, email=user.email))


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _note_response(note: Note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        title=note.title,
        author=note.author,
        note=note.body,
        created_at=_as_utc(note.created_at),
    )


# PUBLIC_INTERFACE
@router.get("/", tags=["Health"], summary="Health Check")
def health_check():
    """
    Health check endpoint.

    Returns:
        JSON object indicating service status.
    """
    return {"message": "Healthy"}


# PUBLIC_INTERFACE
@api.get("/health", response_model=HealthResponse, tags=["Health"], summary="Database health check")
def database_health(request: Request):
    """Report whether the database answers a trivial query."""
    try:
        ok = db_healthcheck(request.app.state.engine)
    except Exception:
        logger.exception("database_healthcheck", ok=False)
        ok = False
    return HealthResponse(status="ok" if ok else "degraded", database=ok)


# -------- Auth Routes --------

# PUBLIC_INTERFACE
@api.post(
    "/auth/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Auth"],
    summary="Register a new user",
)
def register_user(
    payload: RegisterRequest,
    users: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Register a new user and log them in.

    Body:
        email: valid email address (stored lowercased)
        password: plaintext password, at least 6 chars and at most 72 bytes

    Returns:
        AuthResponse with a bearer token and the new user.

    Raises:
        409 if email already in use.
    """
    user = users.create_user(payload.email, payload.password)
    return _auth_response(user, tokens)


# PUBLIC_INTERFACE
@api.post("/auth/login", response_model=AuthResponse, tags=["Auth"], summary="Login and obtain a bearer token")
def login(
    payload: LoginRequest,
    users: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Exchange email and password for a bearer token.

    Raises:
        401 "Invalid email or password" for an unknown email or a wrong password alike.
    """
    user = users.authenticate(payload.email, payload.password)
    if user is None:
        raise UnauthenticatedError("Invalid email or password")
    return _auth_response(user, tokens)


# PUBLIC_INTERFACE
@api.get("/me", response_model=MeResponse, tags=["Auth"], summary="Current user")
def whoami(current_user: Identity = Depends(get_current_user)):
    return MeResponse(user=UserResponse(id=current_user.id, email=current_user.email))


# -------- Notes Routes --------

# PUBLIC_INTERFACE
@api.get("/notes", response_model=List[NoteSummary], tags=["Notes"], summary="List my notes")
def list_notes(
    current_user: Identity = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
):
    """
    List notes belonging to the current user, newest first.

    Entries carry id, bookTitle, author and createdAt; fetch a single note for its text.
    """
    return [
        NoteSummary(id=n.id, title=n.title, author=n.author, created_at=_as_utc(n.created_at))
        for n in notes.list_by_owner(current_user.id)
    ]


# PUBLIC_INTERFACE
@api.get("/notes/{note_id}", response_model=NoteResponse, tags=["Notes"], summary="Get a note by ID")
def get_note(
    note_id: int = Path(..., ge=1),
    current_user: Identity = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
):
    """
    Retrieve a single note by ID. Notes of other users are reported as not found.
    """
    note = notes.get_one(note_id, current_user.id)
    if note is None:
        raise NotFoundError()
    return _note_response(note)


# PUBLIC_INTERFACE
@api.post(
    "/notes",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Notes"],
    summary="Create a new note",
)
def create_note(
    payload: NoteCreateRequest,
    current_user: Identity = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
):
    """
    Create a new note for the authenticated user.

    Body:
        title (or bookTitle): book title
        author: optional
        note: note text
    """
    note = notes.create(current_user.id, payload.title, payload.author, payload.note)
    return _note_response(note)


# PUBLIC_INTERFACE
@api.delete("/notes/{note_id}", response_model=DeleteResponse, tags=["Notes"], summary="Delete a note by ID")
def delete_note(
    note_id: int = Path(..., ge=1),
    current_user: Identity = Depends(get_current_user),
    notes: NoteStore = Depends(get_note_store),
):
    """
    Delete a note. Only the owner can delete it.
    """
    if not notes.delete_one(note_id, current_user.id):
        raise NotFoundError()
    return DeleteResponse(ok=True)


# -------- AI Routes --------

# PUBLIC_INTERFACE
@api.post("/ai/enhance", response_model=EnhanceResponse, tags=["AI"], summary="Enhance or summarize note text")
def enhance_note(
    payload: EnhanceRequest,
    request: Request,
    current_user: Identity = Depends(get_current_user),
):
    """
    Send note text to the AI webhook and return its rewrite.

    Raises:
        503 when no webhook is configured, 502 when it fails, 504 when it times out.
    """
    enhancer = get_enhancement_client(request)
    return EnhanceResponse(text=enhancer.enhance(payload.text))


router.include_router(api)
