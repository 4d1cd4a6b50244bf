"""HTTP route definitions for account and script endpoints."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from ..domain.account import Account
from ..domain.contracts import GenerateScriptInput
from ..domain.errors import (
    ConflictError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
    ValidationFailedError,
)
from ..domain.script_service import ScriptService
from ..domain.service import AccountService, AuthResult
from ..schemas import (
    AccountOut,
    AuthResponse,
    GenerateScriptRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ScriptListResponse,
    ScriptOut,
)
from ..security.throttle import Throttle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_account_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def get_script_service(request: Request) -> ScriptService:
    """Resolve the `ScriptService` stored on the FastAPI application state."""
    service: ScriptService = request.app.state.script_service
    return service


def get_throttle(request: Request) -> Throttle:
    """Resolve the auth throttle stored on the FastAPI application state."""
    throttle: Throttle = request.app.state.throttle
    return throttle


def _client_key(request: Request, action: str) -> str:
    host = request.client.host if request.client else "unknown"
    return f"{action}:{host}"


def get_current_account(
    authorization: str | None = Header(default=None),
    service: AccountService = Depends(get_account_service),
) -> Account:
    """Resolve the bearer token in the ``Authorization`` header to its account."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing or malformed authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return service.identify(token.strip())
    except ServiceError as exc:
        raise _http_error_from_service_error(exc) from exc


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(token=result.token, account=AccountOut.from_domain(result.account))


@router.post("/auth/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: Request,
    payload: RegisterRequest,
    service: AccountService = Depends(get_account_service),
    throttle: Throttle = Depends(get_throttle),
) -> AuthResponse:
    """Create an account and return its first session token."""
    if not throttle.allow(_client_key(request, "register")):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")
    try:
        result = service.register(payload.email, payload.password)
    except ServiceError as exc:
        raise _http_error_from_service_error(exc) from exc
    return _auth_response(result)


@router.post("/auth/login", response_model=AuthResponse)
def login(
    request: Request,
    payload: LoginRequest,
    service: AccountService = Depends(get_account_service),
    throttle: Throttle = Depends(get_throttle),
) -> AuthResponse:
    """Exchange email and password for a session token."""
    key = _client_key(request, "login")
    if not throttle.allow(key):
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")
    try:
        result = service.login(payload.email, payload.password)
    except ServiceError as exc:
        raise _http_error_from_service_error(exc) from exc
    throttle.reset(key)
    return _auth_response(result)


@router.get("/auth/me", response_model=AccountOut)
def me(account: Account = Depends(get_current_account)) -> AccountOut:
    """Return the account the bearer token resolves to."""
    return AccountOut.from_domain(account)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(account: Account = Depends(get_current_account)) -> MessageResponse:
    """Acknowledge logout without server-side effect.

    Sessions are stateless: the client discards its token, which otherwise
    stays valid until it expires.
    """
    logger.info("account %s logged out", account.account_id)
    return MessageResponse(message="logged out")


@router.post("/scripts/generate", response_model=ScriptOut, status_code=status.HTTP_201_CREATED)
def generate_script(
    payload: GenerateScriptRequest,
    account: Account = Depends(get_current_account),
    service: ScriptService = Depends(get_script_service),
) -> ScriptOut:
    """Generate a session script for the caller and store it."""
    try:
        script = service.generate(
            account.account_id,
            GenerateScriptInput(
                symptom_tags=payload.symptoms,
                tone=payload.tone.value,
                duration_minutes=payload.duration,
                title=payload.title,
            ),
        )
    except ServiceError as exc:
        raise _http_error_from_service_error(exc) from exc
    return ScriptOut.from_domain(script)


@router.get("/scripts", response_model=ScriptListResponse)
def list_scripts(
    account: Account = Depends(get_current_account),
    service: ScriptService = Depends(get_script_service),
) -> ScriptListResponse:
    """List the caller's scripts, newest first."""
    try:
        scripts = service.list(account.account_id)
    except ServiceError as exc:
        raise _http_error_from_service_error(exc) from exc
    return ScriptListResponse(
        scripts=[ScriptOut.from_domain(script) for script in scripts],
        total=len(scripts),
    )


@router.get("/scripts/{script_id}", response_model=ScriptOut)
def get_script(
    script_id: uuid.UUID,
    account: Account = Depends(get_current_account),
    service: ScriptService = Depends(get_script_service),
) -> ScriptOut:
    """Fetch one of the caller's scripts by id."""
    try:
        script = service.get(account.account_id, str(script_id))
    except ServiceError as exc:
        raise _http_error_from_service_error(exc) from exc
    return ScriptOut.from_domain(script)


@router.delete("/scripts/{script_id}", response_model=MessageResponse)
def delete_script(
    script_id: uuid.UUID,
    account: Account = Depends(get_current_account),
    service: ScriptService = Depends(get_script_service),
) -> MessageResponse:
    """Delete one of the caller's scripts by id."""
    try:
        service.delete(account.account_id, str(script_id))
    except ServiceError as exc:
        raise _http_error_from_service_error(exc) from exc
    return MessageResponse(message="script deleted")


def _http_error_from_service_error(exc: ServiceError) -> HTTPException:
    if isinstance(exc, ValidationFailedError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, UnauthorizedError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    logger.error("internal error: %r", exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal server error")
