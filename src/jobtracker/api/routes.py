from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from jobtracker.api.deps import (
    bearer,
    get_application_store,
    get_current_user,
    get_db,
    get_identity,
    load_active_user,
)
from jobtracker.api.schemas import (
    AuthResponse,
    CareerSummaryResponse,
    CreatedResponse,
    SignInRequest,
    SignUpRequest,
)
from jobtracker.core.access import get_user_profile
from jobtracker.core.applications import (
    JobApplicationStore,
    compute_statistics,
    filter_applications,
    most_applied_position,
    recent_applications,
)
from jobtracker.core.identity import AuthResult, LocalIdentityProvider
from jobtracker.db.models import UserProfile
from jobtracker.db.session import SessionLocal
from jobtracker.types import (
    ApplicationStatistics,
    JobApplicationFields,
    JobApplicationRecord,
    JobApplicationUpdate,
    UserProfileView,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def _auth_response(db: Session, result: AuthResult) -> AuthResponse:
    profile = get_user_profile(db, result.identity.uid)
    return AuthResponse(
        token=result.token,
        expires_at=result.expires_at,
        user=UserProfileView.model_validate(profile) if profile else None,
    )


@router.post("/auth/sign-up", response_model=AuthResponse)
def sign_up(
    payload: SignUpRequest,
    identity_provider: LocalIdentityProvider = Depends(get_identity),
    db: Session = Depends(get_db),
) -> AuthResponse:
    result = identity_provider.sign_up(payload.email, payload.password, payload.display_name)
    return _auth_response(db, result)


@router.post("/auth/sign-in", response_model=AuthResponse)
def sign_in(
    payload: SignInRequest,
    identity_provider: LocalIdentityProvider = Depends(get_identity),
    db: Session = Depends(get_db),
) -> AuthResponse:
    result = identity_provider.sign_in(payload.email, payload.password)
    return _auth_response(db, result)


@router.post("/auth/sign-out")
def sign_out(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    identity_provider: LocalIdentityProvider = Depends(get_identity),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return {"signed_out": identity_provider.sign_out(credentials.credentials)}


@router.get("/auth/me", response_model=UserProfileView)
def me(user: UserProfile = Depends(get_current_user)) -> UserProfileView:
    return UserProfileView.model_validate(user)


@router.get("/applications", response_model=list[JobApplicationRecord])
def list_applications(
    search: str = Query(""),
    status: str = Query("all"),
    user: UserProfile = Depends(get_current_user),
    store: JobApplicationStore = Depends(get_application_store),
) -> list[JobApplicationRecord]:
    return filter_applications(store.snapshot(user.uid), search=search, status=status)


@router.post("/applications", response_model=CreatedResponse)
def create_application(
    payload: JobApplicationFields,
    user: UserProfile = Depends(get_current_user),
    store: JobApplicationStore = Depends(get_application_store),
) -> CreatedResponse:
    return CreatedResponse(id=store.create(user.uid, payload))


@router.get("/applications/stats", response_model=ApplicationStatistics)
def application_stats(
    user: UserProfile = Depends(get_current_user),
    store: JobApplicationStore = Depends(get_application_store),
) -> ApplicationStatistics:
    return compute_statistics(store.snapshot(user.uid))


@router.get("/applications/summary", response_model=CareerSummaryResponse)
def application_summary(
    user: UserProfile = Depends(get_current_user),
    store: JobApplicationStore = Depends(get_application_store),
) -> CareerSummaryResponse:
    records = store.snapshot(user.uid)
    stats = compute_statistics(records)
    return CareerSummaryResponse(
        total_applications=stats.total,
        success_rate=stats.success_rate,
        most_applied_position=most_applied_position(records),
        role=user.role,
        recent_applications=recent_applications(records),
    )


@router.get("/applications/{record_id}", response_model=JobApplicationRecord)
def get_application(
    record_id: int,
    user: UserProfile = Depends(get_current_user),
    store: JobApplicationStore = Depends(get_application_store),
) -> JobApplicationRecord:
    return store.get(user.uid, record_id)


@router.patch("/applications/{record_id}", response_model=JobApplicationRecord)
def update_application(
    record_id: int,
    payload: JobApplicationUpdate,
    user: UserProfile = Depends(get_current_user),
    store: JobApplicationStore = Depends(get_application_store),
) -> JobApplicationRecord:
    store.update(user.uid, record_id, payload)
    return store.get(user.uid, record_id)


@router.delete("/applications/{record_id}")
def delete_application(
    record_id: int,
    user: UserProfile = Depends(get_current_user),
    store: JobApplicationStore = Depends(get_application_store),
) -> dict:
    store.delete(user.uid, record_id)
    return {"deleted": record_id}


def _authenticate_socket(token: str) -> UserProfile | None:
    identity = get_identity().resolve(token)
    if identity is None:
        return None
    with SessionLocal() as db:
        try:
            return load_active_user(db, identity)
        except HTTPException:
            return None


@router.websocket("/applications/stream")
async def stream_applications(websocket: WebSocket, token: str = "") -> None:
    user = await run_in_threadpool(_authenticate_socket, token)
    if user is None:
        await websocket.close(code=1008)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[list[JobApplicationRecord]] = asyncio.Queue()

    def _deliver(snapshot: list[JobApplicationRecord]) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, snapshot)

    async def _pump() -> None:
        while True:
            snapshot = await queue.get()
            await websocket.send_json([record.model_dump(mode="json") for record in snapshot])

    async def _receive() -> None:
        while True:
            await websocket.receive_text()

    store = get_application_store()
    subscription = await run_in_threadpool(store.list_for_owner, user.uid, _deliver)
    tasks = (asyncio.create_task(_pump()), asyncio.create_task(_receive()))
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            error = task.exception()
            if isinstance(error, WebSocketDisconnect):
                logger.debug("Application stream closed uid=%s", user.uid)
            elif error is not None:
                logger.warning("Application stream failed uid=%s error=%s", user.uid, error)
    finally:
        subscription.cancel()
        for task in tasks:
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
