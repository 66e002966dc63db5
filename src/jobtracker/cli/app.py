from __future__ import annotations

import json

import typer
import uvicorn

from jobtracker.api.app import create_app
from jobtracker.config import get_settings
from jobtracker.core.access import get_user_profile, validate_role
from jobtracker.core.applications import (
    JobApplicationStore,
    compute_statistics,
    filter_applications,
    most_applied_position,
    recent_applications,
)
from jobtracker.core.chat import ChatSession, build_user_context
from jobtracker.core.runtime import get_snapshot_bus
from jobtracker.db.init import init_database
from jobtracker.db.repositories import Repository
from jobtracker.db.session import SessionLocal
from jobtracker.errors import JobTrackerError
from jobtracker.llm.service import CareerAIService
from jobtracker.logging_config import configure_logging
from jobtracker.types import STATUS_LABELS, UserProfileView

app = typer.Typer(help="Job Tracker CLI")
users_app = typer.Typer(help="Manage user profiles")
apps_app = typer.Typer(help="Inspect job applications")

app.add_typer(users_app, name="users")
app.add_typer(apps_app, name="apps")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _store() -> JobApplicationStore:
    return JobApplicationStore(SessionLocal, get_snapshot_bus())


@app.command("init")
def init_cmd() -> None:
    """Create the database tables."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@users_app.command("list")
def users_list() -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        users = Repository(db).list_users()
        typer.echo(
            json.dumps(
                [
                    {
                        "uid": user.uid,
                        "email": user.email,
                        "role": user.role,
                        "is_active": user.is_active,
                        "created_at": user.created_at.isoformat() if user.created_at else None,
                    }
                    for user in users
                ],
                indent=2,
            )
        )


@users_app.command("set-role")
def users_set_role(
    email: str = typer.Option(..., "--email"),
    role: str = typer.Option(..., "--role"),
) -> None:
    """Bootstrap a role directly in the store (operator access, no admin check)."""
    configure_logging()
    ensure_initialized()
    try:
        role = validate_role(role)
    except JobTrackerError as exc:
        raise typer.BadParameter(str(exc)) from exc

    with SessionLocal() as db:
        repo = Repository(db)
        match = repo.get_user_by_email(email.strip().lower())
        if match is None:
            typer.echo(json.dumps({"ok": False, "error": f"no user with email {email}"}, indent=2))
            raise typer.Exit(code=1)
        profile = repo.update_user_fields(match.uid, {"role": role})
        typer.echo(json.dumps({"ok": True, "uid": profile.uid, "role": profile.role}, indent=2))


@apps_app.command("list")
def apps_list(
    uid: str = typer.Option(..., "--uid"),
    search: str = typer.Option("", "--search"),
    status: str = typer.Option("all", "--status"),
) -> None:
    configure_logging()
    ensure_initialized()
    records = filter_applications(_store().snapshot(uid), search=search, status=status)
    typer.echo(
        json.dumps(
            [
                {**record.model_dump(mode="json"), "status_label": STATUS_LABELS.get(record.status, record.status)}
                for record in records
            ],
            indent=2,
        )
    )


@apps_app.command("stats")
def apps_stats(uid: str = typer.Option(..., "--uid")) -> None:
    configure_logging()
    ensure_initialized()
    records = _store().snapshot(uid)
    payload = compute_statistics(records).model_dump()
    payload["most_applied_position"] = most_applied_position(records)
    payload["recent_applications"] = [record.model_dump(mode="json") for record in recent_applications(records)]
    typer.echo(json.dumps(payload, indent=2))


@app.command("chat")
def chat_cmd(uid: str = typer.Option(..., "--uid")) -> None:
    """Talk to the career assistant from the terminal. Empty input exits."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        profile = get_user_profile(db, uid)
        view = UserProfileView.model_validate(profile) if profile else None
    context = build_user_context(view, _store().snapshot(uid))
    session = ChatSession(CareerAIService(), context=context)
    typer.echo(session.welcome().content)
    while True:
        message = typer.prompt("you", default="", show_default=False)
        if not message.strip():
            break
        reply = session.send(message)
        if reply is not None:
            typer.echo(f"assistant: {reply.content}")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)


if __name__ == "__main__":
    app()
