from __future__ import annotations

import logging

from jobtracker.core.access import initialize_user_profile
from jobtracker.core.events import SnapshotBus
from jobtracker.core.identity import Identity, LocalIdentityProvider
from jobtracker.db.session import SessionLocal

logger = logging.getLogger(__name__)

_SNAPSHOT_BUS: SnapshotBus | None = None
_IDENTITY_PROVIDER: LocalIdentityProvider | None = None


def get_snapshot_bus() -> SnapshotBus:
    global _SNAPSHOT_BUS
    if _SNAPSHOT_BUS is None:
        _SNAPSHOT_BUS = SnapshotBus()
    return _SNAPSHOT_BUS


def _on_auth_state_changed(identity: Identity | None) -> None:
    if identity is None:
        return
    with SessionLocal() as session:
        initialize_user_profile(session, identity)


def get_identity_provider() -> LocalIdentityProvider:
    global _IDENTITY_PROVIDER
    if _IDENTITY_PROVIDER is None:
        _IDENTITY_PROVIDER = LocalIdentityProvider(SessionLocal)
        _IDENTITY_PROVIDER.on_auth_state_changed(_on_auth_state_changed)
    return _IDENTITY_PROVIDER
