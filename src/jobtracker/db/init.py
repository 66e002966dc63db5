from __future__ import annotations

from jobtracker.db.base import Base
from jobtracker.db.session import engine
from jobtracker.db import models  # noqa: F401


def init_database() -> dict[str, list[str]]:
    Base.metadata.create_all(bind=engine)
    return {"tables": sorted(Base.metadata.tables)}
