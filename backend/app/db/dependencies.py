"""FastAPI dependencies for registry access."""

from fastapi import Header

from app.db.session import SessionLocal
from app.services.registry import RegistryStore


def get_registry_store() -> RegistryStore:
    """Return a registry store bound to the application session factory."""

    return RegistryStore(SessionLocal)


def get_actor_id(x_user_id: int | None = Header(default=None, ge=1)) -> int | None:
    """Acting user id for audit attribution; authentication happens upstream."""

    return x_user_id
