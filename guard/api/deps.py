"""Request dependencies: the store and applier are attached to app.state by service.py."""

from typing import Optional

from fastapi import Request

from guard.store import SecurityStore
from guard.system_changes import SystemChangeApplier


def get_store(request: Request) -> SecurityStore:
    return request.app.state.store


def get_applier(request: Request) -> SystemChangeApplier:
    return request.app.state.applier


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None
