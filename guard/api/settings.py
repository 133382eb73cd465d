from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from pydantic import ValidationError as SchemaError

from guard.api.deps import client_ip, get_store
from guard.errors import ValidationError
from guard.logic import get_settings, update_settings
from guard.schemas import SettingsUpdate, SettingsView
from guard.store import SecurityStore

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SettingsView)
def read_settings(store: SecurityStore = Depends(get_store)):
    return get_settings(store)


@router.patch("", response_model=SettingsView)
def patch_settings(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    store: SecurityStore = Depends(get_store),
):
    try:
        changes = SettingsUpdate.model_validate(payload)
    except SchemaError:
        raise ValidationError("Invalid security settings data")
    return update_settings(store, changes, ip_address=client_ip(request))
