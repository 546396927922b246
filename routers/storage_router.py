"""
Storage Router
Flat-file JSON CRUD for dashboard resources and key/value settings
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from json_file_store import (
    InvalidResourceError,
    ItemNotFoundError,
    JsonFileStore,
    get_file_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["Storage"])


class SettingUpdate(BaseModel):
    key: str
    value: Optional[Any] = None


def _invalid_resource(error: InvalidResourceError) -> JSONResponse:
    logger.warning(str(error))
    return JSONResponse(status_code=400, content={"error": str(error)})


# Settings routes are registered first so they win over /{resource}


@router.get("/settings/{key}")
def get_setting(key: str, store: JsonFileStore = Depends(get_file_store)):
    """Stored value for key, or null"""
    return store.get_setting(key)


@router.post("/settings")
def save_setting(update: SettingUpdate, store: JsonFileStore = Depends(get_file_store)):
    store.set_setting(update.key, update.value)
    return {"success": True}


@router.get("/{resource}")
def list_items(resource: str, store: JsonFileStore = Depends(get_file_store)):
    try:
        return store.list_items(resource)
    except InvalidResourceError as e:
        return _invalid_resource(e)


@router.post("/{resource}")
def create_item(
    resource: str,
    payload: Dict[str, Any] = Body(...),
    store: JsonFileStore = Depends(get_file_store),
):
    try:
        return store.create_item(resource, payload)
    except InvalidResourceError as e:
        return _invalid_resource(e)


@router.put("/{resource}/{item_id}")
def update_item(
    resource: str,
    item_id: str,
    payload: Dict[str, Any] = Body(...),
    store: JsonFileStore = Depends(get_file_store),
):
    try:
        return store.update_item(resource, item_id, payload)
    except InvalidResourceError as e:
        return _invalid_resource(e)
    except ItemNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Not found"})


@router.delete("/{resource}/{item_id}")
def delete_item(
    resource: str, item_id: str, store: JsonFileStore = Depends(get_file_store)
):
    try:
        store.delete_item(resource, item_id)
    except InvalidResourceError as e:
        return _invalid_resource(e)
    return {"success": True}
