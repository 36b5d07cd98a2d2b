from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from crud_lib.contract import CrudStore
from crud_lib.errors import CrudError
from .health import get_health

import logging
router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    'null_argument': 400,
    'missing_key': 400,
    'key_mismatch': 400,
    'duplicate_key': 409,
    'not_found': 404,
    'backend_failure': 500,
}


class CreatePayload(BaseModel):
    object: Optional[Any] = None
    key: Optional[str] = None


class UpdatePayload(BaseModel):
    object: Optional[Any] = None


def get_store(request: Request) -> CrudStore:
    store = getattr(request.app.state, 'store', None)
    if store is None:
        raise HTTPException(status_code=500, detail={'error': 'not_configured', 'message': 'Object store not configured'})
    return store


async def crud_error_handler(request: Request, exc: CrudError) -> JSONResponse:
    status = ERROR_STATUS.get(exc.code, 500)
    if status >= 500:
        logger.error('%s %s failed: %s', request.method, request.url.path, exc)
    else:
        logger.debug('%s %s rejected: %s', request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={'detail': {'error': exc.code, 'message': str(exc)}})


@router.post('/v1/objects', status_code=201)
async def api_object_create(payload: CreatePayload, store: CrudStore = Depends(get_store)):
    key = await store.create(payload.object, key=payload.key)
    return {'key': key}


@router.get('/v1/objects/{key}')
async def api_object_read(key: str, store: CrudStore = Depends(get_store)):
    return await store.read(key)


@router.put('/v1/objects/{key}')
async def api_object_update(key: str, payload: UpdatePayload, store: CrudStore = Depends(get_store)):
    await store.update(key, payload.object)
    return {'ok': True, 'key': key}


@router.delete('/v1/objects/{key}')
async def api_object_delete(key: str, store: CrudStore = Depends(get_store)):
    await store.delete(key)
    return {'ok': True, 'key': key}


@router.get('/health')
async def api_health(request: Request):
    store = getattr(request.app.state, 'store', None)
    backend = getattr(getattr(store, 'backend', None), 'name', None)
    return get_health(backend)
