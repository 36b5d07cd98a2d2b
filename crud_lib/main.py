"""Application factory for the object store FastAPI app.

`create_app(config: Config) -> FastAPI` performs all setup (logging,
storage and store composition, exception handling and router
registration). Nothing happens at import time so tests can construct
isolated apps:

    from crud_lib.main import create_app, Config
    app = create_app(Config(storage_backend='memory'))
"""
from typing import Optional

from fastapi import FastAPI

from crud_lib.config import Config
from crud_lib.contract import CrudStore, StrKeyAccessor, key_accessor_for
from crud_lib.errors import CrudError
from crud_lib.logging_config import configure_logging
from crud_lib.storage import StorageBackend, create_storage

__all__ = ["Config", "create_app"]


def create_app(config: Config, backend: Optional[StorageBackend] = None) -> FastAPI:
    """Create and return a configured FastAPI application.

    `backend` overrides the storage described by `config`, which lets
    tests inject their own.
    """
    logger = configure_logging(config.log_level)

    if backend is None:
        backend = create_storage(
            backend=config.storage_backend,
            serializer=config.serializer,
            data_dir=config.data_dir,
            collection=config.collection,
            password=config.password,
            issue_keys=config.issue_keys,
        )
    # path keys are strings, so embedded keys are compared and stored as strings
    store = CrudStore(backend, key_accessor=StrKeyAccessor(key_accessor_for(config.key_field)))
    logger.info("Serving collection '%s' from %s backend", config.collection, getattr(backend, 'name', type(backend).__name__))

    app = FastAPI(title="CRUD Object Store")
    app.state.store = store

    from crud_lib.server.api import router, crud_error_handler
    app.add_exception_handler(CrudError, crud_error_handler)
    app.include_router(router, prefix='/api')

    return app
