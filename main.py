"""
HTTP admin API for Redirect Generator.

Responsibilities:
    - Expose the same redirect creation flow as `redirect:add` over REST
    - List stored redirects
    - Health check

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage and link resolver are injected; by default storage comes from the
      environment (memory or postgres) and the resolver from REDIRECT_SITE_CONFIG.
      Without a resolver, targets are stored as given.
    - RedirectStore owns the duplicate-resolution rules; this module only maps
      outcomes to status codes (409 for a conflicting redirect).
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from redirect_generator.config import settings
from redirect_generator.exceptions import RedirectGeneratorError
from redirect_generator.manager.redirect_store import RedirectStore
from redirect_generator.models.configuration import Configuration
from redirect_generator.resolver.base import LinkResolver
from redirect_generator.resolver.site_resolver import SiteLinkResolver
from redirect_generator.storage.base import BaseStorage
from redirect_generator.storage.storage_factory import get_storage


class RedirectRequest(BaseModel):
    """Request payload for adding a redirect."""
    source: str
    target: str
    status_code: int = settings.DEFAULT_STATUS_CODE
    overwrite_existing: bool = False
    dry_run: bool = False
    keep_query_parameters: bool = False
    is_regexp: bool = False
    force_https: bool = False
    disable_hitcount: bool = False
    respect_query_parameters: bool = False


def create_app(
    storage: Optional[BaseStorage] = None,
    resolver: Optional[LinkResolver] = None,
    clock: Optional[Callable[[], int]] = None,
) -> FastAPI:
    """
    Build and configure a new FastAPI app instance.

    Args:
        storage: Row store; defaults to `get_storage()` (env driven).
        resolver: Link resolver; defaults to the site map in REDIRECT_SITE_CONFIG, if set.
        clock: Time source for created/updated timestamps.
    """
    app = FastAPI(
        title="Redirect Generator",
        description="Add redirects to the CMS redirects table with duplicate resolution",
        docs_url="/docs",
    )
    log = logging.getLogger("redirect_generator.api")

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    storage = storage if storage is not None else get_storage()
    if resolver is None and settings.SITE_CONFIG:
        resolver = SiteLinkResolver.from_file(settings.SITE_CONFIG)
    store = RedirectStore(storage=storage, clock=clock)
    log.info("Redirect storage backend: %s", type(storage).__name__)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/redirects")
    def add_redirect(req: RedirectRequest) -> JSONResponse:
        """
        Add a redirect.

        Returns:
            200 with the outcome (created, overwritten, already present, dry run),
            409 with the outcome for a conflicting redirect.

        Raises:
            HTTPException(400): Invalid source URL, status code or target.
        """
        try:
            configuration = Configuration.build(
                status_code=req.status_code,
                overwrite_existing=req.overwrite_existing,
                keep_query_parameters=req.keep_query_parameters,
                is_regexp=req.is_regexp,
                force_https=req.force_https,
                disable_hitcount=req.disable_hitcount,
                respect_query_parameters=req.respect_query_parameters,
            )
            resolved: Dict[str, Any] = {}
            target = req.target
            if resolver is not None:
                link = resolver.resolve(req.target)
                target = link.canonical_link
                resolved = link.model_dump()
            outcome = store.add(req.source, target, configuration, dry_run=req.dry_run)
        except RedirectGeneratorError as exc:
            raise HTTPException(status_code=400, detail={"message": str(exc), "code": exc.code})

        body = {**outcome.to_dict(), "resolved": resolved or None}
        return JSONResponse(body, status_code=409 if outcome.is_rejected else 200)

    @app.get("/redirects")
    def list_redirects() -> List[Dict[str, Any]]:
        return store.list_all()

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
