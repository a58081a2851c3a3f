"""FastAPI wiring for transports built on the storefront core.

Routes belong to the transport; this module only supplies what every one of
them needs: logging, the domain context per request and the failure mapping.
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.domain import Domain

from storefront.api.errors import register_error_handlers
from storefront.utils.logging import bind_request_context, clear_request_context, configure_logging


def create_app(domain: Domain, title: str = "Storefront API") -> FastAPI:
    configure_logging()
    app = FastAPI(title=title)

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the Protean domain context and tag log lines for each request."""
        bind_request_context(
            request_id=request.headers.get("x-request-id") or uuid4().hex,
            path=request.url.path,
        )
        try:
            with domain.domain_context():
                return await call_next(request)
        finally:
            clear_request_context()

    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": domain.name})

    return app
