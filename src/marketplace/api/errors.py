"""Exception-to-HTTP mapping for the marketplace API.

Protean's standard handlers cover validation (400), not-found (404) and
state errors. Authorization failures are ``ValidationError`` subclasses in
the domain, so they get their own, more specific, 403 handler.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from marketplace.domain import logger
from marketplace.exceptions import Forbidden


def register_marketplace_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(Forbidden)
    async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
        logger.info("Request forbidden", path=request.url.path, error=exc.messages)
        return JSONResponse(status_code=403, content={"error": exc.messages})
