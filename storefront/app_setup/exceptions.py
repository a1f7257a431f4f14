"""
Gestionnaires d'exceptions.
- HTTPException (429 rate limit, 404, ...): enveloppe JSON {"success": false, "error": ...}
- Exceptions non capturées: 500 générique, détail uniquement dans les logs.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_error_envelope(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_envelope(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request data"})

    @app.exception_handler(Exception)
    async def unhandled_error_envelope(request: Request, exc: Exception):
        logger.exception("Erreur non gérée path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})
