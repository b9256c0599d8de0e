"""Main application entry point"""
import logging
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import CORS_ORIGINS, ENABLED_PLATFORMS
from .errors import UnexpectedInternalError, VidRelayError
from .logging_setup import setup_logging
from .models.domain import Platform
from .models.schemas import ErrorResponse
from .routers import api
from .services.delivery_service import DeliveryService
from .services.host_validator import HostValidator, build_rules
from .services.inspection_service import InspectionService
from .services.resolvers import BaseResolver, default_resolvers
from .services.transcoder import Transcoder

logger = logging.getLogger(__name__)


async def handle_vidrelay_error(request: Request, exc: VidRelayError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())


async def handle_validation_error(request: Request, exc: RequestValidationError):
    logger.info("%s %s invalid request: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content=ErrorResponse(error="Invalid request.").model_dump())


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=UnexpectedInternalError.default_message).model_dump(),
    )


def create_app(
    validator: Optional[HostValidator] = None,
    resolvers: Optional[Dict[Platform, BaseResolver]] = None,
    transcoder: Optional[Transcoder] = None
) -> FastAPI:
    """Build the FastAPI app with its pipeline services on app.state"""
    resolvers = resolvers if resolvers is not None else default_resolvers()
    if validator is None:
        validator = HostValidator(build_rules(ENABLED_PLATFORMS, supported=resolvers.keys()))

    app = FastAPI(title="vidrelay")

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    inspection_service = InspectionService(validator, resolvers)
    app.state.inspection_service = inspection_service
    app.state.delivery_service = DeliveryService(inspection_service, transcoder)

    app.add_exception_handler(VidRelayError, handle_vidrelay_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    # Include routers
    app.include_router(api.router)

    logger.info("Allowed hosts: %s", ", ".join(validator.allowed_hosts))
    return app


def main():
    import uvicorn
    from .config import API_HOST, API_PORT

    setup_logging()
    uvicorn.run(create_app(), host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    main()
