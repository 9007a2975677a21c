import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .routers import availability
from .services.availability import (
    AvailabilityError,
    DataSourceError,
    NotFoundError,
    ScanCancelled,
    ValidationError,
)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Non-standard "client closed request"
CLIENT_CLOSED_REQUEST = 499

app = FastAPI(title="Agenda Availability API")

app.include_router(availability.router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(AvailabilityError)
async def availability_error_handler(request: Request, exc: AvailabilityError):
    if isinstance(exc, ValidationError):
        return JSONResponse(status_code=400, content={"detail": exc.message})

    if isinstance(exc, NotFoundError):
        return JSONResponse(status_code=404, content={"detail": exc.message})

    if isinstance(exc, ScanCancelled):
        logger.info(f"Availability scan cancelled: {request.url.path}")
        return JSONResponse(status_code=CLIENT_CLOSED_REQUEST, content={"detail": exc.message})

    if isinstance(exc, DataSourceError):
        logger.exception(f"Availability data source failure on {request.url.path}")
        return JSONResponse(status_code=503, content={"detail": DataSourceError.default_message})

    logger.exception(f"Availability error on {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": AvailabilityError.default_message})
