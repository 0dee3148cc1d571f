"""FastAPI application setup for the rainwatch proxy."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .api import router as api_router
from .config import settings
from .errors import WeatherApiError
from .logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="rainwatch/main")

app = FastAPI(title="Rainwatch")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(WeatherApiError)
async def handle_weather_api_error(request: Request, exc: WeatherApiError):
    """Render domain errors as {"error": message} with their status code."""
    logger.info(
        "Request failed",
        extra={"path": request.url.path, "status_code": exc.status_code, "error": exc.message},
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.get("/", response_class=PlainTextResponse)
def root():
    """Liveness greeting."""
    return "¡Hola! El servidor funciona."


# API routes
app.include_router(api_router, prefix="/api")
