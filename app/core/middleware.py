from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from app.config.settings import settings
import time
import logging

logger = logging.getLogger(__name__)

DEVICE_HEADER = "X-Device-Fingerprint"

def setup_middleware(app: FastAPI):
    """CORS para el frontend del POS y log de cada request con su dispositivo"""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", DEVICE_HEADER],
        expose_headers=["Content-Disposition", "X-Process-Time"],
        max_age=3600
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        # los healthchecks del balanceador no se registran
        if request.url.path.endswith("/health"):
            return response

        device = request.headers.get(DEVICE_HEADER)
        message = (
            f"{request.method} {request.url.path} - {response.status_code} - {process_time:.4f}s"
            + (f" - dispositivo {device[:12]}" if device else "")
        )
        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)

        return response
