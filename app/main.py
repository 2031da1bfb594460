import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config.settings import settings
from app.config.database import Base, engine
from app.core.middleware import setup_middleware
from app.api.v1.router import api_router
from app.shared.database import models  # noqa: F401  registra las tablas en Base.metadata

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"{settings.app_name} v{settings.version} iniciando")
    logger.info(f"Entorno: {'Development' if settings.debug else 'Production'}")
    logger.info(f"Token expira en {settings.access_token_expire_minutes} minutos")
    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Tablas verificadas")

    yield

    # Shutdown
    logger.info(f"{settings.app_name} detenida")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Punto de venta, caja e inventario inteligente para Tayrona Almacén",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)

# Include routers
app.include_router(api_router, prefix="/api/v1")

# Root endpoint
@app.get("/")
async def root():
    return {
        "message": settings.app_name,
        "version": settings.version,
        "status": "running",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "api": "/api/v1"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
