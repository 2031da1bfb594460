from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # App Info
    app_name: str = "Tayrona Almacén POS API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./tayrona.db"
    auto_create_tables: bool = True

    # Security
    secret_key: str = Field(
        default="cambiar-en-produccion",
        description="Clave para firmar los JWT"
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # turno largo

    # Login rate limit
    login_max_attempts: int = 5
    login_window_minutes: int = 15

    # Reglas de operación
    require_trusted_device: bool = Field(
        default=True,
        description="Los cajeros solo pueden ingresar desde dispositivos aprobados"
    )
    require_open_shift_for_sales: bool = Field(
        default=True,
        description="No se pueden registrar ventas sin caja abierta"
    )

    # CORS
    allowed_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
