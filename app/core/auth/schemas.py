from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    device_fingerprint: Optional[str] = Field(None, description="Huella del dispositivo desde el que se ingresa")

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    nombre: str
    role: str
    activo: bool
    is_admin: bool
    created_at: Optional[datetime] = None

class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Autenticación exitosa"
    access_token: str
    token_type: str = "bearer"
    expires_in_minutes: int
    user: UserResponse
