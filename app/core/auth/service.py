import logging
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.modules.devices.service import DevicesService
from app.modules.users.repository import UsersRepository
from app.shared.database.models import LoginAttempt
from .schemas import LoginRequest, LoginResponse, UserResponse
from .security import create_access_token, verify_password

logger = logging.getLogger(__name__)

class AuthService:
    """
    Login con límite de intentos por usuario/IP y verificación de dispositivo
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UsersRepository(db)

    async def login(self, credentials: LoginRequest, ip: str) -> LoginResponse:
        username = credentials.username.strip().lower()

        if self._recent_failures(username, ip) >= settings.login_max_attempts:
            logger.warning(f"Login bloqueado para {username} desde {ip}: demasiados intentos")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Demasiados intentos fallidos. Intenta nuevamente en {settings.login_window_minutes} minutos"
            )

        user = self.users.get_by_username(username)
        if not user or not user.activo or not verify_password(credentials.password, user.password_hash):
            self._record_failure(username, ip)
            logger.warning(f"Login fallido para {username} desde {ip}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Credenciales inválidas"
            )

        if settings.require_trusted_device and not user.is_admin:
            access = await DevicesService(self.db).check_access(credentials.device_fingerprint, user)
            if not access.acceso_concedido:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail={
                        "mensaje": access.motivo,
                        "requiere_aprobacion": access.requiere_aprobacion,
                        "estado": access.estado.value if access.estado else None,
                        "codigo_activacion": access.codigo_activacion
                    }
                )

        self._clear_failures(username)

        token = create_access_token({"sub": str(user.id), "username": user.username, "role": user.role})
        logger.info(f"Login exitoso de {user.username} ({user.role})")

        return LoginResponse(
            access_token=token,
            expires_in_minutes=settings.access_token_expire_minutes,
            user=UserResponse.model_validate(user)
        )

    # ==================== RATE LIMITING ====================

    def _recent_failures(self, username: str, ip: str) -> int:
        since = datetime.now() - timedelta(minutes=settings.login_window_minutes)
        by_user = self.db.query(LoginAttempt).filter(
            LoginAttempt.username == username,
            LoginAttempt.created_at >= since
        ).count()
        by_ip = self.db.query(LoginAttempt).filter(
            LoginAttempt.ip == ip,
            LoginAttempt.created_at >= since
        ).count()
        return max(by_user, by_ip)

    def _record_failure(self, username: str, ip: str) -> None:
        self.db.add(LoginAttempt(username=username, ip=ip, created_at=datetime.now()))
        self.db.commit()

    def _clear_failures(self, username: str) -> None:
        self.db.query(LoginAttempt).filter(LoginAttempt.username == username).delete()
        self.db.commit()
