from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from .settings import settings

IS_SQLITE = settings.database_url.startswith("sqlite")

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    pool_recycle=300,
    echo=settings.debug,
    # el threadpool de FastAPI usa la conexión desde otros hilos
    connect_args={"check_same_thread": False} if IS_SQLITE else {}
)

if IS_SQLITE:
    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute("PRAGMA busy_timeout = 30000")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Sesión por request; se cierra siempre al terminar"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
