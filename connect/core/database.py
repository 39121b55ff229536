from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from connect.core.config import settings


def postgres_connect_args(connect_timeout: int, statement_timeout_ms: int) -> dict:
    """
    psycopg2 connection arguments that bound every database call.

    connect_timeout caps the TCP/auth handshake; statement_timeout makes the
    server cancel any query (including one blocked on a row lock) after the
    given number of milliseconds. Both surface as OperationalError.
    """
    return {
        "connect_timeout": connect_timeout,
        "options": f"-c statement_timeout={statement_timeout_ms}",
    }


# Create SQLAlchemy engine
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using them
    pool_size=10,
    max_overflow=20,
    pool_timeout=settings.DB_POOL_TIMEOUT,  # Bounded wait for a pooled connection
    connect_args=postgres_connect_args(settings.DB_CONNECT_TIMEOUT, settings.DB_STATEMENT_TIMEOUT_MS),
)

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency function to get database session.
    Used in FastAPI endpoints with Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Initialize database.

    Imports the models so they register on Base.metadata, then creates any
    missing tables (users, email_verifications).
    """
    from connect.models import user, email_verification  # noqa: F401
    Base.metadata.create_all(bind=engine)
