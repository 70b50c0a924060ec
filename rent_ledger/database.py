from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from rent_ledger.config import settings

# Create SQLAlchemy engine
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before using
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    echo=settings.DEBUG,  # Log SQL queries in debug mode
    # SQLite-specific settings
    connect_args={"check_same_thread": False} if "sqlite" in settings.DATABASE_URL else {},
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """
    FastAPI dependency for database sessions.

    Yields a database session and ensures it's closed after use.

    Usage:
        @router.get("/tenants")
        def list_tenants(db: Session = Depends(get_db)):
            return db.query(Tenant).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
