from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from vault.settings import settings

engine = create_engine(settings.postgres_url, future=True, echo=False)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
