from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from voltedge.core.config import settings

engine = create_engine(settings.DATABASE_URL, echo=False)
SessionLocal = sessionmaker(engine, expire_on_commit=False)
