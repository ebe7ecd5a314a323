"""Base model classes and database configuration."""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base
from pydantic import BaseModel as PydanticBaseModel, ConfigDict
import os
from typing import Optional

# SQLAlchemy Base
Base = declarative_base()

# Database configuration
def get_database_url(database_url: Optional[str] = None) -> str:
    """Resolve the database URL: explicit override, DATABASE_URL, then DB_* parts."""
    db_url = database_url or os.getenv('DATABASE_URL')
    if db_url:
        return db_url
    
    # Fallback to individual components
    db_host = os.getenv('DB_HOST', 'localhost')
    db_port = os.getenv('DB_PORT', '5432')
    db_name = os.getenv('DB_NAME', 'filmroom')
    db_user = os.getenv('DB_USER', 'filmroom')
    db_password = os.getenv('DB_PASSWORD', 'filmroom')
    
    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


class BaseModel(Base):
    """Base SQLAlchemy model with common fields."""
    __abstract__ = True
    
    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class BasePydanticModel(PydanticBaseModel):
    """Base Pydantic model for API serialization."""
    
    model_config = ConfigDict(from_attributes=True)
