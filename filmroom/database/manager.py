"""Database management utilities for schema operations."""

import logging
from typing import Optional, List, Dict, Any
from sqlalchemy import Engine, text, inspect
from sqlalchemy.orm import Session
from filmroom.models import Base
from .config import get_engine, get_session

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Creates, inspects and checks the import schema."""
    
    def __init__(self, engine: Optional[Engine] = None):
        """Initialize database manager.
        
        Args:
            engine: Optional SQLAlchemy engine
        """
        self.engine = engine or get_engine()
        self.SessionLocal = get_session(self.engine)
    
    def create_all_tables(self) -> None:
        """Create all tables defined in the models."""
        try:
            logger.info("Creating all database tables...")
            Base.metadata.create_all(bind=self.engine)
            logger.info("Successfully created all tables")
        except Exception as e:
            logger.error(f"Failed to create tables: {e}")
            raise
    
    def drop_all_tables(self) -> None:
        """Drop all tables (WARNING: This will delete all data!)."""
        try:
            logger.warning("Dropping all database tables...")
            Base.metadata.drop_all(bind=self.engine)
            logger.info("Successfully dropped all tables")
        except Exception as e:
            logger.error(f"Failed to drop tables: {e}")
            raise
    
    def get_table_names(self) -> List[str]:
        """List tables present in the database."""
        return inspect(self.engine).get_table_names()
    
    def validate_schema(self) -> Dict[str, Any]:
        """Compare the database tables against the models.
        
        Returns:
            Dict with valid flag and the missing table names
        """
        model_tables = set(Base.metadata.tables.keys())
        try:
            db_tables = set(self.get_table_names())
        except Exception as e:
            logger.error(f"Failed to get database table names: {e}")
            return {'valid': False, 'missing_tables': sorted(model_tables), 'error': str(e)}
        
        missing = sorted(model_tables - db_tables)
        return {'valid': not missing, 'missing_tables': missing}
    
    def test_connection(self) -> bool:
        """Run a trivial query; False when the database is unreachable."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False
    
    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()
