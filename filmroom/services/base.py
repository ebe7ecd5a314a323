"""Base service class for common persistence operations."""

from typing import TypeVar, Generic, Type, Optional, List, Dict, Any, Union
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from pydantic import BaseModel
import logging

from ..models.base import BaseModel as SQLBaseModel

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=SQLBaseModel)
CreateSchemaType = TypeVar('CreateSchemaType', bound=BaseModel)


class ServiceException(Exception):
    """Base service exception."""
    pass


class ValidationException(ServiceException):
    """Invalid or missing input."""
    pass


class NotFoundError(ServiceException):
    """Entity not found error."""
    pass


class DatabaseError(ServiceException):
    """Database operation error."""
    pass


def _as_dict(obj_in: Union[BaseModel, Dict[str, Any]], exclude_unset: bool = False) -> Dict[str, Any]:
    if isinstance(obj_in, BaseModel):
        return obj_in.model_dump(exclude_unset=exclude_unset)
    return dict(obj_in)


class BaseService(Generic[T, CreateSchemaType]):
    """Session-bound CRUD operations over one model class."""
    
    def __init__(self, db_session: Session, model_class: Type[T]):
        """Initialize service with database session and model class.
        
        Args:
            db_session: SQLAlchemy database session
            model_class: SQLAlchemy model class
        """
        self.db = db_session
        self.model_class = model_class
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
    
    def get_by_id(self, entity_id: int) -> Optional[T]:
        """Get entity by ID.
        
        Raises:
            DatabaseError: If database error occurs
        """
        try:
            return self.db.query(self.model_class).filter(self.model_class.id == entity_id).first()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in get_by_id: {e}")
            raise DatabaseError(f"Failed to get {self.model_class.__name__} by ID") from e
    
    def get_by_id_or_404(self, entity_id: int) -> T:
        """Get entity by ID or raise NotFoundError.
        
        Raises:
            NotFoundError: If entity not found
            DatabaseError: If database error occurs
        """
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.model_class.__name__} with ID {entity_id} not found")
        return entity
    
    def list(self, 
             limit: int = 100, 
             offset: int = 0, 
             filters: Optional[Dict[str, Any]] = None,
             order_by: Optional[str] = None) -> List[T]:
        """Get list of entities with pagination and equality filters.
        
        Raises:
            DatabaseError: If database error occurs
        """
        try:
            query = self.db.query(self.model_class)
            
            if filters:
                for field, value in filters.items():
                    if value is not None and hasattr(self.model_class, field):
                        query = query.filter(getattr(self.model_class, field) == value)
            
            if order_by and hasattr(self.model_class, order_by):
                query = query.order_by(getattr(self.model_class, order_by))
            
            return query.offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in list: {e}")
            raise DatabaseError(f"Failed to list {self.model_class.__name__} entities") from e
    
    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count entities with optional equality filters."""
        try:
            query = self.db.query(self.model_class)
            if filters:
                for field, value in filters.items():
                    if value is not None and hasattr(self.model_class, field):
                        query = query.filter(getattr(self.model_class, field) == value)
            return query.count()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error in count: {e}")
            raise DatabaseError(f"Failed to count {self.model_class.__name__} entities") from e
    
    def create(self, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> T:
        """Create and commit a new entity.
        
        Raises:
            ValidationException: If the data does not fit the model
            DatabaseError: If database error occurs
        """
        try:
            db_obj = self.model_class(**_as_dict(obj_in))
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
            
            self._logger.info(f"Created {self.model_class.__name__} with ID {db_obj.id}")
            return db_obj
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Database error in create: {e}")
            raise DatabaseError(f"Failed to create {self.model_class.__name__}") from e
        except TypeError as e:
            self.db.rollback()
            self._logger.error(f"Validation error in create: {e}")
            raise ValidationException(f"Invalid data for {self.model_class.__name__}") from e
    
    def update(self, entity_id: int, obj_in: Union[BaseModel, Dict[str, Any]]) -> T:
        """Update an entity with the set fields of obj_in.
        
        Raises:
            NotFoundError: If entity not found
            DatabaseError: If database error occurs
        """
        try:
            db_obj = self.get_by_id_or_404(entity_id)
            for field, value in _as_dict(obj_in, exclude_unset=True).items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)
            
            self.db.commit()
            self.db.refresh(db_obj)
            
            self._logger.info(f"Updated {self.model_class.__name__} with ID {entity_id}")
            return db_obj
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Database error in update: {e}")
            raise DatabaseError(f"Failed to update {self.model_class.__name__}") from e
    
    def upsert(self, natural_key: Dict[str, Any], obj_in: Union[BaseModel, Dict[str, Any]]) -> T:
        """Insert or update the entity identified by a natural key, in one commit.
        
        Args:
            natural_key: Column values that identify the entity uniquely
            obj_in: Values to write
            
        Returns:
            The inserted or updated entity
            
        Raises:
            DatabaseError: If database error occurs
        """
        data = _as_dict(obj_in)
        data.update(natural_key)
        try:
            query = self.db.query(self.model_class)
            for field, value in natural_key.items():
                query = query.filter(getattr(self.model_class, field) == value)
            db_obj = query.first()
            
            if db_obj is None:
                db_obj = self.model_class(**data)
                self.db.add(db_obj)
            else:
                for field, value in data.items():
                    if hasattr(db_obj, field):
                        setattr(db_obj, field, value)
            
            self.db.commit()
            self.db.refresh(db_obj)
            return db_obj
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Database error in upsert: {e}")
            raise DatabaseError(f"Failed to upsert {self.model_class.__name__}") from e
    
    def delete(self, entity_id: int) -> bool:
        """Delete an entity.
        
        Raises:
            NotFoundError: If entity not found
            DatabaseError: If database error occurs
        """
        try:
            db_obj = self.get_by_id_or_404(entity_id)
            self.db.delete(db_obj)
            self.db.commit()
            
            self._logger.info(f"Deleted {self.model_class.__name__} with ID {entity_id}")
            return True
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            self._logger.error(f"Database error in delete: {e}")
            raise DatabaseError(f"Failed to delete {self.model_class.__name__}") from e
