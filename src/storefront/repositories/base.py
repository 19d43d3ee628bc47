from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar, Union
import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from storefront.core.exceptions import DatabaseError

T = TypeVar('T')

Query = Union[str, TextClause]
Params = Optional[Dict[str, Any]]

logger = logging.getLogger(__name__)


def _as_clause(query: Query) -> TextClause:
    return query if isinstance(query, TextClause) else text(query)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Every public helper turns SQLAlchemy failures into DatabaseError so that
    driver messages never reach API clients.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def get_db_connection(self):
        """Database connection context manager with error handling"""
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error(f"Database connection error: {str(e)}")
            raise DatabaseError(f"Database connection failed: {str(e)}")

    def execute_query(self, query: Query, params: Params = None) -> List[Dict[str, Any]]:
        """
        Execute SELECT query and return results as list of dictionaries

        Raises:
            DatabaseError: When query execution fails
        """
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(_as_clause(query), params or {})
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Query execution failed: {query}, Error: {str(e)}")
            raise DatabaseError("Query execution failed", "SELECT")

    def execute_single_query(self, query: Query, params: Params = None) -> Optional[Dict[str, Any]]:
        """Execute query expecting a single row; None if not found"""
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(_as_clause(query), params or {}).first()
                return dict(result._mapping) if result else None
        except SQLAlchemyError as e:
            logger.error(f"Single query execution failed: {query}, Error: {str(e)}")
            raise DatabaseError("Single query execution failed", "SELECT")

    def execute_command(self, command: Query, params: Params = None) -> int:
        """
        Execute INSERT/UPDATE/DELETE command

        Returns:
            Number of affected rows
        """
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(_as_clause(command), params or {})
                conn.commit()
                return result.rowcount
        except IntegrityError as e:
            logger.error(f"Integrity constraint violation: {command}, Error: {str(e)}")
            raise DatabaseError(f"Data integrity violation: {str(e)}", "WRITE")
        except SQLAlchemyError as e:
            logger.error(f"Command execution failed: {command}, Error: {str(e)}")
            raise DatabaseError("Command execution failed", "WRITE")

    def execute_scalar(self, query: Query, params: Params = None) -> Any:
        """Execute query returning single scalar value (COUNT, SUM, etc.)"""
        try:
            with self.get_db_connection() as conn:
                return conn.execute(_as_clause(query), params or {}).scalar()
        except SQLAlchemyError as e:
            logger.error(f"Scalar query execution failed: {query}, Error: {str(e)}")
            raise DatabaseError("Scalar query execution failed", "SELECT")

    def execute_in_transaction(self, commands: Sequence[Tuple[Query, Params]]) -> int:
        """
        Run several write statements atomically.

        Either every statement commits or none does. Returns the total
        number of affected rows.
        """
        if not commands:
            return 0

        try:
            with self.engine.begin() as conn:
                total_affected = 0
                for command, params in commands:
                    result = conn.execute(_as_clause(command), params or {})
                    total_affected += max(result.rowcount, 0)
                return total_affected
        except IntegrityError as e:
            logger.error(f"Integrity violation in transaction, Error: {str(e)}")
            raise DatabaseError(f"Data integrity violation: {str(e)}", "TRANSACTION")
        except SQLAlchemyError as e:
            logger.error(f"Transaction failed, Error: {str(e)}")
            raise DatabaseError("Transaction failed", "TRANSACTION")

    @abstractmethod
    def get_by_id(self, entity_id: Any) -> T:
        """Get entity by ID"""
