"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and the translation of driver failures into
StoreError.
"""

from typing import Any, TypeVar, Generic
from supabase import Client

from .exceptions import StoreError


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - _execute() to run a query and surface failures as StoreError
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class ProfileRepository(BaseRepository[Profile]):
            def get_by_id(self, user_id: str) -> Optional[Profile]:
                query = self._db.table("profiles").select("*").eq("id", user_id)
                result = self._execute("read", query)
                if not result.data:
                    return None
                return self._map_to_profile(result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    def _execute(self, operation: str, query: Any) -> Any:
        """
        Execute a PostgREST query builder.

        Args:
            operation: Short label for error messages ("read", "update", ...)
            query: A query builder with an execute() method

        Returns:
            The APIResponse from Supabase.

        Raises:
            StoreError: If the request fails for any reason.
        """
        try:
            return query.execute()
        except Exception as e:
            raise StoreError(operation, str(e)) from e
