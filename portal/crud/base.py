from contextlib import contextmanager
from typing import Any, Generic, Iterator, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.core.exceptions import PortalError, StorageError
from portal.core.logging_config import get_logger
from portal.database.session import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a multi-statement mutation as one unit.

    Commits on success. Any error rolls the whole unit back; database errors
    surface as ``StorageError``.
    """
    try:
        yield db
        db.commit()
    except PortalError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Database error, transaction rolled back: {e}")
        raise StorageError() from e
    except Exception:
        db.rollback()
        raise


class CRUDBase(Generic[ModelType]):
    """
    Base class for customer-scoped CRUD operations.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get_for_customer(
        self, db: Session, id: Any, customer_id: Any, *, for_update: bool = False
    ) -> Optional[ModelType]:
        """
        Fetch a row only if it belongs to ``customer_id``.

        ``for_update`` takes a row lock for the rest of the transaction.
        """
        query = db.query(self.model).filter(
            self.model.id == id,
            self.model.customer_id == customer_id,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()
