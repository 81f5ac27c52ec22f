from typing import Optional
from sqlalchemy.orm import Session

from portal.crud.base import CRUDBase
from portal.models.customer import Customer


class CRUDCustomer(CRUDBase[Customer]):

    def lock(self, db: Session, customer_id: int) -> Optional[Customer]:
        """
        Lock the customer row for the current transaction.

        Serialises per-customer invariants (single default role, key cap,
        one-time role bootstrap) across concurrent requests.
        """
        return (
            db.query(Customer)
            .filter(Customer.id == customer_id)
            .with_for_update()
            .first()
        )


customer_crud = CRUDCustomer(Customer)
