"""SQLAlchemy models for the rental booking tables.

All models are imported here so that ``Base.metadata`` knows about every
table. If you add a new model, import it in this file.
"""

from catering_rentals.models.customer import Customer
from catering_rentals.models.item import Item
from catering_rentals.models.rental import Rental
from catering_rentals.models.rental_item import RentalItem

__all__ = [
    "Customer",
    "Item",
    "Rental",
    "RentalItem",
]
