"""Quantity picker for step 2 of the booking wizard.

The selection maps item id to :class:`SelectedItem`; an item absent from it
has quantity 0. The mapping is never mutated in place: every change builds a
new dict and swaps it in, so callers holding an old ``selection`` keep a
consistent snapshot.
"""

import logging
import re
import uuid
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from catering_rentals.schemas.item import CategoryGroup, ItemResponse
from catering_rentals.services.catalog import ALL_CATEGORIES, category_options, filter_items, group_items

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class SelectedItem(BaseModel):
    """A chosen quantity of one catalog item at the price recorded when chosen."""

    model_config = ConfigDict(frozen=True)

    item_id: uuid.UUID
    name: str
    price: Decimal
    quantity: int


def parse_quantity(text: str) -> int:
    """Leading integer of ``text``, 0 when there is none; never negative."""
    match = _LEADING_INT.match(text)
    if match is None:
        return 0
    return max(0, int(match.group(1)))


def normalize_input(text: str) -> str:
    """Strip leading zeros from multi-character entries ("007" -> "7", "0" stays)."""
    if text.startswith("0") and len(text) > 1:
        return text.lstrip("0")
    return text


class ItemQuantityPicker:
    """Browse the catalog and set per-item quantities."""

    def __init__(self, catalog: Sequence[ItemResponse], initial: Iterable[SelectedItem] = ()) -> None:
        self.catalog: tuple[ItemResponse, ...] = tuple(catalog)
        self._selection: Mapping[uuid.UUID, SelectedItem] = MappingProxyType({s.item_id: s for s in initial})
        self.search = ""
        self.category = ALL_CATEGORIES
        self.active_item_id: uuid.UUID | None = None
        self.input_value = ""

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selection(self) -> Mapping[uuid.UUID, SelectedItem]:
        return self._selection

    def _replace(self, selection: dict[uuid.UUID, SelectedItem]) -> None:
        self._selection = MappingProxyType(selection)

    def quantity_of(self, item_id: uuid.UUID) -> int:
        selected = self._selection.get(item_id)
        return selected.quantity if selected else 0

    @property
    def selected_items(self) -> list[SelectedItem]:
        return list(self._selection.values())

    @property
    def total_quantity(self) -> int:
        return sum(s.quantity for s in self._selection.values())

    @property
    def total_price(self) -> Decimal:
        return sum((s.quantity * s.price for s in self._selection.values()), Decimal("0"))

    # ------------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------------

    def set_search(self, text: str) -> None:
        self.search = text

    def set_category(self, category: str) -> None:
        self.category = category

    @property
    def categories(self) -> list[str]:
        return category_options(self.catalog)

    @property
    def visible_items(self) -> list[ItemResponse]:
        return filter_items(self.catalog, self.search, self.category)

    @property
    def groups(self) -> list[CategoryGroup]:
        return group_items(self.visible_items)

    def _catalog_item(self, item_id: uuid.UUID) -> ItemResponse | None:
        return next((item for item in self.catalog if item.id == item_id), None)

    @property
    def active_item(self) -> ItemResponse | None:
        if self.active_item_id is None:
            return None
        return self._catalog_item(self.active_item_id)

    # ------------------------------------------------------------------
    # Quantity dialog
    # ------------------------------------------------------------------

    def open(self, item_id: uuid.UUID) -> None:
        """Open the quantity dialog seeded with the item's current quantity."""
        if self._catalog_item(item_id) is None:
            raise KeyError(item_id)
        self.active_item_id = item_id
        self.input_value = str(self.quantity_of(item_id))

    def close(self) -> None:
        self.active_item_id = None
        self.input_value = ""

    def set_input(self, text: str) -> None:
        self.input_value = normalize_input(text)

    def increase(self) -> None:
        self.input_value = str(parse_quantity(self.input_value) + 1)

    def decrease(self) -> None:
        current = parse_quantity(self.input_value)
        if current > 0:
            self.input_value = str(current - 1)

    def confirm(self) -> None:
        """Apply the entered quantity and move on to the next visible item."""
        if self.active_item_id is None:
            return
        item_id = self.active_item_id
        quantity = parse_quantity(self.input_value)
        selection = dict(self._selection)
        if quantity == 0:
            selection.pop(item_id, None)
        else:
            item = self._catalog_item(item_id)
            if item is not None:
                selection[item_id] = SelectedItem(item_id=item.id, name=item.name, price=item.price, quantity=quantity)
        self._replace(selection)
        self._open_next(item_id)

    def delete(self) -> None:
        if self.active_item_id is None:
            return
        selection = dict(self._selection)
        selection.pop(self.active_item_id, None)
        self._replace(selection)
        self.close()

    def _open_next(self, item_id: uuid.UUID) -> None:
        visible = [item.id for item in self.visible_items]
        if item_id in visible:
            index = visible.index(item_id)
            if index < len(visible) - 1:
                self.open(visible[index + 1])
                return
        self.close()

    def choose(self, item_id: uuid.UUID, quantity: int) -> None:
        """Open, enter ``quantity`` and confirm in one go, then close the dialog."""
        self.open(item_id)
        self.set_input(str(quantity))
        self.confirm()
        self.close()

    def remove(self, item_id: uuid.UUID) -> None:
        selection = dict(self._selection)
        if selection.pop(item_id, None) is not None:
            self._replace(selection)
