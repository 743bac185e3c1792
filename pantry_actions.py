# pantry_actions.py
# ---------------------------------------------------------
# View state + controller actions for the pantry page
# - Every action takes (store, state) and returns a new state
# - Every mutation re-reads the whole sheet afterwards
# - The search query is kept on the state and re-applied after each fetch
# ---------------------------------------------------------

import logging
from dataclasses import dataclass, replace

import pandas as pd

from pantry_store import InventoryItem, StoreError

logger = logging.getLogger(__name__)


# =========================================================
# STATE
# =========================================================

SUCCESS = "success"
WARNING = "warning"
ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


@dataclass(frozen=True)
class ViewState:
    """
    Snapshot of the last fetch, already filtered by ``query``.

    ``revision`` increases with every applied fetch so a result computed
    from an older state can be recognised and dropped.
    """

    items: tuple = ()
    query: str = ""
    revision: int = 0


@dataclass(frozen=True)
class ActionResult:
    state: ViewState
    notice: Notice | None = None
    ok: bool = True


# =========================================================
# HELPERS
# =========================================================

def filter_items(items, query: str) -> tuple:
    q = (query or "").strip().lower()
    if not q:
        return tuple(items)
    return tuple(i for i in items if q in i.name.lower())


def find_by_name(items, name: str):
    target = (name or "").strip().lower()
    for item in items:
        if item.name.strip().lower() == target:
            return item
    return None


def totals(items) -> tuple[int, int]:
    items = list(items)
    return len(items), sum(i.quantity for i in items)


def to_frame(items) -> pd.DataFrame:
    rows = [{"item_id": i.id, "name": i.name, "quantity": i.quantity} for i in items]
    return pd.DataFrame(rows, columns=["item_id", "name", "quantity"])


def apply_fetch(current: ViewState, fetched: ViewState) -> ViewState:
    # stale in-flight result: keep what we have
    if fetched.revision <= current.revision:
        return current
    return fetched


# =========================================================
# ACTIONS
# =========================================================

def fetch_all(store, state: ViewState) -> ViewState:
    """Replace the view with everything in the store (filtered by the current query)."""
    items = store.read_all()
    return replace(state, items=filter_items(items, state.query), revision=state.revision + 1)


def search(store, state: ViewState, query: str) -> ViewState:
    """Full re-read, then keep the items whose name contains ``query``."""
    return fetch_all(store, replace(state, query=query or ""))


def add_or_merge(store, state: ViewState, name: str, quantity) -> ActionResult:
    name = (name or "").strip()
    if not name:
        return ActionResult(state=state, ok=False)

    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        return ActionResult(state=state, notice=Notice(WARNING, "Quantity must be a whole number"), ok=False)
    if quantity < 1:
        return ActionResult(state=state, notice=Notice(WARNING, "Quantity must be at least 1"), ok=False)

    try:
        existing = find_by_name(store.read_all(), name)
        if existing:
            store.update_quantity(existing.id, existing.quantity + quantity)
            notice = Notice(SUCCESS, f"{existing.name} quantity increased by {quantity}")
        else:
            store.create(name, quantity)
            notice = Notice(SUCCESS, f"{name} added to inventory")
        return ActionResult(state=fetch_all(store, state), notice=notice)
    except StoreError:
        return ActionResult(state=state, notice=Notice(ERROR, "Failed to add item"), ok=False)


def set_quantity_or_remove(store, state: ViewState, item_id: str, quantity: int) -> ActionResult:
    try:
        if quantity == 0:
            store.delete(item_id)
            notice = Notice(SUCCESS, "Item removed from inventory")
        else:
            store.update_quantity(item_id, quantity)
            notice = Notice(SUCCESS, "Item quantity updated")
        return ActionResult(state=fetch_all(store, state), notice=notice)
    except StoreError:
        logger.exception("Error updating item %s", item_id)
        return ActionResult(state=state, notice=Notice(ERROR, "Failed to update item"), ok=False)


def increment(store, state: ViewState, item: InventoryItem) -> ActionResult:
    return set_quantity_or_remove(store, state, item.id, item.quantity + 1)


def decrement(store, state: ViewState, item: InventoryItem) -> ActionResult:
    return set_quantity_or_remove(store, state, item.id, max(0, item.quantity - 1))


def delete_item(store, state: ViewState, item_id: str) -> ActionResult:
    try:
        store.delete(item_id)
        state = fetch_all(store, state)
        return ActionResult(state=state, notice=Notice(SUCCESS, "Item removed from inventory"))
    except StoreError:
        logger.exception("Error deleting item %s", item_id)
        return ActionResult(state=state, notice=Notice(ERROR, "Failed to delete item"), ok=False)
