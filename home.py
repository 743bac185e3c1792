import logging

import streamlit as st

import pantry_actions as actions
import pantry_store
from pantry_store import StoreError

st.set_page_config(page_title="Pantry Tracker", layout="centered")

logger = logging.getLogger(__name__)

# =========================================================
# CONFIG
# =========================================================

STATE_KEY = "pantry_view_state"
NOTICES_KEY = "pantry_notices"
FETCH_ERROR_KEY = "pantry_fetch_error"

NOTICE_ICONS = {
    actions.SUCCESS: "✅",
    actions.WARNING: "⚠️",
    actions.ERROR: "❌",
}


def _configure_logging():
    level = str(st.secrets.get("log_level", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))


# =========================================================
# STATE
# =========================================================

def _push_notice(notice):
    if notice:
        st.session_state.setdefault(NOTICES_KEY, []).append(notice)


def _apply(result):
    st.session_state[STATE_KEY] = actions.apply_fetch(st.session_state[STATE_KEY], result.state)
    _push_notice(result.notice)


def _refetch(fn):
    try:
        fetched = fn(st.session_state[STATE_KEY])
    except StoreError as e:
        logger.error("Failed to load inventory: %s", e)
        st.session_state[FETCH_ERROR_KEY] = f"Failed to load inventory: {e}"
        return
    st.session_state[STATE_KEY] = actions.apply_fetch(st.session_state[STATE_KEY], fetched)


# =========================================================
# CALLBACKS
# =========================================================

def _on_add(store):
    with st.spinner("Adding item..."):
        result = actions.add_or_merge(
            store,
            st.session_state[STATE_KEY],
            st.session_state.get("new_item_name", ""),
            st.session_state.get("new_item_quantity", 1),
        )
    _apply(result)
    if result.ok:
        st.session_state["new_item_name"] = ""
        st.session_state["new_item_quantity"] = 1


def _on_increment(store, item):
    _apply(actions.increment(store, st.session_state[STATE_KEY], item))


def _on_decrement(store, item):
    _apply(actions.decrement(store, st.session_state[STATE_KEY], item))


def _on_delete(store, item_id):
    _apply(actions.delete_item(store, st.session_state[STATE_KEY], item_id))


def _on_search(store):
    query = st.session_state.get("search_query", "")
    _refetch(lambda state: actions.search(store, state, query))


def _on_refresh(store):
    _refetch(lambda state: actions.fetch_all(store, state))


# =========================================================
# UI
# =========================================================

st.title("Pantry Tracker")

try:
    _configure_logging()
    store = pantry_store.get_store()
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = actions.fetch_all(store, actions.ViewState())
except (KeyError, FileNotFoundError, StoreError) as e:
    st.error(f"Failed to connect to Google Sheets: {e}")
    st.stop()

st.session_state.setdefault("new_item_name", "")
st.session_state.setdefault("new_item_quantity", 1)

for notice in st.session_state.pop(NOTICES_KEY, []):
    st.toast(notice.message, icon=NOTICE_ICONS.get(notice.level))

fetch_error = st.session_state.pop(FETCH_ERROR_KEY, None)
if fetch_error:
    st.error(fetch_error)

with st.form("add_item_form"):
    c1, c2 = st.columns([4, 1])
    with c1:
        st.text_input(
            "Item name",
            key="new_item_name",
            placeholder="Enter name of the item",
            label_visibility="collapsed",
        )
    with c2:
        st.number_input(
            "Quantity",
            key="new_item_quantity",
            min_value=1,
            step=1,
            label_visibility="collapsed",
        )

    st.form_submit_button(
        "Add Item",
        type="primary",
        use_container_width=True,
        on_click=_on_add,
        args=(store,),
    )

s1, s2 = st.columns([4, 1])
with s1:
    st.text_input(
        "Search",
        key="search_query",
        placeholder="Search items...",
        label_visibility="collapsed",
        on_change=_on_search,
        args=(store,),
    )
with s2:
    st.button("🔄 Refresh", use_container_width=True, on_click=_on_refresh, args=(store,))

state = st.session_state[STATE_KEY]

item_count, unit_count = actions.totals(state.items)
m1, m2 = st.columns(2)
m1.metric("Items", f"{item_count:,}")
m2.metric("Units", f"{unit_count:,}")

if not state.items:
    if state.query.strip():
        st.info(f'No items match "{state.query.strip()}".')
    else:
        st.info("No items yet. Add your first item above.")
else:
    with st.container(border=True):
        for item in state.items:
            c_name, c_inc, c_dec, c_del = st.columns([4, 1, 1, 1.4])
            c_name.markdown(f"{item.name}: {item.quantity}")
            c_inc.button("+", key=f"inc_{item.id}", on_click=_on_increment, args=(store, item))
            c_dec.button("-", key=f"dec_{item.id}", on_click=_on_decrement, args=(store, item))
            c_del.button("Delete", key=f"del_{item.id}", on_click=_on_delete, args=(store, item.id))

    st.download_button(
        "Download CSV",
        data=actions.to_frame(state.items).to_csv(index=False).encode("utf-8"),
        file_name="pantry_inventory.csv",
        mime="text/csv",
        use_container_width=True,
    )
