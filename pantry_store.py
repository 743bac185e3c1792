# pantry_store.py
# ---------------------------------------------------------
# Google Sheets-backed inventory store
# - One worksheet ("inventory") holds every item, one row per item
# - item_id is column A and is assigned here on create
# - Every gspread, auth or transport failure surfaces as StoreError
# - Values are written RAW so names stay literal text
# ---------------------------------------------------------

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import google.auth.exceptions
import gspread
import pandas as pd
import requests
import streamlit as st
from google.oauth2.service_account import Credentials

logger = logging.getLogger(__name__)


# =========================================================
# CONFIG
# =========================================================

INVENTORY_WS_DEFAULT = "inventory"

INVENTORY_COLUMNS = [
    "item_id",
    "name",
    "quantity",
    "created_at",
    "updated_at",
]

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


STORE_FAILURES = (
    gspread.exceptions.GSpreadException,
    google.auth.exceptions.GoogleAuthError,
    requests.exceptions.RequestException,
)


class StoreError(Exception):
    """A read or write against the inventory sheet failed."""


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str
    quantity: int


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_item_id() -> str:
    return str(uuid.uuid4())[:10]


# =========================================================
# GOOGLE SHEETS CLIENT
# =========================================================

def _credentials_from_secrets(secrets) -> Credentials:
    # Streamlit Cloud: TOML table
    if "gcp_service_account" in secrets and not isinstance(secrets["gcp_service_account"], str):
        sa = secrets["gcp_service_account"]
        sa_info = {k: sa[k] for k in sa.keys()}
        return Credentials.from_service_account_info(sa_info, scopes=SCOPES)

    # Streamlit Cloud: JSON string
    if "gcp_service_account" in secrets and isinstance(secrets["gcp_service_account"], str):
        sa_info = json.loads(secrets["gcp_service_account"])
        return Credentials.from_service_account_info(sa_info, scopes=SCOPES)

    # Local dev: JSON file
    if "service_account_json_path" in secrets:
        p = Path(secrets["service_account_json_path"])
        if not p.is_absolute():
            p = Path.cwd() / p
        if not p.exists():
            raise FileNotFoundError(f"Service account JSON not found at: {p}")
        sa_info = json.loads(p.read_text(encoding="utf-8"))
        return Credentials.from_service_account_info(sa_info, scopes=SCOPES)

    raise KeyError('Missing secrets: add "gcp_service_account" (Cloud) or "service_account_json_path" (local).')


@st.cache_resource
def get_gspread_client():
    return gspread.authorize(_credentials_from_secrets(st.secrets))


@st.cache_resource
def get_worksheet(spreadsheet_id: str, worksheet_name: str):
    client = get_gspread_client()
    try:
        sh = client.open_by_key(spreadsheet_id)
        return sh.worksheet(worksheet_name)
    except STORE_FAILURES as e:
        raise StoreError(f"Could not open worksheet {worksheet_name!r}: {e}") from e


def get_store() -> "SheetsInventoryStore":
    spreadsheet_id = st.secrets["spreadsheet_id"]
    worksheet_name = st.secrets.get("inventory_worksheet", INVENTORY_WS_DEFAULT)
    return SheetsInventoryStore(get_worksheet(spreadsheet_id, worksheet_name))


def ensure_headers(ws, headers: list[str]) -> list[str]:
    """
    If sheet is empty, write header row.
    If header exists but missing columns, extend it (append missing at end).
    """
    existing = ws.row_values(1)
    if not existing:
        ws.append_row(headers)
        return list(headers)

    missing = [h for h in headers if h not in existing]
    if missing:
        new_headers = existing + missing
        ws.update(range_name="1:1", values=[new_headers], value_input_option="RAW")
        return new_headers

    return existing


def _sheet_to_df(values: list[list[str]]) -> pd.DataFrame:
    if len(values) < 2:
        return pd.DataFrame(columns=INVENTORY_COLUMNS)

    headers = values[0]
    width = len(headers)
    rows = [(r + [""] * width)[:width] for r in values[1:]]
    df = pd.DataFrame(rows, columns=headers)

    for c in INVENTORY_COLUMNS:
        if c not in df.columns:
            df[c] = ""

    df = df[INVENTORY_COLUMNS].copy()
    df["item_id"] = df["item_id"].astype(str).str.strip()
    df = df[df["item_id"] != ""].copy()

    df["quantity"] = pd.to_numeric(df["quantity"], errors="coerce").fillna(0).clip(lower=0).astype(int)
    df["name"] = df["name"].astype(str)
    return df


# =========================================================
# STORE
# =========================================================

class SheetsInventoryStore:
    """
    Document-style access to the inventory worksheet.

    Supports create / read-all / update-quantity / delete. There is no
    locking: each call is a single round trip and the sheet's own per-call
    atomicity is all that is relied on.
    """

    def __init__(self, worksheet, headers: list[str] | None = None):
        self.ws = worksheet
        self._headers = headers

    def _ensure_headers(self) -> list[str]:
        if self._headers is None:
            self._headers = ensure_headers(self.ws, INVENTORY_COLUMNS)
        return self._headers

    def _row_number(self, item_id: str):
        col_a = self.ws.col_values(1)  # includes header
        for idx, val in enumerate(col_a[1:], start=2):
            if str(val).strip() == str(item_id):
                return idx
        return None

    def create(self, name: str, quantity: int) -> str:
        try:
            headers = self._ensure_headers()
            now = _utc_now()
            row = {
                "item_id": _new_item_id(),
                "name": name,
                "quantity": int(quantity),
                "created_at": now,
                "updated_at": now,
            }
            self.ws.append_row([row.get(h, "") for h in headers], value_input_option="RAW")
        except STORE_FAILURES as e:
            raise StoreError(f"create failed: {e}") from e

        logger.debug("created %s (%s x%d)", row["item_id"], name, quantity)
        return row["item_id"]

    def read_all(self) -> list[InventoryItem]:
        try:
            self._ensure_headers()
            values = self.ws.get_all_values()
        except STORE_FAILURES as e:
            raise StoreError(f"read failed: {e}") from e

        df = _sheet_to_df(values)
        logger.debug("read %d item(s)", len(df))
        return [
            InventoryItem(id=r.item_id, name=r.name, quantity=int(r.quantity))
            for r in df.itertuples(index=False)
        ]

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity < 0:
            raise ValueError(f"quantity must be >= 0, got {quantity}")

        try:
            headers = self._ensure_headers()
            rownum = self._row_number(item_id)
            if not rownum:
                raise StoreError(f"item not found: {item_id}")

            data = [
                {"range": gspread.utils.rowcol_to_a1(rownum, headers.index("quantity") + 1), "values": [[int(quantity)]]},
                {"range": gspread.utils.rowcol_to_a1(rownum, headers.index("updated_at") + 1), "values": [[_utc_now()]]},
            ]
            # one values.batchUpdate call: both cells land or neither does
            self.ws.batch_update(data, value_input_option="RAW")
        except STORE_FAILURES as e:
            raise StoreError(f"update failed: {e}") from e

        logger.debug("updated %s -> %d", item_id, quantity)

    def delete(self, item_id: str) -> None:
        try:
            self._ensure_headers()
            rownum = self._row_number(item_id)
            if not rownum:
                return
            self.ws.delete_rows(rownum)
        except STORE_FAILURES as e:
            raise StoreError(f"delete failed: {e}") from e

        logger.debug("deleted %s", item_id)
