"""Interactions endpoint (signature, PING) and button/select handling with fake clients."""
import json

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from fastapi import FastAPI
from fastapi.testclient import TestClient

from conftest import MONDAY, NEXT_MONDAY, sheet_col, sheet_row, week_values

from slotboard.api.routes import interactions as interactions_route
from slotboard.config import settings
from slotboard.core.constants import TAB_CURRENT, TAB_HISTORY, TAB_NEXT
from slotboard.core.errors import StoreUnavailable
from slotboard.services import interaction_service
from slotboard.services import registry
from slotboard.services.board import refresh as refresh_module
from slotboard.services.discord.interactions import (
    FLAG_EPHEMERAL,
    RESPONSE_CHANNEL_MESSAGE,
    RESPONSE_DEFERRED_CHANNEL_MESSAGE,
    RESPONSE_DEFERRED_UPDATE_MESSAGE,
    RESPONSE_PONG,
)
from slotboard.services.grid import CellState
from slotboard.services.interaction_service import handle_interaction
from slotboard.services.reservation_service import pick_value


@pytest.fixture
def signing_key(monkeypatch):
    key = Ed25519PrivateKey.generate()
    public_hex = key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()
    monkeypatch.setattr(settings, "discord_public_key", public_hex)
    return key


@pytest.fixture
def client(store, chat):
    registry.register("store", store)
    registry.register("chat", chat)
    app = FastAPI()
    app.include_router(interactions_route.router, prefix="/discord")
    return TestClient(app)


@pytest.fixture
def board(sheets, session_factory, monkeypatch):
    sheets.load(TAB_CURRENT, week_values(MONDAY))
    sheets.load(TAB_NEXT, week_values(NEXT_MONDAY, open_cells=[("Mardi", "11h"), ("Mardi", "15h")]))
    sheets.load(TAB_HISTORY, [["Date", "Heure", "Jour", "Utilisateur", "Écrit le", "ISO"]])
    monkeypatch.setattr(refresh_module, "SessionLocal", session_factory)
    monkeypatch.setattr(interaction_service, "EPHEMERAL_NOTICE_SECONDS", 0)
    return sheets


def _signed_post(client, key, payload, timestamp="1700000000"):
    body = json.dumps(payload).encode()
    signature = key.sign(timestamp.encode() + body).hex()
    return client.post(
        "/discord/interactions",
        content=body,
        headers={"X-Signature-Ed25519": signature, "X-Signature-Timestamp": timestamp},
    )


def _component(custom_id, *, values=None, permissions=None, token="tok-1"):
    data = {"custom_id": custom_id}
    if values is not None:
        data["values"] = values
    member = {"user": {"id": "42", "username": "alice"}}
    if permissions is not None:
        member["permissions"] = permissions
    return {"type": 3, "token": token, "data": data, "member": member}


def test_ping_with_valid_signature(client, signing_key):
    resp = _signed_post(client, signing_key, {"type": 1})
    assert resp.status_code == 200
    assert resp.json() == {"type": RESPONSE_PONG}


def test_bad_signature_is_rejected(client, signing_key):
    other = Ed25519PrivateKey.generate()
    resp = _signed_post(client, other, {"type": 1})
    assert resp.status_code == 401


def test_missing_signature_headers_are_rejected(client, signing_key):
    resp = client.post("/discord/interactions", content=b'{"type": 1}')
    assert resp.status_code == 401


def test_day_button_over_http_returns_picker(client, signing_key, board):
    resp = _signed_post(client, signing_key, _component("nxt_Mardi"))
    body = resp.json()
    assert body["type"] == RESPONSE_CHANNEL_MESSAGE
    assert body["data"]["flags"] == FLAG_EPHEMERAL
    select = body["data"]["components"][0]["components"][0]
    assert [o["label"] for o in select["options"]] == ["11h", "15h"]
    assert select["options"][0]["value"] == pick_value(TAB_NEXT, sheet_row("11h"), sheet_col("Mardi"), "Mardi", "2026-10-27", "11h")


def test_day_without_slots_and_unknown_day(store, chat, board):
    response, follow_up = handle_interaction(_component("nxt_Lundi"), store=store, chat=chat)
    assert response["data"]["content"] == "🔒 Aucun créneau réservable."
    assert follow_up is None

    response, _ = handle_interaction(_component("nxt_Funday"), store=store, chat=chat)
    assert response["data"]["content"] == "❌ Jour introuvable."


def test_day_picker_when_grid_not_ready(sheets, store, chat):
    sheets.add_sheet(TAB_NEXT)
    response, _ = handle_interaction(_component("nxt_Mardi"), store=store, chat=chat)
    assert response["data"]["content"] == "❌ Calendrier pas prêt."


def test_pick_slot_claims_and_refreshes(store, chat, board):
    value = pick_value(TAB_NEXT, sheet_row("11h"), sheet_col("Mardi"), "Mardi", "2026-10-27", "11h")
    response, follow_up = handle_interaction(_component("pick_slot", values=[value]), store=store, chat=chat)

    assert response == {"type": RESPONSE_DEFERRED_UPDATE_MESSAGE}
    follow_up()

    assert store.read_cell(TAB_NEXT, sheet_row("11h"), sheet_col("Mardi")) is CellState.CLAIMED
    assert chat.original_edits == [("tok-1", {"content": "✅ Créneau réservé.", "components": []})]
    assert chat.original_deletes == ["tok-1"]
    [row] = store.list_history()
    assert row.record.user == "alice"
    # refresh after the claim posted the board
    assert chat.sent == 3


def test_pick_slot_already_taken(store, chat, board):
    value = pick_value(TAB_NEXT, sheet_row("11h"), sheet_col("Mardi"), "Mardi", "2026-10-27", "11h")
    handle_interaction(_component("pick_slot", values=[value]), store=store, chat=chat)[1]()
    chat.original_edits.clear()
    chat.original_deletes.clear()

    handle_interaction(_component("pick_slot", values=[value], token="tok-2"), store=store, chat=chat)[1]()

    assert chat.original_edits == [("tok-2", {"content": "⚠️ Ce créneau n'est plus disponible.", "components": []})]
    assert chat.original_deletes == []


def test_pick_slot_with_tampered_value(store, chat, board):
    response, follow_up = handle_interaction(
        _component("pick_slot", values=["Historique|1|1|x|2026-10-27|11h"]), store=store, chat=chat
    )
    assert response["data"]["content"] == "❌ Créneau invalide."
    assert follow_up is None


def test_refresh_requires_permission(store, chat, board):
    response, follow_up = handle_interaction(_component("refresh_manual"), store=store, chat=chat)
    assert response["data"]["content"] == "⛔ Tu n'as pas la permission d'utiliser ce bouton."
    assert follow_up is None


def test_refresh_by_admin(store, chat, board):
    response, follow_up = handle_interaction(_component("refresh_manual", permissions="8"), store=store, chat=chat)

    assert response == {"type": RESPONSE_DEFERRED_CHANNEL_MESSAGE, "data": {"flags": FLAG_EPHEMERAL}}
    follow_up()
    assert chat.sent == 3
    assert chat.original_edits == [("tok-1", {"content": "✅ Refresh effectué."})]
    assert chat.original_deletes == ["tok-1"]


def test_history_button(store, chat, board):
    response, _ = handle_interaction(_component("historique"), store=store, chat=chat)
    embed = response["data"]["embeds"][0]
    assert embed["title"] == "📜 Historique global"
    assert embed["description"] == "Aucune réservation."


def test_store_down_gives_notice(store, chat, monkeypatch):
    def down():
        raise StoreUnavailable("sheets down")

    monkeypatch.setattr(store, "list_history", down)
    response, _ = handle_interaction(_component("historique"), store=store, chat=chat)
    assert response["data"]["content"] == interaction_service.MSG_STORE_DOWN


def test_unknown_action(store, chat):
    response, _ = handle_interaction(_component("something_else"), store=store, chat=chat)
    assert response["data"]["content"] == "❓ Action inconnue."


def test_unexpected_failure_gives_notice(store, chat, board, monkeypatch):
    def broken(tab):
        raise RuntimeError("unexpected sheet layout")

    monkeypatch.setattr(store, "read", broken)
    response, follow_up = handle_interaction(_component("nxt_Mardi"), store=store, chat=chat)
    assert response["data"]["content"] == interaction_service.MSG_STORE_DOWN
    assert follow_up is None
