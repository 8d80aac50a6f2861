"""
Tests for the REST endpoints.

TestClient is used without a context manager so the MCP lifespan is not entered.
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from main import app
from models import ProgramInfo, TransactionDetails
from solana_client import SolanaRPCError
from tests.conftest import NOW, SIGNATURE, SOLEND, WALLET


@pytest.fixture
def client(analyzer):
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["timestamp"].endswith("Z")


def test_root_lists_tools(client):
    body = client.get("/").json()
    assert body["tools"] == ["fetchWalletActivity", "analyzeWallet", "getTransactionDetails"]
    assert body["endpoints"]["mcp"].endswith("/mcp")


def test_activity(client, fake_client):
    resp = client.post("/activity", json={"address": WALLET, "limit": 7})
    assert resp.status_code == 200
    body = resp.json()
    assert body["address"] == WALLET
    assert body["count"] == 7
    assert body["activities"][0]["type"] == "Swap"
    assert body["report"].startswith("# Wallet Activity Report")
    assert fake_client.activity_calls == [(WALLET, 7)]


def test_activity_limit_out_of_range(client):
    resp = client.post("/activity", json={"address": WALLET, "limit": 101})
    assert resp.status_code == 422


def test_analyze_markdown(client):
    resp = client.post("/analyze", json={"address": WALLET})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/markdown")
    assert "X-Processing-Time-Ms" in resp.headers
    assert resp.text.startswith("# Wallet Analysis Report")


def test_analyze_json(client):
    resp = client.post("/analyze?format=json", json={"address": WALLET})
    assert resp.status_code == 200
    body = json.loads(resp.content)
    assert body["address"] == WALLET
    assert body["profile"]["risk_profile"] == "moderate"
    assert [p["pattern_type"] for p in body["patterns"]] == ["dca", "lending_active"]


def test_analyze_csv(client):
    resp = client.post("/analyze?format=csv", json={"address": WALLET})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in resp.headers["content-disposition"]


def test_analyze_excel(client):
    resp = client.post("/analyze?format=excel", json={"address": WALLET})
    assert resp.status_code == 200
    # xlsx is a zip archive
    assert resp.content[:2] == b"PK"


def test_analyze_invalid_address(client, fake_client):
    resp = client.post("/analyze", json={"address": "not-a-wallet"})
    assert resp.status_code == 422
    assert "Invalid Solana wallet address" in resp.json()["detail"]
    assert fake_client.activity_calls == []


def test_analyze_rpc_failure(client, fake_client):
    fake_client.error = SolanaRPCError("getSignaturesForAddress failed: HTTP 503")
    resp = client.post("/analyze", json={"address": WALLET})
    assert resp.status_code == 502


def test_transaction_details(client, fake_client):
    fake_client.details = TransactionDetails(
        signature=SIGNATURE, type="Lending", status="Success", block_time=NOW,
        fee=0.000005, program_ids=[ProgramInfo(id=SOLEND, name="SOLEND")],
        accounts=[WALLET, SOLEND],
    )
    resp = client.get(f"/transactions/{SIGNATURE}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["details"]["type"] == "Lending"
    assert body["report"].startswith("# Transaction Details ✅")


def test_transaction_not_found(client):
    resp = client.get(f"/transactions/{SIGNATURE}")
    assert resp.status_code == 404


def test_internal_lookup_error_is_500(client, fake_client):
    fake_client.error = KeyError("meta")
    resp = client.post("/analyze", json={"address": WALLET})
    assert resp.status_code == 500
    assert resp.json()["detail"].startswith("Internal error")


def test_internal_validation_error_is_500(client, fake_client):
    try:
        ProgramInfo.model_validate({})
    except ValidationError as e:
        fake_client.error = e
    resp = client.post("/activity", json={"address": WALLET})
    assert resp.status_code == 500
