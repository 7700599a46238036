"""Tests for the HTTP surface."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient

from trustboard.app import create_app
from trustboard.cache import InMemoryResultCache
from trustboard.config import Config
from trustboard.datasources import EvmRpcClient, Relayer
from trustboard.exceptions import DecodeError, RpcError, UpstreamRejected, UpstreamUnavailable
from trustboard.services import IdentityLinker, LeaderboardService, TrustEnricher

from .conftest import StubGateway, StubOracle

USER_KEY = "0x" + "a1" * 32
FLOW_ADDRESS = "01cf0e2f2f715450"
TX_HASH = "0x" + "ab" * 32


def link_signature(flow_address: str = FLOW_ADDRESS) -> str:
    signed = Account.sign_message(
        encode_defunct(text=f"Memoree link:{flow_address}"), private_key=USER_KEY
    )
    return "0x" + bytes(signed.signature).hex()


@pytest.fixture
def relayer():
    relayer = MagicMock(spec=Relayer)
    relayer.transact = AsyncMock(return_value=TX_HASH)
    return relayer


@pytest.fixture
def rpc():
    rpc = MagicMock(spec=EvmRpcClient)
    rpc.get_transaction_receipt = AsyncMock(return_value={"status": "0x1"})
    return rpc


def make_client(gateway, relayer, rpc, oracle=None) -> TestClient:
    service = LeaderboardService(
        gateway=gateway,
        enricher=TrustEnricher(oracle if oracle is not None else StubOracle(flags={"bob": 2})),
        cache=InMemoryResultCache(),
        leaderboard_contract="0xb8404e09b36b6623",
        leaderboard_admin="0xe647591c05619dba",
    )
    linker = IdentityLinker(
        relayer=relayer,
        rpc=rpc,
        mapper_address="0x" + "34" * 20,
        sleep=AsyncMock(),
    )
    app = create_app(Config(), leaderboard_service=service, identity_linker=linker)
    return TestClient(app)


class TestLeaderboardEndpoint:

    def test_returns_ranked_rows(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.get("/leaderboard", params={"tab": "overall"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == [
            {"rank": 1, "name": "bob", "score": 40.0, "cheatFlag": 2},
            {"rank": 2, "name": "alice", "score": 12.5, "cheatFlag": None},
        ]

    def test_repeated_requests_are_served_from_cache(self, alice_bob_tree, relayer, rpc):
        gateway = StubGateway(alice_bob_tree)
        client = make_client(gateway, relayer, rpc)

        first = client.get("/leaderboard?tab=current")
        second = client.get("/leaderboard?tab=current")

        assert first.content == second.content
        assert len(gateway.calls) == 1

    @pytest.mark.parametrize("error", [
        UpstreamUnavailable("flow timed out"),
        UpstreamRejected("flow returned 500", status_code=500),
        DecodeError("bad payload", raw="???"),
    ])
    def test_upstream_failure_is_500(self, error, relayer, rpc):
        client = make_client(StubGateway(error=error), relayer, rpc)

        response = client.get("/leaderboard")

        assert response.status_code == 500
        assert "error" in response.json()

    def test_tab_parameter_documents_examples(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        operation = client.get("/openapi.json").json()["paths"]["/leaderboard"]["get"]
        tab = next(p for p in operation["parameters"] if p["name"] == "tab")

        assert '"examples"' in json.dumps(tab)

    def test_health(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)
        assert client.get("/health").json() == {"status": "healthy"}


class TestLinkAddressEndpoint:

    def test_valid_link_returns_tx_hash(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.post(
            "/link-address",
            json={"flowAddress": FLOW_ADDRESS, "signature": link_signature()},
        )

        assert response.status_code == 200
        assert response.json() == {"txHash": TX_HASH}

    def test_bad_address_is_400(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.post(
            "/link-address",
            json={"flowAddress": "0xNOTHEX", "signature": link_signature()},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid Flow address format"}
        relayer.transact.assert_not_awaited()

    def test_missing_signature_is_400(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.post("/link-address", json={"flowAddress": FLOW_ADDRESS})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing signature"}

    def test_relay_failure_is_500_with_details(self, alice_bob_tree, relayer, rpc):
        relayer.transact.side_effect = RpcError(-32000, "nonce too low")
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.post(
            "/link-address",
            json={"flowAddress": FLOW_ADDRESS, "signature": link_signature()},
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Relay failed"
        assert "nonce too low" in body["details"]


class TestTxStatusEndpoint:

    def test_mined(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.get("/tx-status", params={"hash": TX_HASH})

        assert response.status_code == 200
        assert response.json() == {"mined": True}

    def test_not_mined_within_cap(self, alice_bob_tree, relayer, rpc):
        rpc.get_transaction_receipt.return_value = None
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.get("/tx-status", params={"hash": TX_HASH})

        assert response.status_code == 200
        assert response.json() == {"mined": False}
        assert rpc.get_transaction_receipt.await_count == 30

    @pytest.mark.parametrize("tx_hash", ["", "0x1234", "ab" * 32, "0x" + "zz" * 32])
    def test_malformed_hash_is_400(self, tx_hash, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.get("/tx-status", params={"hash": tx_hash})

        assert response.status_code == 400
        body = response.json()
        assert body["mined"] is False
        assert "error" in body
        rpc.get_transaction_receipt.assert_not_awaited()


class TestRequestErrors:

    def test_wrongly_typed_body_is_400(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.post("/link-address", json={"flowAddress": 123, "signature": link_signature()})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request")
        relayer.transact.assert_not_awaited()

    def test_unparseable_body_is_400(self, alice_bob_tree, relayer, rpc):
        client = make_client(StubGateway(alice_bob_tree), relayer, rpc)

        response = client.post(
            "/link-address",
            content="not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()


class TestWithoutRelayerKey:

    @pytest.fixture
    def app(self, alice_bob_tree):
        service = LeaderboardService(
            gateway=StubGateway(alice_bob_tree),
            enricher=TrustEnricher(StubOracle()),
            cache=InMemoryResultCache(),
            leaderboard_contract="0xb8404e09b36b6623",
            leaderboard_admin="0xe647591c05619dba",
        )
        return create_app(Config(relayer_private_key=""), leaderboard_service=service)

    @pytest.fixture
    def client(self, app):
        return TestClient(app)

    def test_tx_status_still_validates_hashes(self, client):
        response = client.get("/tx-status", params={"hash": "0x12"})

        assert response.status_code == 400
        assert response.json()["mined"] is False

    def test_linker_is_built_without_relayer(self, app):
        linker = app.state.identity_linker

        assert isinstance(linker, IdentityLinker)
        assert linker.relayer is None

    def test_link_fails_with_relay_error(self, client):
        response = client.post(
            "/link-address",
            json={"flowAddress": FLOW_ADDRESS, "signature": link_signature()},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Relay failed", "details": "Relayer not configured"}

    def test_missing_linker_is_json_500(self, app, client):
        app.state.identity_linker = None

        response = client.get("/tx-status", params={"hash": TX_HASH})

        assert response.status_code == 500
        assert response.json() == {"error": "Identity linking is not configured"}
