"""Pytest configuration and shared fixtures for all tests."""

import pytest
from fastapi.testclient import TestClient

from precompile_check.config import Config
from precompile_check.rpc import RPCClient

from tests.fixtures.contracts import ARTIFACTS_DIR
from tests.fixtures.devnet import FakeDevnet
from tests.fixtures.keys import DEPLOYER_ADDRESS, DEPLOYER_PRIVATE_KEY

DEVNET_URL = "http://testserver/"

CONFIG_ENV_VARS = (
    "RPC_URL", "RPC_HOST", "RPC_PORT", "RPC_TIMEOUT", "DEPLOYER_PRIVATE_KEY",
    "CHAIN_ID", "NETWORK_NAME", "PRECOMPILE", "ARTIFACTS_DIR", "CONTRACT_NAME",
    "WRAPPER_FUNCTION", "RESULTS_DIR", "GAS_PRICE", "GAS_LIMIT",
    "RECEIPT_TIMEOUT", "POLL_INTERVAL",
)


# =============================================================================
# Node fixtures
# =============================================================================

@pytest.fixture
def devnet():
    """Fresh fake devnet node with default behaviour."""
    return FakeDevnet()


@pytest.fixture
def client(devnet):
    """RPCClient wired to the fake devnet through FastAPI's TestClient."""
    http = TestClient(devnet.app)
    rpc = RPCClient(DEVNET_URL, http=http)
    yield rpc
    http.close()


# =============================================================================
# Configuration fixtures
# =============================================================================

@pytest.fixture
def deployer_key():
    return DEPLOYER_PRIVATE_KEY


@pytest.fixture
def deployer_address():
    return DEPLOYER_ADDRESS


@pytest.fixture
def config(tmp_path):
    """Config pointing at the shipped artifacts, writing results to tmp_path."""
    return Config(
        rpc_url=DEVNET_URL,
        private_key_hex="0x" + DEPLOYER_PRIVATE_KEY.hex(),
        artifacts_dir=ARTIFACTS_DIR,
        results_dir=tmp_path,
        receipt_timeout=5.0,
        poll_interval=0.01,
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove config variables from the environment and restore them afterwards.

    Each variable is set before being deleted so monkeypatch records it and
    also undoes anything python-dotenv writes during the test.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


class RecordingSleep:
    """Sleep replacement that records requested intervals instead of blocking."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def no_sleep():
    return RecordingSleep()
