"""Execute the shipped wrapper bytecode on py-evm.

The fake devnet answers wrapper calls without running code, so these tests
are what ties artifacts/Sha256Wrapper.bin to the precompile it forwards to.
"""

from __future__ import annotations

import hashlib

import pytest
from eth import constants
from eth.chains.base import MiningChain
from eth.consensus.noproof import NoProofConsensus
from eth.db.atomic import AtomicDB
from eth.db.backends.memory import MemoryDB
from eth.vm.forks.prague import PragueVM

from precompile_check.artifacts import load_abi, load_bytecode
from precompile_check.stages.wrapper_invoke import (
    decode_hash_result,
    encode_hash_call,
    load_wrapper_function,
)
from precompile_check.vectors import TEST_VECTORS

from tests.fixtures.contracts import ARTIFACTS_DIR, WRAPPER_RUNTIME

CALLER = b"\x11" * 20
WRAPPER_ADDRESS = b"\x22" * 20


@pytest.fixture(scope="module")
def vm():
    chain_class = MiningChain.configure(
        __name__="WrapperTestChain",
        vm_configuration=(
            (constants.GENESIS_BLOCK_NUMBER, PragueVM.configure(consensus_class=NoProofConsensus)),
        ),
        chain_id=10101,
    )
    genesis_params = {
        "difficulty": 0,
        "gas_limit": 30_000_000,
        "timestamp": 0,
        "coinbase": b"\x00" * 20,
    }
    chain = chain_class.from_genesis(AtomicDB(MemoryDB()), genesis_params, {})
    return chain.get_vm()


@pytest.fixture(scope="module")
def fn_abi():
    return load_wrapper_function(load_abi(ARTIFACTS_DIR / "Sha256Wrapper.abi"), "sha256Hash")


def _execute(vm, code: bytes, data: bytes = b""):
    return vm.execute_bytecode(
        origin=CALLER,
        gas_price=0,
        gas=1_000_000,
        to=WRAPPER_ADDRESS,
        sender=CALLER,
        value=0,
        data=data,
        code=code,
    )


def test_init_code_returns_runtime(vm) -> None:
    computation = _execute(vm, load_bytecode(ARTIFACTS_DIR / "Sha256Wrapper.bin"))

    assert computation.is_success
    assert computation.output == WRAPPER_RUNTIME


@pytest.mark.parametrize("data", TEST_VECTORS, ids=lambda v: repr(v.decode()))
def test_runtime_forwards_to_sha256_precompile(vm, fn_abi, data: bytes) -> None:
    computation = _execute(vm, WRAPPER_RUNTIME, encode_hash_call(fn_abi, data))

    assert computation.is_success
    assert len(computation.output) == 32
    assert decode_hash_result(computation.output) == hashlib.sha256(data).digest()


def test_runtime_handles_input_longer_than_a_word(vm, fn_abi) -> None:
    data = bytes(range(256)) * 3
    computation = _execute(vm, WRAPPER_RUNTIME, encode_hash_call(fn_abi, data))

    assert computation.is_success
    assert computation.output == hashlib.sha256(data).digest()
