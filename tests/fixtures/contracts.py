"""Wrapper contract bytecode used by the tests and shipped in artifacts/."""

from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
ARTIFACTS_DIR = REPO_ROOT / "artifacts"

# Runtime of the minimal sha256 forwarder.
# Calldata: selector(4) ++ offset(32) ++ length(32) ++ data
#
# 6004      PUSH1 4
# 35        CALLDATALOAD      - offset of the bytes argument
# 6004      PUSH1 4
# 01        ADD               - p = 4 + offset
# 80        DUP1
# 35        CALLDATALOAD      - len = calldata[p]
# 90        SWAP1
# 6020      PUSH1 32
# 01        ADD               - start = p + 32
# 81        DUP2
# 90        SWAP1
# 6000      PUSH1 0
# 37        CALLDATACOPY      - mem[0:len] = calldata[start:start+len]
# 6020      PUSH1 32          - retSize
# 6000      PUSH1 0           - retOffset
# 82        DUP3              - argsSize = len
# 6000      PUSH1 0           - argsOffset
# 6002      PUSH1 2           - sha256 precompile
# 5a        GAS
# fa        STATICCALL
# 3d        RETURNDATASIZE
# 6020      PUSH1 32
# 14        EQ
# 16        AND               - ok = success && returndatasize == 32
# 6028      PUSH1 0x28
# 57        JUMPI             - jump to return if ok
# 6000      PUSH1 0
# 80        DUP1
# fd        REVERT
# 5b        JUMPDEST (0x28)
# 6020      PUSH1 32
# 6000      PUSH1 0
# f3        RETURN            - digest as bytes32
WRAPPER_RUNTIME = bytes.fromhex(
    "60043560040180359060200181906000376020600082600060025afa3d60201416602857600080fd5b60206000f3"
)

# Init code: CODECOPY the runtime (0x2e bytes at offset 0x0b) and return it
# 602e PUSH1 46, 80 DUP1, 600b PUSH1 11, 6000 PUSH1 0, 39 CODECOPY, 6000 PUSH1 0, f3 RETURN
WRAPPER_INIT = bytes.fromhex("602e80600b6000396000f3")

WRAPPER_BYTECODE = WRAPPER_INIT + WRAPPER_RUNTIME

# Never deployable: reverts in the constructor
REVERT_BYTECODE = bytes.fromhex("600080fd")
