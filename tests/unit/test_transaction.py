"""Unit tests for legacy transaction encoding and EIP-155 signing."""

import pytest
import rlp

from precompile_check.transaction import LegacyTransaction
from tests.fixtures.contracts import WRAPPER_BYTECODE
from tests.fixtures.keys import DEPLOYER_PRIVATE_KEY, EIP155_PRIVATE_KEY, derive_address


def eip155_example_tx():
    """The example transaction from EIP-155."""
    return LegacyTransaction(
        nonce=9,
        gas_price=20 * 10**9,
        gas_limit=21000,
        to=bytes.fromhex("35" * 20),
        value=10**18,
        data=b"",
    )


class TestEIP155Example:
    def test_signing_hash(self):
        tx = eip155_example_tx()
        assert tx.signing_hash(1).hex() == (
            "daf5a779ae972f972197303d7b574746c7ef83eadac0f2791ad23db92e4c8e53"
        )

    def test_signature(self):
        tx = eip155_example_tx().sign(EIP155_PRIVATE_KEY, chain_id=1)
        assert tx.v == 37
        assert tx.r == 0x28ef61340bd939bc2195fe537567866003e1a15d3c71ff63e1590620aa636276
        assert tx.s == 0x67cbe9d8997f761aecb703304b3800ccf555c9f3dc64214b297fb1966a3b6d83

    def test_encoding(self):
        tx = eip155_example_tx().sign(EIP155_PRIVATE_KEY, chain_id=1)
        assert tx.encode_rlp().hex() == (
            "f86c098504a817c800825208943535353535353535353535353535353535353535"
            "880de0b6b3a76400008025a028ef61340bd939bc2195fe537567866003e1a15d3c71"
            "ff63e1590620aa636276a067cbe9d8997f761aecb703304b3800ccf555c9f3dc6421"
            "4b297fb1966a3b6d83"
        )

    def test_sender(self):
        tx = eip155_example_tx().sign(EIP155_PRIVATE_KEY, chain_id=1)
        assert tx.sender() == derive_address(EIP155_PRIVATE_KEY)


class TestContractCreation:
    def make_signed(self, chain_id=10101):
        tx = LegacyTransaction(
            nonce=0,
            gas_price=10**9,
            gas_limit=2_000_000,
            to=None,
            value=0,
            data=WRAPPER_BYTECODE,
        )
        return tx.sign(DEPLOYER_PRIVATE_KEY, chain_id)

    def test_empty_recipient_encoded(self):
        tx = self.make_signed()
        items = rlp.decode(tx.encode_rlp())
        assert items[3] == b""
        assert tx.is_contract_creation

    def test_chain_id_bound_into_v(self):
        tx = self.make_signed(chain_id=10101)
        assert tx.v in (10101 * 2 + 35, 10101 * 2 + 36)
        assert tx.chain_id == 10101

    def test_decode_roundtrip(self):
        tx = self.make_signed()
        decoded = LegacyTransaction.decode_rlp(tx.encode_rlp())
        assert decoded == tx
        assert decoded.to is None
        assert decoded.tx_hash() == tx.tx_hash()
        assert decoded.sender() == derive_address(DEPLOYER_PRIVATE_KEY)

    def test_different_chain_ids_give_different_hashes(self):
        assert self.make_signed(1).tx_hash() != self.make_signed(10101).tx_hash()


class TestDecodingErrors:
    def test_empty(self):
        with pytest.raises(rlp.DecodingError):
            LegacyTransaction.decode_rlp(b"")

    def test_typed_transaction_rejected(self):
        with pytest.raises(rlp.DecodingError, match="Typed"):
            LegacyTransaction.decode_rlp(b"\x02" + rlp.encode([1, 2, 3]))

    def test_wrong_field_count(self):
        with pytest.raises(rlp.DecodingError, match="9 fields"):
            LegacyTransaction.decode_rlp(rlp.encode([1, 2, 3]))

    def test_unsigned_sender(self):
        with pytest.raises(ValueError, match="not signed"):
            LegacyTransaction().sender()
