"""
Tests for UTXO identities and the UTXO pool contract.
"""
import pytest
from utxo_ledger.core import TxOutput
from utxo_ledger.crypto import generate_hash
from utxo_ledger.utxo import UTXO, UTXOPool, UTXOPoolError


@pytest.fixture
def pool():
    pool = UTXOPool()
    pool.add_utxo(UTXO(generate_hash(b'a'), 0), TxOutput(10, 'owner-a'))
    pool.add_utxo(UTXO(generate_hash(b'a'), 1), TxOutput(3, 'owner-b'))
    return pool


class TestUTXO:
    def test_value_equality(self):
        assert UTXO(b'\x01' * 32, 0) == UTXO(b'\x01' * 32, 0)
        assert UTXO(b'\x01' * 32, 0) != UTXO(b'\x01' * 32, 1)
        assert UTXO(b'\x01' * 32, 0) != UTXO(b'\x02' * 32, 0)

    def test_hashable(self):
        keys = {UTXO(b'\x01' * 32, 0), UTXO(b'\x01' * 32, 0), UTXO(b'\x01' * 32, 1)}
        assert len(keys) == 2

    def test_immutable(self):
        utxo = UTXO(b'\x01' * 32, 0)
        with pytest.raises(AttributeError):
            utxo.index = 5

    def test_dict_form(self):
        utxo = UTXO(b'\xab' * 32, 2)
        assert utxo.to_dict() == {'tx_hash': 'ab' * 32, 'index': 2}
        assert UTXO.from_dict(utxo.to_dict()) == utxo


class TestUTXOPool:
    def test_contains_and_get(self, pool):
        utxo = UTXO(generate_hash(b'a'), 0)
        assert pool.contains(utxo)
        assert utxo in pool
        assert pool.get_tx_output(utxo) == TxOutput(10, 'owner-a')

    def test_missing_key(self, pool):
        utxo = UTXO(generate_hash(b'a'), 2)
        assert not pool.contains(utxo)
        assert pool.get_tx_output(utxo) is None

    def test_add_duplicate_rejected(self, pool):
        with pytest.raises(UTXOPoolError, match="already in the pool"):
            pool.add_utxo(UTXO(generate_hash(b'a'), 0), TxOutput(1, 'someone'))
        assert pool.get_tx_output(UTXO(generate_hash(b'a'), 0)).value == 10

    def test_remove(self, pool):
        utxo = UTXO(generate_hash(b'a'), 0)
        pool.remove_utxo(utxo)
        assert not pool.contains(utxo)
        assert len(pool) == 1

    def test_remove_absent_rejected(self, pool):
        with pytest.raises(UTXOPoolError, match="not in the pool"):
            pool.remove_utxo(UTXO(generate_hash(b'b'), 0))
        assert len(pool) == 2

    def test_total_value(self, pool):
        assert pool.total_value() == 13
        assert UTXOPool().total_value() == 0

    def test_get_all_utxo(self, pool):
        assert set(pool.get_all_utxo()) == {
            UTXO(generate_hash(b'a'), 0),
            UTXO(generate_hash(b'a'), 1),
        }


class TestPoolCopy:
    def test_copy_is_equal(self, pool):
        assert pool.copy() == pool
        assert UTXOPool(pool) == pool

    def test_mutating_copy_leaves_original(self, pool):
        snapshot = pool.copy()
        snapshot.remove_utxo(UTXO(generate_hash(b'a'), 0))
        snapshot.add_utxo(UTXO(generate_hash(b'c'), 0), TxOutput(7, 'owner-c'))

        assert pool.contains(UTXO(generate_hash(b'a'), 0))
        assert not pool.contains(UTXO(generate_hash(b'c'), 0))
        assert len(pool) == 2

    def test_mutating_original_leaves_copy(self, pool):
        snapshot = pool.copy()
        pool.remove_utxo(UTXO(generate_hash(b'a'), 1))
        assert snapshot.contains(UTXO(generate_hash(b'a'), 1))

    def test_copy_does_not_share_outputs(self, pool):
        snapshot = pool.copy()
        snapshot.get_tx_output(UTXO(generate_hash(b'a'), 0)).value = 999
        assert pool.get_tx_output(UTXO(generate_hash(b'a'), 0)).value == 10

    def test_snapshot_restore(self, pool):
        restored = UTXOPool.from_dict(pool.to_dict())
        assert restored == pool
        assert restored.total_value() == 13

    def test_restore_rejects_duplicate_entries(self, pool):
        data = pool.to_dict()
        data['utxos'].append(data['utxos'][0])
        with pytest.raises(UTXOPoolError):
            UTXOPool.from_dict(data)
