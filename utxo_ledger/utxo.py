"""
Unspent transaction output identities and the pool that tracks them.
"""
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class UTXOPoolError(Exception):
    """Raised when a caller breaks the pool's add/remove contract."""
    pass


@dataclass(frozen=True)
class UTXO:
    """Identity of an unspent output: (origin transaction hash, output index)."""
    tx_hash: bytes
    index: int

    def to_dict(self) -> dict:
        return {"tx_hash": self.tx_hash.hex(), "index": self.index}

    @classmethod
    def from_dict(cls, data: dict) -> 'UTXO':
        return cls(bytes.fromhex(data["tx_hash"]), data["index"])

    def __repr__(self):
        return f"UTXO({self.tx_hash.hex()[:16]}, {self.index})"


class UTXOPool:
    """
    Mapping from UTXO to the TxOutput it identifies.

    Every key present is an output that was created (by genesis or an
    accepted transaction) and not yet consumed.
    """

    def __init__(self, utxo_pool: Optional['UTXOPool'] = None):
        """
        Args:
            utxo_pool: Pool to copy. The new pool never shares state with it.
        """
        self._pool = {}
        if utxo_pool is not None:
            for utxo, tx_out in utxo_pool._pool.items():
                self._pool[utxo] = type(tx_out)(tx_out.value, tx_out.address)

    def copy(self) -> 'UTXOPool':
        return UTXOPool(self)

    def contains(self, utxo: UTXO) -> bool:
        return utxo in self._pool

    def get_tx_output(self, utxo: UTXO):
        """Returns the TxOutput for a live UTXO, or None if it is not in the pool."""
        return self._pool.get(utxo)

    def add_utxo(self, utxo: UTXO, tx_out):
        if utxo in self._pool:
            logger.error(f"Refusing to add {utxo}: already in pool")
            raise UTXOPoolError(f"{utxo} is already in the pool")
        self._pool[utxo] = tx_out

    def remove_utxo(self, utxo: UTXO):
        if utxo not in self._pool:
            logger.error(f"Refusing to remove {utxo}: not in pool")
            raise UTXOPoolError(f"{utxo} is not in the pool")
        del self._pool[utxo]

    def get_all_utxo(self) -> list[UTXO]:
        return list(self._pool)

    def total_value(self):
        return sum(tx_out.value for tx_out in self._pool.values())

    def to_dict(self) -> dict:
        """Snapshot form: list of {utxo, output} records in insertion order."""
        return {
            "utxos": [
                {"utxo": utxo.to_dict(), "output": tx_out.to_dict()}
                for utxo, tx_out in self._pool.items()
            ]
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UTXOPool':
        """Restores a pool from the form produced by to_dict()."""
        from .core import TxOutput
        pool = cls()
        for entry in data.get("utxos", []):
            pool.add_utxo(UTXO.from_dict(entry["utxo"]), TxOutput.from_dict(entry["output"]))
        return pool

    def __contains__(self, utxo: UTXO) -> bool:
        return self.contains(utxo)

    def __len__(self) -> int:
        return len(self._pool)

    def __eq__(self, other):
        if not isinstance(other, UTXOPool):
            return NotImplemented
        return self._pool == other._pool

    def __repr__(self):
        return f"UTXOPool(size={len(self._pool)})"
