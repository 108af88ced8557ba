"""
Genesis seeding of a UTXO pool.

The genesis transaction is a zero-input transaction whose outputs are the
initial allocations. Its outputs go straight into the pool; it is never
itself passed through TxHandler, which rejects zero-input transactions.
"""
import json
import logging
from typing import Iterable, Union
from .core import Transaction, is_valid_amount
from .utxo import UTXO, UTXOPool

logger = logging.getLogger(__name__)


def create_genesis_pool(allocations: Iterable[tuple[str, Union[int, float]]]) -> tuple[Transaction, UTXOPool]:
    """
    Builds the genesis transaction and the pool it seeds.

    Args:
        allocations: (address, value) pairs, one output each, in order.

    Returns:
        (genesis transaction, pool keyed by (genesis.id, output index))

    Raises:
        ValueError: If there are no allocations or a value is negative or not finite
    """
    genesis = Transaction()
    for address, value in allocations:
        if not is_valid_amount(value):
            raise ValueError(f"Genesis allocation to {address[:16]} is not a finite non-negative amount: {value}")
        genesis.add_output(value, address)

    if genesis.num_outputs() == 0:
        raise ValueError("Genesis requires at least one allocation")

    pool = UTXOPool()
    genesis_hash = genesis.id
    for i, tx_out in enumerate(genesis.outputs):
        pool.add_utxo(UTXO(genesis_hash, i), tx_out)

    logger.info(f"Genesis {genesis_hash.hex()[:16]} seeded {len(pool)} outputs, "
                f"total value {pool.total_value()}")
    return genesis, pool


def load_genesis_pool(config_path: str) -> tuple[Transaction, UTXOPool]:
    """
    Seeds a pool from a JSON genesis file of the form
    {"allocations": [{"address": ..., "value": ...}, ...]}.
    """
    logger.info(f"Loading genesis configuration from: {config_path}")
    with open(config_path, 'r') as f:
        config = json.load(f)

    allocations = [(a['address'], a['value']) for a in config.get('allocations', [])]
    return create_genesis_pool(allocations)
