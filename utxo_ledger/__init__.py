"""
UTXO ledger core: validates proposed transactions against a pool of
unspent outputs and applies a mutually consistent subset per epoch.
"""
from .utxo import UTXO, UTXOPool, UTXOPoolError
from .core import Transaction, TxInput, TxOutput
from .handler import TxHandler, ContractViolation
from .genesis import create_genesis_pool, load_genesis_pool
from .config import Config

__all__ = [
    'UTXO', 'UTXOPool', 'UTXOPoolError',
    'Transaction', 'TxInput', 'TxOutput',
    'TxHandler', 'ContractViolation',
    'create_genesis_pool', 'load_genesis_pool',
    'Config',
]
