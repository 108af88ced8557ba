"""
Transaction validation and per-epoch batch application against a UTXO pool.

A transaction is valid iff:
  (1) every UTXO it claims is in the current pool,
  (2) every input's signature verifies against the claimed output's address,
  (3) no UTXO is claimed more than once by the transaction,
  (4) every output value is finite and non-negative, and
  (5) the claimed input values sum to at least the output values.
"""
import time
import logging
from typing import Optional
from .core import Transaction, TxOutput, is_valid_amount
from .crypto import Verifier, verify_signature, get_verifier
from .genesis import load_genesis_pool
from .monitoring import Monitor
from .utxo import UTXO, UTXOPool

logger = logging.getLogger(__name__)

# Rejection reasons reported by TxHandler.check_tx
NO_INPUTS = "no_inputs"
MISSING_UTXO = "missing_utxo"
BAD_SIGNATURE = "bad_signature"
DOUBLE_CLAIM = "double_claim"
NEGATIVE_OUTPUT = "negative_output"
INSUFFICIENT_VALUE = "insufficient_value"


class ContractViolation(Exception):
    """Raised when the caller hands the handler something that is not a transaction."""
    pass


class TxHandler:
    """
    Public ledger view over a private copy of a UTXO pool.

    The handler owns its pool exclusively: it copies the pool it is given,
    and only handle_txs() mutates the copy.
    """

    def __init__(self,
                 utxo_pool: UTXOPool,
                 verifier: Verifier = verify_signature,
                 monitor=None):
        self._pool = UTXOPool(utxo_pool)
        self.verifier = verifier
        self.monitor = monitor
        if self.monitor:
            self.monitor.update_pool(self._pool)

    @classmethod
    def from_config(cls, config, utxo_pool: Optional[UTXOPool] = None, monitor=None) -> 'TxHandler':
        """
        Builds a handler from configuration.

        Applies the configured log level and uses the configured signature
        scheme. Without an explicit pool the pool is seeded from the
        configured genesis file. When monitoring is enabled and no monitor
        is given, one is created and its metrics server started.
        """
        config.configure_logging()

        if utxo_pool is None:
            if not config.ledger.genesis_path:
                raise ValueError("No UTXO pool given and no genesis_path configured")
            _, utxo_pool = load_genesis_pool(config.ledger.genesis_path)

        if monitor is None and config.monitoring.enabled:
            monitor = Monitor(host=config.monitoring.host, port=config.monitoring.port)
            monitor.start_server()

        return cls(
            utxo_pool,
            verifier=get_verifier(config.ledger.signature_scheme),
            monitor=monitor,
        )

    def get_utxo_pool(self) -> UTXOPool:
        """Returns a snapshot of the current pool."""
        return self._pool.copy()

    def check_tx(self, tx: Transaction) -> tuple[bool, str]:
        """
        Evaluates the validity rules against the current pool.
        Returns (is_valid, reason); reason is "" for a valid transaction.
        Never mutates the pool.
        """
        self._require_transaction(tx)
        return self._check(tx, self._pool)

    def is_valid_tx(self, tx: Transaction) -> bool:
        return self.check_tx(tx)[0]

    def handle_txs(self, possible_txs: list[Transaction]) -> list[Transaction]:
        """
        Handles one epoch: checks each proposed transaction in the order
        given, applies the valid ones to the pool and returns them in
        acceptance order.

        Acceptance is a single greedy pass. An accepted transaction's outputs
        are spendable by transactions later in the same list; a rejected
        transaction is not retried within the epoch.

        The epoch is applied to a working copy of the pool, which replaces
        the handler's pool only when every candidate has been processed. If
        anything raises, the pool is left as it was before the call.
        """
        start = time.time()
        possible_txs = list(possible_txs)
        for tx in possible_txs:
            self._require_transaction(tx)

        working_pool = self._pool.copy()
        accepted = []
        verdicts = []

        for tx in possible_txs:
            is_valid, reason = self._check(tx, working_pool)
            verdicts.append((is_valid, reason))
            if not is_valid:
                logger.debug(f"Rejected tx {tx.id.hex()[:16]}: {reason}")
                continue

            self._apply(tx, working_pool)
            accepted.append(tx)

        self._pool = working_pool

        logger.info(f"Epoch processed: {len(accepted)}/{len(possible_txs)} transactions accepted, "
                    f"pool size {len(self._pool)}")
        if self.monitor:
            for is_valid, reason in verdicts:
                self.monitor.record_tx(is_valid, reason)
            self.monitor.record_epoch(time.time() - start)
            self.monitor.update_pool(self._pool)
        return accepted

    @staticmethod
    def _require_transaction(tx):
        if not isinstance(tx, Transaction):
            raise ContractViolation(f"Expected a Transaction, got {type(tx).__name__}")

    def _check(self, tx: Transaction, pool: UTXOPool) -> tuple[bool, str]:
        if tx.num_inputs() == 0:
            return False, NO_INPUTS

        claimed = set()
        input_sum = 0
        for i, tx_in in enumerate(tx.inputs):
            utxo = tx_in.utxo

            # (1) claimed output exists
            tx_out = pool.get_tx_output(utxo)
            if tx_out is None:
                logger.debug(f"Tx {tx.id.hex()[:16]}: input {i} claims {utxo}, not in pool")
                return False, MISSING_UTXO

            # (2) signature by the output's owner
            if not tx_in.signature or not self.verifier(
                    tx_out.address, tx.get_raw_data_to_sign(i), tx_in.signature):
                logger.debug(f"Tx {tx.id.hex()[:16]}: input {i} has an invalid signature")
                return False, BAD_SIGNATURE

            # (3) no UTXO claimed twice within the transaction
            if utxo in claimed:
                logger.debug(f"Tx {tx.id.hex()[:16]}: input {i} claims {utxo} again")
                return False, DOUBLE_CLAIM
            claimed.add(utxo)

            input_sum += tx_out.value

        # (4) finite, non-negative outputs, each output checked once
        output_sum = 0
        for j, tx_out in enumerate(tx.outputs):
            if not is_valid_amount(tx_out.value):
                logger.debug(f"Tx {tx.id.hex()[:16]}: output {j} has invalid value {tx_out.value}")
                return False, NEGATIVE_OUTPUT
            output_sum += tx_out.value

        # (5) conservation; any surplus is an implicit fee. NaN never compares >=.
        if not input_sum >= output_sum:
            logger.debug(f"Tx {tx.id.hex()[:16]}: outputs {output_sum} exceed inputs {input_sum}")
            return False, INSUFFICIENT_VALUE

        return True, ""

    @staticmethod
    def _apply(tx: Transaction, pool: UTXOPool):
        """Consumes a valid transaction's inputs and adds its outputs to the pool."""
        for tx_in in tx.inputs:
            pool.remove_utxo(tx_in.utxo)
        tx_hash = tx.id
        for i, tx_out in enumerate(tx.outputs):
            pool.add_utxo(UTXO(tx_hash, i), TxOutput(tx_out.value, tx_out.address))
