"""
Core transaction data structures for the UTXO ledger.
"""
import math
import msgpack
from typing import Optional, Union
from .crypto import generate_hash, sign, sign_ed25519
from .utxo import UTXO


def is_valid_amount(value) -> bool:
    """True for a finite, non-negative amount. NaN and infinities are never valid."""
    if isinstance(value, int):
        return value >= 0
    return math.isfinite(value) and value >= 0


class TxInput:
    """A spend reference: claims output `output_index` of `prev_tx_hash`."""

    def __init__(self,
                 prev_tx_hash: bytes,
                 output_index: int,
                 signature: Optional[bytes] = None):
        self.prev_tx_hash = prev_tx_hash
        self.output_index = output_index
        self.signature = signature

    @property
    def utxo(self) -> UTXO:
        """The UTXO key this input claims."""
        return UTXO(self.prev_tx_hash, self.output_index)

    @classmethod
    def from_dict(cls, data: dict):
        return cls(
            prev_tx_hash=bytes.fromhex(data["prev_tx_hash"]),
            output_index=data["output_index"],
            signature=bytes.fromhex(data["signature"]) if data.get("signature") else None,
        )

    def to_dict(self) -> dict:
        return {
            "prev_tx_hash": self.prev_tx_hash.hex(),
            "output_index": self.output_index,
            "signature": self.signature.hex() if self.signature else None,
        }

    def __repr__(self):
        return f"TxInput({self.prev_tx_hash.hex()[:16]}, {self.output_index})"


class TxOutput:
    """
    A new unit of value.

    `address` is the authorization target: whoever spends this output must
    sign with the matching key. Negative values are accepted here so that
    the validator, not the constructor, decides on them.
    """

    def __init__(self, value: Union[int, float], address: str):
        self.value = value
        self.address = address

    @classmethod
    def from_dict(cls, data: dict):
        return cls(value=data["value"], address=data["address"])

    def to_dict(self) -> dict:
        return {"value": self.value, "address": self.address}

    def __eq__(self, other):
        if not isinstance(other, TxOutput):
            return NotImplemented
        return self.value == other.value and self.address == other.address

    def __repr__(self):
        return f"TxOutput(value={self.value})"


class Transaction:
    def __init__(self,
                 inputs: Optional[list[TxInput]] = None,
                 outputs: Optional[list[TxOutput]] = None):
        self.inputs = list(inputs) if inputs else []
        self.outputs = list(outputs) if outputs else []

    @classmethod
    def coinbase(cls, value: Union[int, float], address: str) -> 'Transaction':
        """Creates a zero-input transaction minting a single output."""
        tx = cls()
        tx.add_output(value, address)
        return tx

    @classmethod
    def from_dict(cls, data: dict):
        """Creates a Transaction object from a dictionary."""
        return cls(
            inputs=[TxInput.from_dict(i) for i in data.get("inputs", [])],
            outputs=[TxOutput.from_dict(o) for o in data.get("outputs", [])],
        )

    def to_dict(self) -> dict:
        return {
            "inputs": [i.to_dict() for i in self.inputs],
            "outputs": [o.to_dict() for o in self.outputs],
        }

    # --- building ---

    def add_input(self, prev_tx_hash: bytes, output_index: int) -> TxInput:
        tx_in = TxInput(prev_tx_hash, output_index)
        self.inputs.append(tx_in)
        return tx_in

    def add_output(self, value: Union[int, float], address: str) -> TxOutput:
        tx_out = TxOutput(value, address)
        self.outputs.append(tx_out)
        return tx_out

    def remove_input(self, target: Union[int, UTXO]):
        """Removes an input by position or by the UTXO it claims."""
        if isinstance(target, UTXO):
            for i, tx_in in enumerate(self.inputs):
                if tx_in.utxo == target:
                    del self.inputs[i]
                    return
            raise ValueError(f"No input claims {target}")
        del self.inputs[target]

    def get_input(self, index: int) -> TxInput:
        if not 0 <= index < len(self.inputs):
            raise IndexError(f"Input index {index} out of range ({len(self.inputs)} inputs)")
        return self.inputs[index]

    def get_output(self, index: int) -> TxOutput:
        if not 0 <= index < len(self.outputs):
            raise IndexError(f"Output index {index} out of range ({len(self.outputs)} outputs)")
        return self.outputs[index]

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return len(self.outputs)

    # --- canonical encodings ---

    def get_raw_data_to_sign(self, index: int) -> bytes:
        """
        Returns the canonical payload an owner signs to authorize input `index`.

        Covers the input position, every claimed UTXO and every output, but
        no signatures, so signing one input never changes another's payload.
        """
        self.get_input(index)
        data = {
            "index": index,
            "inputs": [[i.prev_tx_hash, i.output_index] for i in self.inputs],
            "outputs": [[o.value, o.address] for o in self.outputs],
        }
        return msgpack.packb(data, use_bin_type=True)

    def get_raw_tx(self) -> bytes:
        """Returns the canonical byte representation including signatures."""
        data = {
            "inputs": [[i.prev_tx_hash, i.output_index, i.signature] for i in self.inputs],
            "outputs": [[o.value, o.address] for o in self.outputs],
        }
        return msgpack.packb(data, use_bin_type=True)

    # --- signing ---

    def add_signature(self, signature: bytes, index: int):
        self.get_input(index).signature = signature

    def sign_input(self, private_key, index: int):
        """Signs input `index` with an ECDSA private key."""
        self.add_signature(sign(private_key, self.get_raw_data_to_sign(index)), index)

    def sign_input_ed25519(self, signing_key, index: int):
        """Signs input `index` with an Ed25519 signing key."""
        self.add_signature(sign_ed25519(signing_key, self.get_raw_data_to_sign(index)), index)

    @property
    def id(self) -> bytes:
        """The content hash of the transaction; keys its outputs in the pool."""
        return generate_hash(self.get_raw_tx())

    hash = id

    def __repr__(self):
        return (f"Transaction({self.id.hex()[:16]}, "
                f"inputs={len(self.inputs)}, outputs={len(self.outputs)})")
