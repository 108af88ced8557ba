"""
Cryptographic capabilities consumed by the ledger: hashing, key handling,
signing and signature verification.
"""
import hashlib
from typing import Callable
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives import serialization
from cryptography.exceptions import InvalidSignature
import nacl.signing
import nacl.exceptions

# (address, message, signature) -> bool
Verifier = Callable[[str, bytes, bytes], bool]


def generate_hash(data: bytes) -> bytes:
    """Generates a Keccak-256 hash."""
    from Crypto.Hash import keccak
    return keccak.new(digest_bits=256, data=data).digest()

# --- ECDSA ---

def generate_key_pair() -> tuple[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]:
    """Generates an ECDSA private/public key pair (P-256)."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    public_key = private_key.public_key()
    return private_key, public_key

def serialize_public_key(public_key: ec.EllipticCurvePublicKey) -> str:
    """Serializes a public key object into PEM format (string)."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode('utf-8')

def deserialize_public_key(pem_data: str) -> ec.EllipticCurvePublicKey:
    """Deserializes a public key from a PEM formatted string."""
    return serialization.load_pem_public_key(pem_data.encode('utf-8'))

def public_key_to_address(public_key_pem: str) -> bytes:
    """Derives a 20-byte address from a public key PEM string."""
    public_key = deserialize_public_key(public_key_pem)
    der_bytes = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )
    address_hash = hashlib.sha256(der_bytes).digest()
    return address_hash[:20]

def sign(private_key: ec.EllipticCurvePrivateKey, data: bytes) -> bytes:
    """Signs byte data using ECDSA with SHA256."""
    return private_key.sign(data, ec.ECDSA(hashes.SHA256()))

def verify_signature(public_key_pem: str, data: bytes, signature: bytes) -> bool:
    """
    Verifies an ECDSA/SHA256 signature.

    Only a signature that does not verify yields False. A malformed public
    key is not a signature problem and propagates to the caller. The same
    holds for the Ed25519 verifier below.
    """
    public_key = deserialize_public_key(public_key_pem)
    try:
        public_key.verify(signature, data, ec.ECDSA(hashes.SHA256()))
        return True
    except InvalidSignature:
        return False

# --- Ed25519 using PyNaCl ---

def generate_ed25519_keypair() -> tuple[nacl.signing.SigningKey, str]:
    """Generates an Ed25519 signing key and its hex-encoded verify key."""
    signing_key = nacl.signing.SigningKey.generate()
    return signing_key, signing_key.verify_key.encode().hex()

def sign_ed25519(signing_key: nacl.signing.SigningKey, data: bytes) -> bytes:
    """Returns the detached Ed25519 signature over data."""
    return signing_key.sign(data).signature

def verify_ed25519_signature(verify_key_hex: str, data: bytes, signature: bytes) -> bool:
    """Verifies a detached Ed25519 signature against a hex-encoded verify key."""
    verify_key = nacl.signing.VerifyKey(bytes.fromhex(verify_key_hex))
    try:
        verify_key.verify(data, signature)
        return True
    except (nacl.exceptions.BadSignatureError, ValueError):
        # Catch both cryptographic failures and signature length errors
        return False


SIGNATURE_SCHEMES: dict[str, Verifier] = {
    'ecdsa': verify_signature,
    'ed25519': verify_ed25519_signature,
}

def get_verifier(scheme: str) -> Verifier:
    """Returns the verification function registered for a signature scheme."""
    try:
        return SIGNATURE_SCHEMES[scheme]
    except KeyError:
        raise ValueError(f"Unknown signature scheme: {scheme}") from None
