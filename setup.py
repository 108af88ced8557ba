# setup.py
from setuptools import setup, find_packages

setup(
    name="utxo_ledger",
    version="0.1.0",
    packages=find_packages(),
    python_requires=">=3.9",
    install_requires=[
        "cryptography",       # ECDSA
        "pycryptodome",       # keccak
        "msgpack",            # canonical tx encoding
        "PyNaCl",             # ed25519
        "prometheus_client",  # metrics
        "psutil",             # monitoring
    ],
    extras_require={
        "test": ["pytest"],
    },
)
