"""
Configuration management for the ledger.
"""
import json
import logging
import os
from typing import Optional
from dataclasses import dataclass, asdict


@dataclass
class LedgerConfig:
    """Validation configuration."""
    signature_scheme: str = "ecdsa"  # "ecdsa" or "ed25519"
    genesis_path: Optional[str] = None
    log_level: str = "INFO"


@dataclass
class MonitoringConfig:
    """Monitoring configuration."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 9090


@dataclass
class Config:
    """Main configuration."""
    ledger: LedgerConfig
    monitoring: MonitoringConfig

    @classmethod
    def default(cls) -> 'Config':
        """Create default configuration."""
        return cls(
            ledger=LedgerConfig(),
            monitoring=MonitoringConfig()
        )

    @classmethod
    def from_file(cls, path: str) -> 'Config':
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)

        return cls(
            ledger=LedgerConfig(**data.get('ledger', {})),
            monitoring=MonitoringConfig(**data.get('monitoring', {}))
        )

    def to_file(self, path: str):
        """Save configuration to JSON file."""
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'ledger': asdict(self.ledger),
            'monitoring': asdict(self.monitoring)
        }

    def configure_logging(self):
        """Apply the configured log level to the root logger."""
        level = getattr(logging, self.ledger.log_level.upper(), None)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {self.ledger.log_level}")
        logging.basicConfig(level=level)
        logging.getLogger().setLevel(level)
