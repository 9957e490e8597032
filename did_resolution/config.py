"""Resolver configuration.

``ResolverConfig`` is the immutable value handed to the engines at startup.
``Settings`` loads the process configuration from the environment and derives
a ``ResolverConfig`` from it.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_METHOD = "cheqd"
DEFAULT_LEDGER_ENDPOINTS = {
    "mainnet": "https://api.cheqd.net",
    "testnet": "https://api.cheqd.network",
}


@dataclass(frozen=True)
class ResolverConfig:
    """Read-only configuration shared by every request."""

    method: str = DEFAULT_METHOD
    namespaces: FrozenSet[str] = field(
        default_factory=lambda: frozenset(DEFAULT_LEDGER_ENDPOINTS)
    )
    ledger_timeout: float = 5.0


class Settings(BaseSettings):
    """Environment settings for the resolver service."""

    debug: bool = False
    """Verbose logging. Set with DEBUG=true."""

    host: str = "0.0.0.0"
    """Interface to listen on. Set with HOST."""

    port: int = 8080
    """Port to listen on. Set with PORT."""

    did_method: str = DEFAULT_METHOD
    """DID method served by this resolver. Set with DID_METHOD."""

    ledger_endpoints: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_LEDGER_ENDPOINTS)
    )
    """Ledger REST base URL per namespace, as a JSON object.

    Set with LEDGER_ENDPOINTS. The keys are the namespaces the resolver accepts.
    """

    ledger_timeout: float = 5.0
    """Deadline in seconds for a single ledger query. Set with LEDGER_TIMEOUT."""

    logging_config_file: Optional[str] = None
    """Path to a JSON logging dictConfig. Set with LOGGING_CONFIG_FILE."""

    def resolver_config(self) -> ResolverConfig:
        """Derive the engine configuration."""
        return ResolverConfig(
            method=self.did_method,
            namespaces=frozenset(self.ledger_endpoints),
            ledger_timeout=self.ledger_timeout,
        )
