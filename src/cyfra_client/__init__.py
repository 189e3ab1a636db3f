"""Cyfra tile catalog and spectral index analysis client."""

from cyfra_client.client import CyfraClient
from cyfra_client.engine.session import CyfraSession

__all__ = ["CyfraClient", "CyfraSession"]
