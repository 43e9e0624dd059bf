"""Clients for the target store."""

from bitbench.connectors.pilosa_client import ImportClient, PilosaClient, QueryClient

__all__ = ["ImportClient", "PilosaClient", "QueryClient"]
