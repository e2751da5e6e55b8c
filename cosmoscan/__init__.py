"""Cosmos-SDK chain explorer client: failover node access, read cache and transaction broadcasting."""

__version__ = "1.0.0"
