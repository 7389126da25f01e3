"""HTTP API for medledger."""
