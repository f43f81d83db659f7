"""
Soroban - transaction lifecycle for contract calls.

Provides the JSON-RPC transport, the immutable Envelope and its lifecycle
steps (assemble, simulate, sign, submit, poll), and ContractClient, which
ties them together for business code.

Uses httpx for JSON-RPC and stellar-sdk for XDR, transaction building and
ed25519 signing.
"""
