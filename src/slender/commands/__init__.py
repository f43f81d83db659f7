"""
Commands - CLI command implementations for the Slender client.

Each module corresponds to a top-level CLI command:
- call:     Invoke a contract method in a signed transaction
- query:    Read a contract method's result by simulation only
- register: Create (or reuse) an identity and fund it via friendbot
- storage:  Dump a contract's instance storage
- health:   Check the RPC endpoint
- budget:   Inspect recorded budget snapshots
"""
