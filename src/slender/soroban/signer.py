"""
Signer - attach an ed25519 signature to a simulated Envelope.

Any object following the ``stellar_sdk.Keypair`` contract can sign; the
Keypair itself is the usual choice. Ed25519 is deterministic, so signing the
same Envelope with the same key twice yields the same signed XDR.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Protocol

from stellar_sdk import DecoratedSignature

from .envelope import Envelope, to_transaction_envelope

logger = logging.getLogger(__name__)


class Signer(Protocol):
    @property
    def public_key(self) -> str:
        ...

    def signature_hint(self) -> bytes:
        ...

    def sign(self, data: bytes) -> bytes:
        ...


def sign(envelope: Envelope, signer: Signer) -> Envelope:
    """
    Sign a resource-annotated Envelope.

    Raises:
        ValueError: If the Envelope is not simulated, already signed, or the
            signer is not the Envelope's source account
    """
    if not envelope.is_simulated:
        raise ValueError("Envelope must be simulated before signing")
    if envelope.is_signed:
        raise ValueError("Envelope is already signed")
    if signer.public_key != envelope.source:
        raise ValueError(f"Signer {signer.public_key} is not the source account {envelope.source}")

    tx_envelope = to_transaction_envelope(envelope)
    signature = signer.sign(tx_envelope.hash())
    tx_envelope.signatures.append(DecoratedSignature(signer.signature_hint(), signature))

    tx_hash = tx_envelope.hash_hex()
    logger.debug("signed %s as %s", envelope.describe(), tx_hash)
    return replace(envelope, signed_xdr=tx_envelope.to_xdr(), tx_hash=tx_hash)
