"""Hex keypair borrowed by the signer for a single operation."""

from __future__ import annotations

from dataclasses import dataclass, field

from ._validation import validate_hex
from .constants import PUBKEY_BYTES


@dataclass(frozen=True, slots=True)
class Keypair:
    """Public key plus optional private key, both lowercase hex.

    ``privkey`` is ``None`` for public-key-only (read-only) identities.
    It is excluded from ``repr`` and equality so it never shows up in logs
    or test failure output.

    Note:
        Only the public key format is validated here. A malformed private
        key is reported by the signer as a
        [SigningError][nostrfeed.core.exceptions.SigningError] when it is
        actually used.
    """

    pubkey: str
    privkey: str | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        validate_hex(self.pubkey, "pubkey", nbytes=PUBKEY_BYTES)
        if self.privkey is not None and not isinstance(self.privkey, str):
            raise TypeError(f"privkey must be a str, got {type(self.privkey).__name__}")

    @property
    def read_only(self) -> bool:
        """Whether this keypair is unable to sign."""
        return not self.privkey
