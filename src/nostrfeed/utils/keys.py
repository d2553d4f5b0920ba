"""Nostr key management and the active identity.

Loads keys from environment variables (nsec1 bech32 or hex) and wraps them
in an [Identity][nostrfeed.utils.keys.Identity] service that the
[EventFactory][nostrfeed.nips.factory.EventFactory] borrows a keypair from
for each signing operation.

Warning:
    Private keys must **never** be stored in configuration files, source
    code, or logged to any output. Always use environment variables or a
    secure secret store.

Examples:
    ```python
    import os

    os.environ["NOSTR_PRIVATE_KEY"] = "nsec1..."  # pragma: allowlist secret
    identity = Identity.from_config(IdentityConfig())
    identity.pubkey
    ```
"""

from __future__ import annotations

import os
from enum import StrEnum
from typing import Any, Protocol

from nostr_sdk import Keys, NostrSdkError, PublicKey
from pydantic import BaseModel, Field, model_validator

from nostrfeed.core.exceptions import (
    ConfigurationError,
    MissingKeypairError,
    ReadOnlyIdentityError,
)
from nostrfeed.models import Keypair


ENV_PRIVATE_KEY = "NOSTR_PRIVATE_KEY"  # pragma: allowlist secret  # Default env var name


class LoginMethod(StrEnum):
    """How the user signed in: with a private key or a public key only."""

    NSEC = "nsec"
    NPUB = "npub"


def keypair_from_keys(keys: Keys) -> Keypair:
    """Convert ``nostr_sdk.Keys`` to a hex [Keypair][nostrfeed.models.keypair.Keypair]."""
    return Keypair(pubkey=keys.public_key().to_hex(), privkey=keys.secret_key().to_hex())


def parse_public_key(value: str) -> str:
    """Normalise an npub1 or hex public key to lowercase hex.

    Raises:
        ValueError: If *value* is not a valid public key.
    """
    try:
        return PublicKey.parse(value).to_hex()
    except NostrSdkError as e:
        raise ValueError(f"invalid public key: {e}") from e


def load_keys_from_env(env_var: str) -> Keys:
    """Load Nostr keys from an environment variable.

    Raises:
        ValueError: If the environment variable is not set or is empty.
        nostr_sdk.NostrSdkError: If the key value is malformed.
    """
    value = os.getenv(env_var)

    if not value:
        raise ValueError(
            f"{env_var} environment variable is required. Generate one with: openssl rand -hex 32"
        )

    return Keys.parse(value)


class IdentityConfig(BaseModel):
    """Pydantic model describing how to load the active identity.

    ``keys`` is populated from the environment variable named by
    ``keys_env`` when it is set. Without a private key the identity falls
    back to the read-only ``public_key``.

    Warning:
        ``keys`` holds a live private key. Do not serialize this model.
    """

    model_config = {"arbitrary_types_allowed": True}

    keys_env: str = Field(
        default=ENV_PRIVATE_KEY,
        min_length=1,
        description="Environment variable name for the private key",
    )
    keys: Keys | None = Field(default=None, description="Keys loaded from keys_env", repr=False)
    public_key: str | None = Field(
        default=None, description="npub or hex key for read-only sessions"
    )
    relays: list[str] = Field(default_factory=list, description="User relay URLs")

    @model_validator(mode="before")
    @classmethod
    def _load_keys_from_env(cls, data: Any) -> Any:
        """Auto-populate ``keys`` from the environment variable when present."""
        if isinstance(data, dict) and data.get("keys") is None:
            env_var = data.get("keys_env", ENV_PRIVATE_KEY)
            if os.getenv(env_var):
                data = {**data, "keys": load_keys_from_env(env_var)}
        return data


class IdentityProvider(Protocol):
    """What the event pipeline needs from the session's identity."""

    @property
    def pubkey(self) -> str: ...

    @property
    def relays(self) -> list[str]: ...

    def signing_keypair(self) -> Keypair: ...


class Identity:
    """The signed-in user.

    Holds the user's [Keypair][nostrfeed.models.keypair.Keypair] and lends
    it to one signing call at a time through
    [signing_keypair()][nostrfeed.utils.keys.Identity.signing_keypair].
    Public-key-only sessions refuse every private-key operation.

    A freshly generated account (``is_new_user``) may sign regardless of the
    recorded login method, so onboarding can publish its first profile and
    contact list.
    """

    def __init__(
        self,
        keypair: Keypair | None = None,
        *,
        login_method: LoginMethod | None = None,
        is_new_user: bool = False,
        relays: list[str] | None = None,
    ) -> None:
        self._keypair = keypair
        if login_method is None:
            login_method = (
                LoginMethod.NSEC if keypair is not None and not keypair.read_only else LoginMethod.NPUB
            )
        self._login_method = login_method
        self._is_new_user = is_new_user
        self._relays = list(relays or [])

    def __repr__(self) -> str:
        pubkey = self._keypair.pubkey[:12] if self._keypair else None
        return f"Identity(pubkey={pubkey!r}, login_method={self._login_method.value!r})"

    @classmethod
    def generate(cls, *, relays: list[str] | None = None) -> Identity:
        """Create a brand new account."""
        return cls(keypair_from_keys(Keys.generate()), is_new_user=True, relays=relays)

    @classmethod
    def from_private_key(cls, value: str, *, relays: list[str] | None = None) -> Identity:
        """Sign in with an nsec1 or hex private key.

        Raises:
            ValueError: If the key is malformed.
        """
        try:
            keys = Keys.parse(value)
        except NostrSdkError as e:
            raise ValueError("invalid private key") from e
        return cls(keypair_from_keys(keys), relays=relays)

    @classmethod
    def from_public_key(cls, value: str, *, relays: list[str] | None = None) -> Identity:
        """Sign in read-only with an npub1 or hex public key."""
        return cls(Keypair(pubkey=parse_public_key(value)), relays=relays)

    @classmethod
    def from_config(cls, config: IdentityConfig) -> Identity:
        """Build the identity described by an [IdentityConfig][nostrfeed.utils.keys.IdentityConfig].

        Raises:
            ConfigurationError: If neither a private nor a public key is
                configured, or the public key is invalid.
        """
        if config.keys is not None:
            return cls(keypair_from_keys(config.keys), relays=config.relays)
        if config.public_key:
            try:
                return cls.from_public_key(config.public_key, relays=config.relays)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
        raise ConfigurationError(
            f"no identity configured: set {config.keys_env} or public_key"
        )

    @property
    def pubkey(self) -> str:
        """Hex public key, or an empty string when signed out."""
        return self._keypair.pubkey if self._keypair else ""

    @property
    def login_method(self) -> LoginMethod:
        return self._login_method

    @property
    def is_new_user(self) -> bool:
        return self._is_new_user

    @property
    def read_only(self) -> bool:
        return self._keypair is None or self._keypair.read_only

    @property
    def relays(self) -> list[str]:
        return list(self._relays)

    def set_relays(self, relays: list[str]) -> None:
        self._relays = list(relays)

    def sign_out(self) -> None:
        self._keypair = None
        self._is_new_user = False

    def signing_keypair(self) -> Keypair:
        """Lend the keypair for one signing operation.

        Raises:
            MissingKeypairError: If nobody is signed in.
            ReadOnlyIdentityError: If the session has no private key.
        """
        if self._keypair is None:
            raise MissingKeypairError("no keypair available")
        if not self._is_new_user and self._login_method != LoginMethod.NSEC:
            raise ReadOnlyIdentityError("identity signed in with a public key only")
        if self._keypair.read_only:
            raise ReadOnlyIdentityError("identity has no private key")
        return self._keypair
