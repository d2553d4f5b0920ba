"""Key management and the transport contract.

The utils layer depends on [nostrfeed.models][nostrfeed.models] and the
error types of [nostrfeed.core][nostrfeed.core]; it never imports
``nostrfeed.nips`` or ``nostrfeed.feed``.

Attributes:
    keys: Key loading from environment variables (nsec1 bech32 or hex)
        with Pydantic validation, and the
        [Identity][nostrfeed.utils.keys.Identity] service that lends a
        keypair to the signer.
    transport: The [Transport][nostrfeed.utils.transport.Transport]
        protocol the feed engine consumes, response folding, and request
        payload builders.
"""
