from __future__ import annotations

import logging

from gateway.chain.address import AddressCodec
from gateway.chain.contracts import Contract
from gateway.core.errors import InvalidAddress, InvalidAddressOwner, InvalidToken
from gateway.services.identity import IdentityVerifier


log = logging.getLogger(__name__)


class OwnershipVerifier:
    """
    Gate in front of every mutating operation.

    Stage order is fixed: syntax (no I/O) -> token -> conversion -> registry
    lookup. Each stage raises and stops the pipeline.
    """

    def __init__(self, *, codec: AddressCodec, identity: IdentityVerifier, users: Contract):
        self._codec = codec
        self._identity = identity
        self._users = users

    async def authenticate(self, identity: str, token: str, display_address: str) -> str:
        """Stages 1-3. Returns the canonical form of `display_address`."""
        if not self._codec.validate_display_form(display_address):
            raise InvalidAddress(details={"address": display_address})

        if not identity or not token or not await self._identity.verify_token(identity, token):
            raise InvalidToken()

        return await self._codec.to_canonical(display_address)

    async def recorded_address(self, identity: str) -> str:
        (address,) = await self._users.call("getAddressByAccount", [identity])
        return address

    async def verify(self, identity: str, token: str, display_address: str) -> str:
        canonical = await self.authenticate(identity, token, display_address)

        recorded = await self.recorded_address(identity)
        if recorded != canonical:
            log.info("ownership mismatch user=%s claimed=%s recorded=%s", identity, canonical, recorded)
            raise InvalidAddressOwner()

        return canonical
