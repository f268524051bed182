from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """
    Base for every error the gateway reports to a caller.

    `code` is the stable machine-readable kind, `status_code` the HTTP status
    the API layer answers with. Subclasses only override the class attributes.
    """

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


# client input (detected before any chain-mutating call)

class InvalidAddress(GatewayError):
    code = "INVALID_ADDRESS"
    status_code = 400
    default_message = "Address is not a well-formed display address"


class InvalidToken(GatewayError):
    code = "INVALID_TOKEN"
    status_code = 401
    default_message = "Token is not valid for this user"


class InvalidAddressOwner(GatewayError):
    code = "INVALID_ADDRESS_OWNER"
    status_code = 403
    default_message = "Address is not the one registered for this user"


class UserExists(GatewayError):
    code = "USER_EXISTS"
    status_code = 409
    default_message = "Address is already registered"


class RegistrationPending(GatewayError):
    code = "REGISTRATION_PENDING"
    status_code = 409
    default_message = "A registration for this user is still awaiting confirmation"


class AlreadyInitialized(GatewayError):
    code = "ALREADY_INITIALIZED"
    status_code = 409
    default_message = "Rewards contract is already initialized"


# collaborator failures

class ConversionError(GatewayError):
    code = "CONVERSION_ERROR"
    status_code = 502
    default_message = "Node could not convert the address"


class ChainCallError(GatewayError):
    code = "CHAIN_CALL_FAILED"
    status_code = 502
    default_message = "Contract call failed"


class SubmitError(GatewayError):
    code = "SUBMIT_FAILED"
    status_code = 502
    default_message = "Transaction submission failed"


class FeedError(GatewayError):
    code = "FEED_ERROR"
    status_code = 502
    default_message = "Activity feed rejected the event"


class IdentityUnavailable(GatewayError):
    code = "IDENTITY_UNAVAILABLE"
    status_code = 502
    default_message = "Identity verifier is unavailable"
