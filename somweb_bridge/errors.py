"""Exception types raised by the SOMweb device client."""


class SomwebError(Exception):
    """Base class for every error raised while talking to the gateway."""


class AuthError(SomwebError):
    """Login failed: transport error, or no webtoken on the returned page."""


class QueryError(SomwebError):
    """The door status request failed or returned an unusable body."""


class DoorNotFoundError(QueryError):
    """A door id is not part of the status snapshot (strict mode only)."""

    def __init__(self, door: str) -> None:
        super().__init__(f"door {door!r} is not reported by the gateway")
        self.door = door


class CommandError(SomwebError):
    """The door command request failed at the transport level."""
