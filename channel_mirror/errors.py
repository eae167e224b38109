"""Exception types shared across the mirror engine."""


class MirrorError(Exception):
    """Base class for channel mirror errors."""


class ConfigError(MirrorError):
    """Required configuration is missing or malformed."""


class PairingConflictError(MirrorError, ValueError):
    """A thread is already paired with a different partner."""

    def __init__(self, thread_id: int, existing_partner: int):
        super().__init__(f"thread {thread_id} already paired with {existing_partner}")
        self.thread_id = thread_id
        self.existing_partner = existing_partner


class DeliveryError(MirrorError):
    """The delivery collaborator could not post a relayed message."""
