"""Error types and reason codes for the media catalog."""

from enum import Enum


class RejectReason(str, Enum):
    """Why a candidate never entered staging."""

    UNSUPPORTED_TYPE = "UnsupportedType"
    TOO_LARGE = "TooLarge"


# Reason recorded on a staging entry removed by the user.
CANCELLED = "Cancelled"


class CatalogError(Exception):
    """Base class for catalog invariant violations."""


class DuplicateIdError(CatalogError):
    """An entry with the same id is already catalogued."""

    def __init__(self, entry_id: str):
        super().__init__(f"Entry '{entry_id}' is already in the catalog")
        self.entry_id = entry_id


class StagingError(Exception):
    """A staging entry could not be brought to the ready state."""


class TransferError(StagingError):
    """The transport gave up on a transfer."""


class MaterializationError(StagingError):
    """Content bytes could not be turned into a content reference."""
