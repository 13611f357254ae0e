from .identity_service import (
    REGISTER_DECISIONS,
    UPDATE_DECISIONS,
    IdentityResolutionEngine,
    RegisterOutcome,
    Resolution,
    UpdateOutcome,
    decide,
)
from .listing_service import ListingAggregator
from .user_service import UserDirectoryService

__all__ = [
    "REGISTER_DECISIONS",
    "UPDATE_DECISIONS",
    "IdentityResolutionEngine",
    "ListingAggregator",
    "RegisterOutcome",
    "Resolution",
    "UpdateOutcome",
    "UserDirectoryService",
    "decide",
]
