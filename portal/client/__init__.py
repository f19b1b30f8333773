"""Client-side editing of achievement lists."""

from portal.client.draft import (
    CommitFailure,
    CommitOperation,
    CommitResult,
    CommitSuccess,
    DraftItem,
    DraftKey,
    DraftReconciler,
    PersistedKey,
    StagedImage,
)
from portal.client.transport import HttpAchievementTransport, IAchievementTransport, TransportError

__all__ = [
    "CommitFailure",
    "CommitOperation",
    "CommitResult",
    "CommitSuccess",
    "DraftItem",
    "DraftKey",
    "DraftReconciler",
    "HttpAchievementTransport",
    "IAchievementTransport",
    "PersistedKey",
    "StagedImage",
    "TransportError",
]
