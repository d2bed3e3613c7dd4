"""Domain model for cross-platform content revenue."""

from __future__ import annotations

from .entity import CanonicalEntity, JoinedMetric
from .enums import ChannelKind, MatchBasis, MatchSignal
from .links import ContentLink, NamingProposal, new_link_id
from .records import AssetDescriptor, Descriptor, RawChannelRecord, to_decimal

__all__ = [
    "AssetDescriptor",
    "CanonicalEntity",
    "ChannelKind",
    "ContentLink",
    "Descriptor",
    "JoinedMetric",
    "MatchBasis",
    "MatchSignal",
    "NamingProposal",
    "RawChannelRecord",
    "new_link_id",
    "to_decimal",
]
