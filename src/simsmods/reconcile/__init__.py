"""Verification and reconciliation of the recorded inventory against disk.

The directory reconciler lives in :mod:`simsmods.reconcile.reconciler`.
"""

from .collisions import CollisionDetector, HashCollision
from .setdiff import SetDiff
from .tags import TagApplyResult, TagDelta, compute_tag_delta, retag_members
from .verification import VerificationReport, verify, verify_directory

__all__ = [
    "CollisionDetector",
    "HashCollision",
    "SetDiff",
    "TagApplyResult",
    "TagDelta",
    "VerificationReport",
    "compute_tag_delta",
    "retag_members",
    "verify",
    "verify_directory",
]
