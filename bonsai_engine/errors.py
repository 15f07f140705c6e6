"""Rule violations raised by the Bonsai engine.

Every action validates its preconditions before touching the match state, so
catching one of these means nothing was changed and the caller may retry with
corrected input.
"""
from __future__ import annotations


class BonsaiRuleError(RuntimeError):
    """Base class for every rule violation reported by the engine."""


class NoGameInProgress(BonsaiRuleError):
    """Raised when an operation needs a running match and there is none."""


class PhaseViolation(BonsaiRuleError):
    """Raised when a caller attempts to act outside of the current phase."""


class OwnershipViolation(BonsaiRuleError):
    """Raised when a tile, card slot or tree cell is not available to the active player."""


class BudgetExceeded(BonsaiRuleError):
    """Raised when the growth budget does not allow another tile of that kind."""


class AdjacencyViolation(BonsaiRuleError):
    """Raised when a tile would break the placement rules of the tree."""


class NonMinimalRemoval(BonsaiRuleError):
    """Raised when a smaller removal would already unblock the tree."""


class IneffectiveRemoval(BonsaiRuleError):
    """Raised when removing the given tiles does not restore a wood placement."""


class InvalidTileChoice(BonsaiRuleError):
    """Raised when the chosen tile kind is not offered by the pending choice."""


class GoalNotReachable(BonsaiRuleError):
    """Raised for goals that are not in the pool or not met by the tree."""


class GoalAlreadyResolved(BonsaiRuleError):
    """Raised for goals the player already claimed or renounced."""


class CapacityStillExceeded(BonsaiRuleError):
    """Raised when a discard leaves the storage above its capacity."""


__all__ = [
    "AdjacencyViolation",
    "BonsaiRuleError",
    "BudgetExceeded",
    "CapacityStillExceeded",
    "GoalAlreadyResolved",
    "GoalNotReachable",
    "IneffectiveRemoval",
    "InvalidTileChoice",
    "NoGameInProgress",
    "NonMinimalRemoval",
    "OwnershipViolation",
    "PhaseViolation",
]
