"""
Ability and Reward DSL - Typed card abilities and objective rewards.

Card data stores abilities as lightweight tag strings ("draw", "scout:3").
Tags are parsed exactly once, when the catalog is loaded, into Ability
values; the engine never looks at the raw strings again.

Accepted tag forms:
- "name"      -> Ability(name, count=1)
- "name:N"    -> Ability(name, count=N)
- "name_N"    -> Ability(name, count=N)

Objective rewards are a closed set of typed payloads (RewardType) matched
exhaustively when an objective completes.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any
import re


class CatalogError(ValueError):
    """Raised when catalog data cannot be parsed into definitions."""


class AbilityKind(Enum):
    """Recognized card ability tags."""
    DRAW = "draw"
    RESOURCES = "resources"
    HEAL = "heal"
    SCOUT = "scout"
    SABOTAGE = "sabotage"
    TRASH = "trash"
    STEAL = "steal"  # Attack-triggered: target discards
    RETURN = "return"  # Ant goes back to discard when its objective scores


# Abilities that pause the command and wait for a player choice
INTERACTIVE_KINDS = frozenset({
    AbilityKind.SCOUT,
    AbilityKind.SABOTAGE,
    AbilityKind.TRASH,
    AbilityKind.STEAL,
})

_TAG_PATTERN = re.compile(r"^(?P<name>[a-z]+)(?:[:_](?P<count>\d+))?$")


@dataclass(frozen=True)
class Ability:
    """A parsed ability tag with its repeat count."""
    kind: AbilityKind
    count: int = 1

    @property
    def is_interactive(self) -> bool:
        return self.kind in INTERACTIVE_KINDS

    def to_tag(self) -> str:
        """Render back to the catalog tag form."""
        if self.count == 1:
            return self.kind.value
        return f"{self.kind.value}:{self.count}"


def parse_ability_tag(tag: str) -> Ability:
    """
    Parse a single ability tag.

    Raises CatalogError for unknown names or malformed counts.
    """
    if not isinstance(tag, str):
        raise CatalogError(f"Ability tag must be a string, got {type(tag).__name__}")

    match = _TAG_PATTERN.match(tag.strip().lower())
    if not match:
        raise CatalogError(f"Malformed ability tag: {tag!r}")

    name = match.group("name")
    try:
        kind = AbilityKind(name)
    except ValueError:
        raise CatalogError(f"Unknown ability tag: {tag!r}") from None

    count = int(match.group("count")) if match.group("count") else 1
    if count < 1:
        raise CatalogError(f"Ability count must be positive: {tag!r}")

    return Ability(kind=kind, count=count)


def parse_ability_tags(tags: list[str] | None) -> tuple[Ability, ...]:
    """Parse a card's tag list, preserving order."""
    return tuple(parse_ability_tag(tag) for tag in tags or [])


class RewardType(Enum):
    """Objective reward payload types."""
    RESOURCES = "resources"
    DRAW = "draw"
    CARD = "card"
    VP_MULTIPLIER = "vp_multiplier"
    DEFENSE = "defense"
    RESOURCES_PER_TURN = "resources_per_turn"
    INSTANT_WIN = "instant_win"
    VP_BONUS = "vp_bonus"


@dataclass(frozen=True)
class Reward:
    """
    Reward granted when an objective is scored.

    Only CARD uses card_id; INSTANT_WIN ignores amount.
    """
    reward_type: RewardType
    amount: int = 0
    card_id: str | None = None

    def describe(self) -> str:
        """Human-readable summary for the activity feed."""
        if self.reward_type == RewardType.CARD:
            return f"gain card {self.card_id}"
        if self.reward_type == RewardType.INSTANT_WIN:
            return "instant win"
        label = self.reward_type.value.replace("_", " ")
        return f"+{self.amount} {label}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.reward_type.value, "amount": self.amount}
        if self.card_id is not None:
            data["cardId"] = self.card_id
        return data


def parse_reward(data: dict[str, Any] | None) -> Reward | None:
    """Parse a reward payload dict ({"type": ..., "amount": ..., "cardId": ...})."""
    if not data:
        return None

    raw_type = data.get("type")
    try:
        reward_type = RewardType(raw_type)
    except ValueError:
        raise CatalogError(f"Unknown reward type: {raw_type!r}") from None

    card_id = data.get("cardId", data.get("card_id"))
    if reward_type == RewardType.CARD and not card_id:
        raise CatalogError("Card reward requires a cardId")

    amount = data.get("amount", 0) or 0
    if not isinstance(amount, int) or amount < 0:
        raise CatalogError(f"Reward amount must be a non-negative integer: {amount!r}")

    return Reward(reward_type=reward_type, amount=amount, card_id=card_id)
