"""
Catalog Validation - Consistency checks for game data.

Validates that:
1. Starter deck entries reference known zero-cost cards
2. References are valid (reward card ids)
3. Tiers start at 1 and are contiguous
4. Numeric fields are in range
"""

from __future__ import annotations
from dataclasses import dataclass

from .abilities import RewardType
from .models import Catalog, CardDef, ObjectiveDef


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(catalog: Catalog, raise_on_error: bool = False) -> ValidationResult:
    """
    Validate a complete catalog.

    Returns ValidationResult with errors and warnings.
    Raises CatalogValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    card_ids = set(catalog.cards)

    for card in catalog.cards.values():
        errors.extend(_validate_card(card))

    for objective in catalog.objectives.values():
        errors.extend(_validate_objective(objective, card_ids))

    # Starter deck
    if not catalog.starter_deck:
        errors.append("Starter deck is empty")
    for card_id in sorted(set(catalog.starter_deck)):
        card = catalog.get_card(card_id)
        if card is None:
            errors.append(f"Starter deck references unknown card '{card_id}'")
        elif not card.is_starter:
            errors.append(f"Starter card '{card_id}' must cost 0 (costs {card.cost})")

    # Tiers
    tiers = sorted(catalog.objectives_by_tier())
    if tiers:
        expected = list(range(1, len(tiers) + 1))
        if tiers != expected:
            errors.append(f"Objective tiers must be contiguous from 1, got {tiers}")
    else:
        warnings.append("No construction objectives defined - game ends on the first turn")

    # Market
    if not any(card.copies > 0 for card in catalog.market_cards()):
        warnings.append("Market pool is empty - trade row will stay empty")
    for card in catalog.cards.values():
        if card.is_starter and card.copies:
            warnings.append(f"Starter card '{card.id}' has copies set; starters never enter the market")

    return _finish(errors, warnings, raise_on_error)


def _validate_card(card: CardDef) -> list[str]:
    """Validate a single card definition."""
    errors = []
    if not card.id:
        errors.append("Card has empty ID")
    if not card.name:
        errors.append(f"Card '{card.id}' has empty name")
    for field_name in ("cost", "attack", "defense", "resources", "vp", "copies"):
        if getattr(card, field_name) < 0:
            errors.append(f"Card '{card.id}' has negative {field_name}")
    return errors


def _validate_objective(objective: ObjectiveDef, card_ids: set[str]) -> list[str]:
    """Validate a single objective definition."""
    errors = []
    if not objective.name:
        errors.append(f"Objective '{objective.id}' has empty name")
    if objective.tier < 1:
        errors.append(f"Objective '{objective.id}' has tier {objective.tier} (must be >= 1)")
    if objective.ants_required < 1:
        errors.append(f"Objective '{objective.id}' requires {objective.ants_required} ants (must be >= 1)")
    if objective.vp < 0:
        errors.append(f"Objective '{objective.id}' has negative vp")

    reward = objective.reward
    if reward and reward.reward_type == RewardType.CARD and reward.card_id not in card_ids:
        errors.append(f"Objective '{objective.id}' rewards unknown card '{reward.card_id}'")
    return errors


def _finish(errors: list[str], warnings: list[str], raise_on_error: bool) -> ValidationResult:
    if errors and raise_on_error:
        raise CatalogValidationError(errors)
    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )
