"""Game catalog - card and objective definitions, tag parsing, loading and validation."""

from .abilities import (
    Ability,
    AbilityKind,
    CatalogError,
    Reward,
    RewardType,
    parse_ability_tag,
    parse_ability_tags,
    parse_reward,
)
from .models import Catalog, CardDef, ObjectiveDef
from .loader import load_catalog, catalog_from_bundle, catalog_from_documents, catalog_to_bundle
from .validation import validate_catalog, CatalogValidationError, ValidationResult
from .defaults import default_catalog

__all__ = [
    "Ability",
    "AbilityKind",
    "CatalogError",
    "Reward",
    "RewardType",
    "parse_ability_tag",
    "parse_ability_tags",
    "parse_reward",
    "Catalog",
    "CardDef",
    "ObjectiveDef",
    "load_catalog",
    "catalog_from_bundle",
    "catalog_from_documents",
    "catalog_to_bundle",
    "validate_catalog",
    "CatalogValidationError",
    "ValidationResult",
    "default_catalog",
]
