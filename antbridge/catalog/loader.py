"""
Catalog Loader - Parse JSON game data into catalog definitions.

The game data ships as three documents, mirroring the web client's data
files:
- cards:        {"ants": [{id, name, type, cost, attack, defense, resources,
                           vp, abilities, copies}, ...]}
- construction: {"objectives": [{id, name, tier, antsRequired, vp, reward}, ...]}
- starter deck: {"starterDeck": ["worker_ant", ...]}

or as a single bundle with all three top-level keys. Documents are validated
with Pydantic models, then converted to frozen definitions.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Optional
import json
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .abilities import CatalogError, parse_ability_tags, parse_reward
from .models import Catalog, CardDef, ObjectiveDef

logger = logging.getLogger(__name__)


class CardDocument(BaseModel):
    """One entry of the cards document."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str
    type: str = "ant"
    cost: int = Field(0, ge=0)
    attack: int = Field(0, ge=0)
    defense: int = Field(0, ge=0)
    resources: int = Field(0, ge=0)
    vp: int = Field(0, ge=0)
    abilities: list[str] = Field(default_factory=list)
    copies: int = Field(0, ge=0)
    description: str = ""

    def to_definition(self) -> CardDef:
        """Convert to a CardDef, parsing ability tags."""
        try:
            abilities = parse_ability_tags(self.abilities)
        except CatalogError as e:
            raise CatalogError(f"Card '{self.id}': {e}") from e
        return CardDef(
            id=self.id,
            name=self.name,
            type=self.type,
            cost=self.cost,
            attack=self.attack,
            defense=self.defense,
            resources=self.resources,
            vp=self.vp,
            abilities=abilities,
            copies=self.copies,
            description=self.description,
        )


class ObjectiveDocument(BaseModel):
    """One entry of the construction document."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str
    tier: int = Field(1, ge=1)
    ants_required: int = Field(1, ge=1, alias="antsRequired")
    vp: int = Field(0, ge=0)
    reward: Optional[dict[str, Any]] = None
    description: str = ""

    def to_definition(self) -> ObjectiveDef:
        """Convert to an ObjectiveDef, parsing the reward payload."""
        try:
            reward = parse_reward(self.reward)
        except CatalogError as e:
            raise CatalogError(f"Objective '{self.id}': {e}") from e
        return ObjectiveDef(
            id=self.id,
            name=self.name,
            tier=self.tier,
            ants_required=self.ants_required,
            vp=self.vp,
            reward=reward,
            description=self.description,
        )


class CatalogBundle(BaseModel):
    """All three documents in one."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = "Ant Bridge"
    ants: list[CardDocument] = Field(default_factory=list)
    objectives: list[ObjectiveDocument] = Field(default_factory=list)
    starter_deck: list[str] = Field(default_factory=list, alias="starterDeck")


def catalog_from_bundle(data: dict[str, Any]) -> Catalog:
    """Build a catalog from a bundle dict."""
    try:
        bundle = CatalogBundle.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog document: {e}") from e

    catalog = Catalog.from_definitions(
        cards=[doc.to_definition() for doc in bundle.ants],
        objectives=[doc.to_definition() for doc in bundle.objectives],
        starter_deck=bundle.starter_deck,
        name=bundle.name,
    )
    logger.debug(
        "Loaded catalog %s: %d cards, %d objectives, %d starter cards",
        catalog.name, len(catalog.cards), len(catalog.objectives), len(catalog.starter_deck),
    )
    return catalog


def catalog_from_documents(
    cards: dict[str, Any],
    construction: dict[str, Any],
    starter_deck: dict[str, Any],
) -> Catalog:
    """Build a catalog from the three separate documents."""
    return catalog_from_bundle({
        "ants": cards.get("ants", []),
        "objectives": construction.get("objectives", []),
        "starterDeck": starter_deck.get("starterDeck", starter_deck.get("starter_deck", [])),
    })


def load_catalog(path: str | Path) -> Catalog:
    """
    Load a catalog from a JSON bundle file.

    Raises CatalogError if the file is missing or malformed.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise CatalogError(f"Catalog file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog file is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"Catalog file must contain a JSON object: {path}")

    return catalog_from_bundle(data)


def catalog_to_bundle(catalog: Catalog) -> dict[str, Any]:
    """Render a catalog back to the bundle document shape."""
    return {
        "name": catalog.name,
        "ants": [
            {
                "id": card.id,
                "name": card.name,
                "type": card.type,
                "cost": card.cost,
                "attack": card.attack,
                "defense": card.defense,
                "resources": card.resources,
                "vp": card.vp,
                "abilities": [ability.to_tag() for ability in card.abilities],
                "copies": card.copies,
                "description": card.description,
            }
            for card in catalog.cards.values()
        ],
        "objectives": [
            {
                "id": objective.id,
                "name": objective.name,
                "tier": objective.tier,
                "antsRequired": objective.ants_required,
                "vp": objective.vp,
                "reward": objective.reward.to_dict() if objective.reward else None,
                "description": objective.description,
            }
            for objective in catalog.objectives.values()
        ],
        "starterDeck": list(catalog.starter_deck),
    }
