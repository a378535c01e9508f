# backend/rpgvault/validation/catalog.py
# 룰셋 스키마 최소 형태 검사용 메타 스키마 + 기본 RPG 콘텐츠 스키마
from __future__ import annotations
import copy
from typing import Any, Dict

RULESET_META_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": ["object"]},
        "properties": {"type": "object"},
        "required": {"type": "array", "items": {"type": "string"}},
        "additionalProperties": {"type": "boolean"},
    },
    "required": ["type"],
    "additionalProperties": True,
}

MAGIC_SCHOOLS = [
    "Abjuration",
    "Conjuration",
    "Divination",
    "Enchantment",
    "Evocation",
    "Illusion",
    "Necromancy",
    "Transmutation",
]

CREATURE_SIZES = ["Tiny", "Small", "Medium", "Large", "Huge", "Gargantuan"]

ITEM_RARITIES = ["Common", "Uncommon", "Rare", "Very Rare", "Legendary", "Artifact"]

ABILITIES = ["strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma"]

_SPELL = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "level": {"type": "number", "minimum": 0, "maximum": 9},
        "school": {"type": "string", "enum": MAGIC_SCHOOLS},
        "castingTime": {"type": "string"},
        "range": {"type": "string"},
        "duration": {"type": "string"},
        "description": {"type": "string"},
    },
    "required": ["name", "level", "school"],
}

_MONSTER = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "type": {"type": "string"},
        "size": {"type": "string", "enum": CREATURE_SIZES},
        "hitPoints": {"type": "number", "minimum": 1},
        "armorClass": {"type": "number", "minimum": 1},
        "abilities": {
            "type": "object",
            "properties": {a: {"type": "number", "minimum": 1, "maximum": 30} for a in ABILITIES},
            "required": ABILITIES,
        },
    },
    "required": ["name", "type", "size", "hitPoints", "armorClass", "abilities"],
}

_ITEM = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "type": {"type": "string"},
        "rarity": {"type": "string", "enum": ITEM_RARITIES},
        "weight": {"type": "number", "minimum": 0},
        "value": {"type": "number", "minimum": 0},
        "description": {"type": "string"},
    },
    "required": ["name", "type"],
}

_COMMON = {"spell": _SPELL, "monster": _MONSTER, "item": _ITEM}


def common_schemas() -> Dict[str, Dict[str, Any]]:
    # 호출자가 고쳐도 원본은 그대로
    return copy.deepcopy(_COMMON)
