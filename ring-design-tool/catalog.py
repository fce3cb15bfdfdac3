"""
カタログ - 星座記号と宝石の固定テーブル
"""

import logging

logger = logging.getLogger(__name__)

DEFAULT_IOR = 1.6
PLACEHOLDER_GLYPH = "?"

ZODIAC = [
    {"key": "aries", "glyph": "♈", "label": "Aries"},
    {"key": "taurus", "glyph": "♉", "label": "Taurus"},
    {"key": "gemini", "glyph": "♊", "label": "Gemini"},
    {"key": "cancer", "glyph": "♋", "label": "Cancer"},
    {"key": "leo", "glyph": "♌", "label": "Leo"},
    {"key": "virgo", "glyph": "♍", "label": "Virgo"},
    {"key": "libra", "glyph": "♎", "label": "Libra"},
    {"key": "scorpio", "glyph": "♏", "label": "Scorpio"},
    {"key": "sagittarius", "glyph": "♐", "label": "Sagittarius"},
    {"key": "capricorn", "glyph": "♑", "label": "Capricorn"},
    {"key": "aquarius", "glyph": "♒", "label": "Aquarius"},
    {"key": "pisces", "glyph": "♓", "label": "Pisces"},
]

# 先頭 (diamond) が不明キーのフォールバック
STONES = [
    {"key": "diamond", "label": "Diamond", "hex": "#ffffff", "ior": 2.4},
    {"key": "ruby", "label": "Ruby", "hex": "#E0115F", "ior": 1.77},
    {"key": "sapphire", "label": "Sapphire", "hex": "#0F52BA", "ior": 1.77},
    {"key": "emerald", "label": "Emerald", "hex": "#50C878", "ior": 1.58},
    {"key": "amethyst", "label": "Amethyst", "hex": "#9966CC", "ior": 1.54},
    {"key": "topaz", "label": "Topaz", "hex": "#FFB000", "ior": 1.61},
    {"key": "aquamarine", "label": "Aquamarine", "hex": "#7FFFD4", "ior": 1.58},
    {"key": "garnet", "label": "Garnet", "hex": "#9B111E", "ior": 1.79},
    {"key": "peridot", "label": "Peridot", "hex": "#B4C424", "ior": 1.65},
    {"key": "turquoise", "label": "Turquoise", "hex": "#30D5C8", "ior": 1.61},
    {"key": "citrine", "label": "Citrine", "hex": "#E4B700", "ior": 1.55},
]

ZODIAC_KEYS = tuple(z["key"] for z in ZODIAC)
STONE_KEYS = tuple(s["key"] for s in STONES)

_ZODIAC_BY_KEY = {z["key"]: z for z in ZODIAC}
_STONES_BY_KEY = {s["key"]: s for s in STONES}


def is_zodiac_key(key) -> bool:
    return key in _ZODIAC_BY_KEY


def is_stone_key(key) -> bool:
    return key in _STONES_BY_KEY


def glyph_for(sign_key: str) -> str:
    """星座キーから記号を返す。不明キーはプレースホルダ"""
    entry = _ZODIAC_BY_KEY.get(sign_key)
    if entry is None:
        logger.warning("unknown zodiac sign %r, using placeholder glyph", sign_key)
        return PLACEHOLDER_GLYPH
    return entry["glyph"]


def resolve_stone(stone_key: str) -> dict:
    """
    宝石キーからカタログエントリを返す

    不明キーは先頭エントリ (diamond) にフォールバックする。
    ior が無いエントリには DEFAULT_IOR を補う。
    """
    entry = _STONES_BY_KEY.get(stone_key)
    if entry is None:
        logger.warning("unknown stone %r, falling back to %s", stone_key, STONES[0]["key"])
        entry = STONES[0]
    return {**entry, "ior": float(entry.get("ior", DEFAULT_IOR))}


def get_catalog() -> dict:
    """コントロール画面向けのカタログ一覧"""
    return {
        "zodiac": [dict(z) for z in ZODIAC],
        "stones": [dict(s) for s in STONES],
    }
