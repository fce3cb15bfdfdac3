"""
デザイン入力 - リングパラメータと 12 スロットの構成

コントロール画面からは dict (JSON) で届くので、ここで値オブジェクトに変換する。
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from catalog import STONE_KEYS, ZODIAC_KEYS
from errors import MalformedSlotConfigurationError, RingDesignError
from slot_layout import SLOT_COUNT

MAX_TEXT_LENGTH = 6
MIN_CURVE_SEGMENTS = 64
MAX_CURVE_SEGMENTS = 512
DEFAULT_CURVE_SEGMENTS = 128

# ベベル寸法 (mm の上限と高さ/幅に対する比率)
BEVEL_THICKNESS_MAX = 0.35
BEVEL_THICKNESS_RATIO = 0.22
BEVEL_SIZE_MAX = 0.6
BEVEL_SIZE_RATIO = 0.12


@dataclass(frozen=True)
class ZodiacSlot:
    sign: str
    kind = "zodiac"


@dataclass(frozen=True)
class GemSlot:
    stone: str
    kind = "stone"


@dataclass(frozen=True)
class TextSlot:
    text: str
    kind = "text"


Slot = Union[ZodiacSlot, GemSlot, TextSlot]


@dataclass(frozen=True)
class BandParameters:
    """
    リングのデザインパラメータ (単位 mm)

    inner_diameter: 内径
    band_width: 半径方向の幅
    band_height: 軸方向の高さ
    mark_size: 刻印・宝石の基準サイズ
    inside: True なら内側に配置
    metal_color / mark_color: 地金と刻印の色
    curve_segments: 円周の分割数 (64 以上 512 以下に丸める)
    """

    inner_diameter: float = 18.0
    band_width: float = 3.0
    band_height: float = 2.2
    mark_size: float = 2.6
    inside: bool = False
    metal_color: str = "#d4af37"
    mark_color: str = "#3b3b3b"
    curve_segments: int = DEFAULT_CURVE_SEGMENTS

    @property
    def inner_radius(self) -> float:
        return self.inner_diameter / 2

    @property
    def outer_radius(self) -> float:
        return self.inner_radius + self.band_width

    @property
    def bevel_thickness(self) -> float:
        return max(0.0, min(BEVEL_THICKNESS_MAX, self.band_height * BEVEL_THICKNESS_RATIO))

    @property
    def bevel_size(self) -> float:
        return max(0.0, min(BEVEL_SIZE_MAX, self.band_width * BEVEL_SIZE_RATIO))

    @property
    def segments(self) -> int:
        return min(MAX_CURVE_SEGMENTS, max(MIN_CURVE_SEGMENTS, int(self.curve_segments)))


def default_slots() -> Tuple[Slot, ...]:
    """初期構成: 星座を順番に 12 個 (スロット 0 = aries)"""
    return tuple(ZodiacSlot(ZODIAC_KEYS[i % len(ZODIAC_KEYS)]) for i in range(SLOT_COUNT))


def default_slot_for_kind(kind: str) -> Slot:
    """種別切り替え時の初期値"""
    if kind == "zodiac":
        return ZodiacSlot(ZODIAC_KEYS[0])
    elif kind in ("stone", "gem"):
        return GemSlot(STONE_KEYS[0])
    elif kind == "text":
        return TextSlot("AB")
    raise MalformedSlotConfigurationError(f"unknown slot kind: {kind!r}")


def with_slot(slots, index: int, slot: Slot) -> Tuple[Slot, ...]:
    """1 スロットだけ差し替えた新しい構成を返す (元の構成は変更しない)"""
    if not 0 <= index < len(slots):
        raise MalformedSlotConfigurationError(f"slot index out of range: {index}")
    return tuple(slot if i == index else s for i, s in enumerate(slots))


def slot_from_dict(data: dict) -> Slot:
    """
    {"kind": ..., "value": ...} 形式の dict を Slot に変換する

    不明なカタログキーや 7 文字以上のテキストはここでは弾かない
    (検証器で診断として報告する)。
    """
    if not isinstance(data, dict):
        raise MalformedSlotConfigurationError(f"slot must be an object, got {type(data).__name__}")

    kind = str(data.get("kind", "")).lower()
    if "value" not in data:
        return default_slot_for_kind(kind)

    value = data["value"]
    if not isinstance(value, str):
        raise MalformedSlotConfigurationError(f"slot value must be a string, got {value!r}")

    if kind == "zodiac":
        return ZodiacSlot(value)
    elif kind in ("stone", "gem"):
        return GemSlot(value)
    elif kind == "text":
        return TextSlot(value)
    raise MalformedSlotConfigurationError(f"unknown slot kind: {kind!r}")


def slot_to_dict(slot: Slot) -> dict:
    if isinstance(slot, ZodiacSlot):
        return {"kind": "zodiac", "value": slot.sign}
    elif isinstance(slot, GemSlot):
        return {"kind": "stone", "value": slot.stone}
    elif isinstance(slot, TextSlot):
        return {"kind": "text", "value": slot.text}
    raise TypeError(f"not a slot: {slot!r}")


def slots_from_list(items) -> Tuple[Slot, ...]:
    """個数はここでは検査しない (検証器の twelve_slots で報告する)"""
    if not isinstance(items, (list, tuple)):
        raise MalformedSlotConfigurationError("slots must be a list")
    return tuple(slot_from_dict(item) for item in items)


def params_from_dict(data: Optional[dict]) -> BandParameters:
    """dict からパラメータを作る。未指定の項目は既定値"""
    data = data or {}
    defaults = BandParameters()
    try:
        return replace(
            defaults,
            inner_diameter=float(data.get("inner_diameter", defaults.inner_diameter)),
            band_width=float(data.get("band_width", defaults.band_width)),
            band_height=float(data.get("band_height", defaults.band_height)),
            mark_size=float(data.get("mark_size", defaults.mark_size)),
            inside=_parse_flag(data.get("inside", defaults.inside)),
            metal_color=str(data.get("metal_color", defaults.metal_color)),
            mark_color=str(data.get("mark_color", defaults.mark_color)),
            curve_segments=int(data.get("curve_segments", defaults.curve_segments)),
        )
    except (TypeError, ValueError) as e:
        raise RingDesignError(f"invalid parameter value: {e}") from e


_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off", "")


def _parse_flag(value) -> bool:
    """真偽値フラグ。文字列 "false" などを True にしないよう明示的に解釈する"""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"not a boolean flag: {value!r}")
