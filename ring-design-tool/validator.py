"""
構成チェック - 診断用の 3 項目 (互いに独立)

失敗しても生成は止めない。呼び出し側がエクスポート可否などを判断する。
"""

from dataclasses import dataclass, field
from typing import List

from catalog import is_stone_key, is_zodiac_key
from slot_layout import SLOT_COUNT
from slots import MAX_TEXT_LENGTH, BandParameters, GemSlot, TextSlot, ZodiacSlot


@dataclass(frozen=True)
class Diagnostics:
    twelve_slots: bool
    geometry_valid: bool
    slots_valid: bool
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.twelve_slots and self.geometry_valid and self.slots_valid

    def to_dict(self) -> dict:
        return {
            "twelve_slots": self.twelve_slots,
            "geometry_valid": self.geometry_valid,
            "slots_valid": self.slots_valid,
            "issues": list(self.issues),
        }


def validate(params: BandParameters, slots) -> Diagnostics:
    issues = []

    twelve_slots = len(slots) == SLOT_COUNT
    if not twelve_slots:
        issues.append(f"expected {SLOT_COUNT} slots, got {len(slots)}")

    geometry_valid = (
        params.outer_radius > params.inner_radius
        and params.inner_diameter > 0
        and params.band_height > 0
    )
    if not geometry_valid:
        issues.append(
            "band geometry invalid: "
            f"inner_diameter={params.inner_diameter} band_width={params.band_width} "
            f"band_height={params.band_height}"
        )

    slots_valid = True
    for i, slot in enumerate(slots):
        problem = _slot_problem(slot)
        if problem:
            slots_valid = False
            issues.append(f"slot {i}: {problem}")

    return Diagnostics(
        twelve_slots=twelve_slots,
        geometry_valid=geometry_valid,
        slots_valid=slots_valid,
        issues=issues,
    )


def _slot_problem(slot) -> str:
    if isinstance(slot, ZodiacSlot):
        return "" if is_zodiac_key(slot.sign) else f"unknown zodiac sign {slot.sign!r}"
    elif isinstance(slot, GemSlot):
        return "" if is_stone_key(slot.stone) else f"unknown stone {slot.stone!r}"
    elif isinstance(slot, TextSlot):
        if len(slot.text) > MAX_TEXT_LENGTH:
            return f"text longer than {MAX_TEXT_LENGTH} characters"
        return ""
    return f"unsupported slot {slot!r}"
