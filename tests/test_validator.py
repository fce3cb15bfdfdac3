import sys
import unittest
from pathlib import Path

# Allow `import validator` etc. from the repo root.
_TOOL_DIR = Path(__file__).resolve().parents[1] / "ring-design-tool"
if str(_TOOL_DIR) not in sys.path:
    sys.path.insert(0, str(_TOOL_DIR))

from slots import BandParameters, GemSlot, TextSlot, default_slots, with_slot  # noqa: E402
from validator import validate  # noqa: E402


class TestValidate(unittest.TestCase):
    def setUp(self) -> None:
        self.params = BandParameters()
        self.slots = default_slots()

    def test_defaults_pass_all_checks(self) -> None:
        diag = validate(self.params, self.slots)
        self.assertTrue(diag.twelve_slots)
        self.assertTrue(diag.geometry_valid)
        self.assertTrue(diag.slots_valid)
        self.assertTrue(diag.ok)
        self.assertEqual(diag.issues, [])

    def test_unknown_stone_only_fails_slot_check(self) -> None:
        slots = with_slot(self.slots, 5, GemSlot("opal"))
        diag = validate(self.params, slots)
        self.assertFalse(diag.slots_valid)
        self.assertTrue(diag.twelve_slots)
        self.assertTrue(diag.geometry_valid)
        self.assertIn("slot 5", diag.issues[0])

    def test_eleven_slots_only_fails_count(self) -> None:
        diag = validate(self.params, self.slots[:11])
        self.assertFalse(diag.twelve_slots)
        self.assertTrue(diag.geometry_valid)
        self.assertTrue(diag.slots_valid)

    def test_zero_width_fails_geometry_only(self) -> None:
        diag = validate(BandParameters(band_width=0.0), self.slots)
        self.assertFalse(diag.geometry_valid)
        self.assertTrue(diag.twelve_slots)
        self.assertTrue(diag.slots_valid)

    def test_zero_height_fails_geometry(self) -> None:
        self.assertFalse(validate(BandParameters(band_height=0.0), self.slots).geometry_valid)

    def test_text_length_limit(self) -> None:
        ok = validate(self.params, with_slot(self.slots, 2, TextSlot("ABCDEF")))
        too_long = validate(self.params, with_slot(self.slots, 2, TextSlot("ABCDEFG")))
        self.assertTrue(ok.slots_valid)
        self.assertFalse(too_long.slots_valid)

    def test_to_dict_keys(self) -> None:
        body = validate(self.params, self.slots).to_dict()
        self.assertEqual(set(body), {"twelve_slots", "geometry_valid", "slots_valid", "issues"})


if __name__ == "__main__":
    unittest.main()
