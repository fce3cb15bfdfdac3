import os
import sys
import unittest
from pathlib import Path

# Allow `import app` etc. from the repo root.
_TOOL_DIR = Path(__file__).resolve().parents[1] / "ring-design-tool"
if str(_TOOL_DIR) not in sys.path:
    sys.path.insert(0, str(_TOOL_DIR))

os.environ.setdefault("RING_TEXTURE_SIZE", "64")

from app import app, sanitize_parameters  # noqa: E402


class TestSanitizeParameters(unittest.TestCase):
    def test_caps_large_values(self) -> None:
        out = sanitize_parameters({"inner_diameter": 100, "band_width": 3.456})
        self.assertEqual(out["inner_diameter"], 40.0)
        self.assertEqual(out["band_width"], 3.46)

    def test_keeps_non_positive_values(self) -> None:
        out = sanitize_parameters({"band_width": 0, "band_height": -1.0})
        self.assertEqual(out["band_width"], 0.0)
        self.assertEqual(out["band_height"], -1.0)

    def test_caps_curve_segments(self) -> None:
        out = sanitize_parameters({"curve_segments": 100_000_000})
        self.assertEqual(out["curve_segments"], 512)

    def test_leaves_flags_and_colors(self) -> None:
        out = sanitize_parameters({"inside": True, "metal_color": "#ffffff"})
        self.assertIs(out["inside"], True)
        self.assertEqual(out["metal_color"], "#ffffff")


class TestRoutes(unittest.TestCase):
    def setUp(self) -> None:
        self.client = app.test_client()

    def test_rebuild_defaults(self) -> None:
        res = self.client.post("/api/rebuild", json={})
        self.assertEqual(res.status_code, 200)
        body = res.get_json()
        self.assertTrue(body["ok"])
        self.assertEqual(len(body["decals"]), 12)
        self.assertEqual(len(body["slots"]), 12)
        self.assertTrue(body["diagnostics"]["twelve_slots"])

    def test_rebuild_with_gem(self) -> None:
        slots = [{"kind": "zodiac", "value": "aries"}] * 12
        slots[3] = {"kind": "stone", "value": "ruby"}
        res = self.client.post("/api/rebuild", json={"slots": slots})
        body = res.get_json()
        self.assertEqual(res.status_code, 200)
        self.assertEqual(body["gems"][0]["slot"], 3)
        self.assertEqual(body["gems"][0]["color"], "#E0115F")

    def test_invalid_geometry_is_422(self) -> None:
        res = self.client.post("/api/rebuild", json={"params": {"band_width": 0}})
        self.assertEqual(res.status_code, 422)
        body = res.get_json()
        self.assertEqual(body["error"]["code"], "invalid_geometry")
        self.assertFalse(body["diagnostics"]["geometry_valid"])

    def test_unknown_kind_is_422(self) -> None:
        res = self.client.post("/api/rebuild", json={"slots": [{"kind": "emoji", "value": "x"}]})
        self.assertEqual(res.status_code, 422)

    def test_overlong_text_is_reported(self) -> None:
        slots = [{"kind": "zodiac", "value": "leo"}] * 12
        slots[0] = {"kind": "text", "value": "SEVENCH"}
        body = self.client.post("/api/rebuild", json={"slots": slots}).get_json()
        self.assertFalse(body["diagnostics"]["slots_valid"])
        self.assertEqual(len(body["decals"]), 11)

    def test_inside_flag_strings(self) -> None:
        slots = [{"kind": "stone", "value": "ruby"}] + [{"kind": "zodiac", "value": "leo"}] * 11
        outside = self.client.post(
            "/api/rebuild", json={"params": {"inside": "false"}, "slots": slots}
        ).get_json()
        inside = self.client.post(
            "/api/rebuild", json={"params": {"inside": "true"}, "slots": slots}
        ).get_json()
        self.assertEqual(outside["gems"][0]["normal"], [0.0, 0.0, 1.0])
        self.assertEqual(inside["gems"][0]["normal"], [0.0, 0.0, -1.0])

    def test_unreadable_inside_flag_is_422(self) -> None:
        res = self.client.post("/api/rebuild", json={"params": {"inside": "maybe"}})
        self.assertEqual(res.status_code, 422)

    def test_huge_curve_segments_are_capped(self) -> None:
        res = self.client.post(
            "/api/rebuild", json={"params": {"curve_segments": 100_000_000}, "slots": []}
        )
        body = res.get_json()
        self.assertTrue(body["ok"])
        self.assertLessEqual(body["band"]["faces"], 512 * 64)

    def test_missing_body_is_400(self) -> None:
        res = self.client.post("/api/rebuild", data="nope", content_type="text/plain")
        self.assertEqual(res.status_code, 400)

    def test_export_glb(self) -> None:
        res = self.client.post("/api/export", json={"filename": "my ring"})
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data.startswith(b"glTF"))
        self.assertIn("my_ring.glb", res.headers["Content-Disposition"])

    def test_export_stl(self) -> None:
        res = self.client.post("/api/export", json={"format": "stl"})
        self.assertEqual(res.status_code, 200)
        self.assertIn("custom-ring.stl", res.headers["Content-Disposition"])

    def test_export_invalid_geometry(self) -> None:
        res = self.client.post("/api/export", json={"params": {"band_height": 0}})
        self.assertEqual(res.status_code, 422)

    def test_export_unknown_format(self) -> None:
        res = self.client.post("/api/export", json={"format": "fbx"})
        self.assertEqual(res.status_code, 400)

    def test_catalog(self) -> None:
        body = self.client.get("/api/catalog").get_json()
        self.assertEqual(len(body["zodiac"]), 12)
        self.assertEqual(len(body["stones"]), 11)
        self.assertEqual(body["stones"][0]["key"], "diamond")
        self.assertEqual(len(body["default_slots"]), 12)

    def test_health(self) -> None:
        body = self.client.get("/api/health").get_json()
        self.assertEqual(body["status"], "ok")


if __name__ == "__main__":
    unittest.main()
