import json
import tempfile
import unittest
from pathlib import Path

from assetpack.core.profiles import (
    UNITY_LIBRARY_WHITELIST,
    default_profile,
    ensure_default_profiles_on_disk,
    from_json_dict,
    load_profile,
    save_profile,
    to_json_dict,
)
from assetpack.errors import ProfileError


class TestProfiles(unittest.TestCase):
    def test_default_profile(self):
        p = default_profile()
        self.assertEqual(p.name, "Unity")
        self.assertEqual(p.library_whitelist, UNITY_LIBRARY_WHITELIST)
        self.assertIn("UnityEngine.Timeline.dll", p.library_whitelist)
        self.assertEqual((p.archive_extension, p.metadata_suffix, p.assets_prefix), (".zip", ".meta", "Assets/"))
        self.assertEqual(p.compression_level, 5)

    def test_json_round_trip(self):
        p = default_profile()
        d = to_json_dict(p)
        self.assertEqual(d["library_whitelist"], sorted(UNITY_LIBRARY_WHITELIST))
        self.assertEqual(from_json_dict(json.loads(json.dumps(d))), p)

    def test_normalization(self):
        p = from_json_dict(
            {
                "library_whitelist": [" Foo.dll ", "", "foo.dll"],
                "archive_extension": "pak",
                "assets_prefix": "Content",
            }
        )
        self.assertEqual(p.name, "Custom")
        self.assertEqual(p.library_whitelist, frozenset({"Foo.dll", "foo.dll"}))
        self.assertEqual(p.archive_extension, ".pak")
        self.assertEqual(p.assets_prefix, "Content/")

    def test_invalid_profiles(self):
        with self.assertRaises(ProfileError):
            from_json_dict(["not", "a", "dict"])
        with self.assertRaises(ProfileError):
            from_json_dict({"compression_level": 11})
        with self.assertRaises(ProfileError):
            from_json_dict({"compression_level": "fast"})
        with self.assertRaises(ProfileError):
            from_json_dict({"library_whitelist": "UnityEngine.UI.dll"})

    def test_save_load_and_defaults_on_disk(self):
        with tempfile.TemporaryDirectory() as td:
            written = ensure_default_profiles_on_disk(td)
            self.assertTrue(written["Unity"].exists())
            self.assertEqual(load_profile(str(written["Unity"])), default_profile())

            custom = from_json_dict({"name": "Studio", "library_whitelist": ["Studio.Core.dll"]})
            path = save_profile(str(Path(td) / "nested" / "Studio.json"), custom)
            self.assertEqual(load_profile(str(path)), custom)

            broken = Path(td) / "broken.json"
            broken.write_text("{", encoding="utf-8")
            with self.assertRaises(ProfileError):
                load_profile(str(broken))
            with self.assertRaises(ProfileError):
                load_profile(str(Path(td) / "absent.json"))


if __name__ == "__main__":
    unittest.main()
