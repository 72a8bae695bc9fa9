import contextlib
import io
import json
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest import mock

from assetpack.cli import EXIT_POLICY_VIOLATION, EXIT_RUNTIME_ERROR, EXIT_SUCCESS, main


def make_asset(assets: Path, rel: str, data: bytes = b"data") -> None:
    p = assets / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)
    (assets / (rel + ".meta")).write_text("guid: 0\n", encoding="utf-8")


def run_cli(*argv):
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        code = main(list(argv))
    return code, buf.getvalue()


class TestCli(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.project = Path(self._td.name) / "Game"
        assets = self.project / "Assets"
        make_asset(assets, "Models/Cube.prefab")
        make_asset(assets, "Textures/Cube.png")
        make_asset(assets, "Plugins/UnityEngine.UI.dll")
        make_asset(assets, "Plugins/MyPlugin.dll")

        self.graph = Path(self._td.name) / "graph.json"
        self.graph.write_text(
            json.dumps(
                {
                    "nodes": [
                        {
                            "id": "cube",
                            "name": "Cube",
                            "kind": "composite",
                            "path": "Assets/Models/Cube.prefab",
                            "root": True,
                            "components": ["UnityEngine.MeshRenderer"],
                            "dependencies": ["ui", "tex"],
                        },
                        {
                            "id": "rock",
                            "name": "Rock",
                            "kind": "composite",
                            "path": "Assets/Models/Rock.prefab",
                            "components": ["UnityEngine.MeshRenderer"],
                            "dependencies": ["plugin"],
                        },
                        {"id": "ui", "name": "UI", "kind": "library", "path": "Assets/Plugins/UnityEngine.UI.dll"},
                        {"id": "plugin", "name": "MyPlugin", "kind": "library", "path": "Assets/Plugins/MyPlugin.dll"},
                        {"id": "tex", "name": "Cube", "kind": "texture", "path": "Assets/Textures/Cube.png",
                         "width": 64, "height": 64},
                    ]
                }
            ),
            encoding="utf-8",
        )

    def tearDown(self):
        self._td.cleanup()

    def test_export_default_roots_with_manifest(self):
        code, out = run_cli("export", "--graph", str(self.graph), "--project-root", str(self.project), "--manifest")

        self.assertEqual(code, EXIT_SUCCESS)
        self.assertIn("[Cube] Export complete. Stats:", out)
        self.assertIn("1/1 target(s) exported.", out)

        archive = self.project / "Exports" / "Cube.zip"
        with zipfile.ZipFile(archive) as zf:
            self.assertEqual(
                zf.namelist(),
                ["Models/Cube.prefab", "Models/Cube.prefab.meta", "Textures/Cube.png", "Textures/Cube.png.meta"],
            )

        manifest = json.loads((self.project / "Exports" / "export_manifest.json").read_text(encoding="utf-8"))
        self.assertEqual(manifest["targets"][0]["target"], "Cube")
        self.assertEqual(len(manifest["targets"][0]["files"]), 4)
        self.assertEqual(manifest["hash_algo"], "sha1")
        self.assertTrue(all(len(f["digest"]) == 40 for f in manifest["targets"][0]["files"]))

    def test_export_without_manifest_skips_hashing(self):
        with mock.patch("assetpack.core.hashing.hashlib.new") as new_hash:
            code, _ = run_cli("export", "--graph", str(self.graph), "--project-root", str(self.project))

        self.assertEqual(code, EXIT_SUCCESS)
        self.assertTrue((self.project / "Exports" / "Cube.zip").exists())
        new_hash.assert_not_called()

    def test_no_hash_manifest_has_no_digests(self):
        code, _ = run_cli(
            "export", "--graph", str(self.graph), "--project-root", str(self.project), "--manifest", "--no-hash"
        )

        self.assertEqual(code, EXIT_SUCCESS)
        manifest = json.loads((self.project / "Exports" / "export_manifest.json").read_text(encoding="utf-8"))
        self.assertIsNone(manifest["hash_algo"])
        self.assertTrue(all(f["digest"] is None for f in manifest["targets"][0]["files"]))

    def test_export_policy_failure(self):
        out_dir = Path(self._td.name) / "out"
        code, out = run_cli(
            "export",
            "--graph", str(self.graph),
            "--project-root", str(self.project),
            "--target", "Rock",
            "--target", "cube",
            "--out", str(out_dir),
            "--workers", "2",
        )

        self.assertEqual(code, EXIT_POLICY_VIOLATION)
        self.assertIn("[Rock] 1 Error(s):", out)
        self.assertIn("MyPlugin.dll", out)
        self.assertEqual(sorted(p.name for p in out_dir.iterdir()), ["Cube.zip"])

    def test_dry_run(self):
        code, out = run_cli("export", "--graph", str(self.graph), "--project-root", str(self.project), "--dry-run")

        self.assertEqual(code, EXIT_SUCCESS)
        self.assertIn("  + Textures/Cube.png.meta", out)
        self.assertIn("  - UI (IGNORED)", out)
        self.assertIn("[Cube] Validation passed.", out)
        self.assertFalse((self.project / "Exports").exists())

    def test_analyze(self):
        code, out = run_cli("analyze", "--graph", str(self.graph), "--target", "Rock")
        self.assertEqual(code, EXIT_POLICY_VIOLATION)
        self.assertIn("Unsupported dll : MyPlugin.dll", out)

    def test_runtime_errors(self):
        code, _ = run_cli("analyze", "--graph", str(Path(self._td.name) / "missing.json"))
        self.assertEqual(code, EXIT_RUNTIME_ERROR)

        code, _ = run_cli("analyze", "--graph", str(self.graph), "--target", "Nope")
        self.assertEqual(code, EXIT_RUNTIME_ERROR)

    def test_profiles_and_custom_profile(self):
        pdir = Path(self._td.name) / "profiles"
        code, out = run_cli("profiles", "--dir", str(pdir))
        self.assertEqual(code, EXIT_SUCCESS)
        self.assertTrue((pdir / "Unity.json").exists())

        custom = pdir / "Permissive.json"
        data = json.loads((pdir / "Unity.json").read_text(encoding="utf-8"))
        data["name"] = "Permissive"
        data["library_whitelist"].append("MyPlugin.dll")
        custom.write_text(json.dumps(data), encoding="utf-8")

        code, out = run_cli("analyze", "--graph", str(self.graph), "--target", "Rock", "--profile-file", str(custom))
        self.assertEqual(code, EXIT_SUCCESS)
        self.assertIn("[Rock] Validation passed.", out)


if __name__ == "__main__":
    unittest.main()
