from __future__ import annotations

import json
from pathlib import Path


def main():
    root = Path("demo_project")
    assets = root / "Assets"
    (assets / "Models").mkdir(parents=True, exist_ok=True)
    (assets / "Textures").mkdir(parents=True, exist_ok=True)
    (assets / "Plugins").mkdir(parents=True, exist_ok=True)

    files = {
        "Models/Cube.prefab": b"dummy_prefab",
        "Models/Cube.fbx": b"dummy_fbx",
        "Textures/Cube_diffuse.png": b"dummy_png",
        "Plugins/UnityEngine.UI.dll": b"dummy_dll",
    }
    for rel, data in files.items():
        (assets / rel).write_bytes(data)
        (assets / (rel + ".meta")).write_text("fileFormatVersion: 2\n", encoding="utf-8")

    graph = {
        "nodes": [
            {
                "id": "cube",
                "name": "Cube",
                "kind": "composite",
                "path": "Assets/Models/Cube.prefab",
                "root": True,
                "components": ["UnityEngine.Transform", "UnityEngine.MeshFilter", "UnityEngine.MeshRenderer"],
                "children": [
                    {"name": "Shadow", "active": False, "components": ["UnityEngine.Transform"]},
                ],
                "dependencies": ["mesh", "ui", "tex", "std"],
            },
            {"id": "mesh", "name": "Cube", "kind": "other", "path": "Assets/Models/Cube.fbx"},
            {"id": "ui", "name": "UnityEngine.UI", "kind": "library", "path": "Assets/Plugins/UnityEngine.UI.dll"},
            {"id": "tex", "name": "Cube_diffuse", "kind": "texture", "path": "Assets/Textures/Cube_diffuse.png",
             "width": 64, "height": 64},
            {"id": "std", "name": "Standard", "kind": "shader", "path": "Resources/unity_builtin_extra"},
        ]
    }
    (root / "graph.json").write_text(json.dumps(graph, indent=2), encoding="utf-8")

    print(f"Created demo project at: {root.resolve()}")
    print(f"Try: python -m assetpack export --graph {root / 'graph.json'} --project-root {root}")


if __name__ == "__main__":
    main()
