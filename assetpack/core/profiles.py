from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, FrozenSet

from assetpack.config import DEFAULT_PROFILE
from assetpack.errors import ProfileError

UNITY_LIBRARY_WHITELIST = frozenset({
    "UnityEngine.UI.dll",
    "UnityEngine.Networking.dll",
    "UnityEngine.UIAutomation.dll",
    "UnityEngine.SpatialTracking.dll",
    "UnityEngine.Timeline.dll",
})


@dataclass(frozen=True)
class PolicyProfile:
    name: str
    builtin_namespace: str = "UnityEngine"
    library_whitelist: FrozenSet[str] = field(default_factory=frozenset)  # exact file names
    archive_extension: str = ".zip"
    metadata_suffix: str = ".meta"
    assets_prefix: str = "Assets/"
    compression_level: int = 5  # deflate, 0-9
    output_dir: str = "Exports"  # relative to the project root


def default_profiles() -> Dict[str, PolicyProfile]:
    return {
        DEFAULT_PROFILE: PolicyProfile(
            name=DEFAULT_PROFILE,
            builtin_namespace="UnityEngine",
            library_whitelist=UNITY_LIBRARY_WHITELIST,
        ),
    }


def default_profile() -> PolicyProfile:
    return default_profiles()[DEFAULT_PROFILE]


def profile_path(profiles_dir: str, profile_name: str) -> Path:
    safe = "".join(c for c in profile_name if c.isalnum() or c in ("_", "-", " "))
    return Path(profiles_dir) / f"{safe}.json"


def to_json_dict(profile: PolicyProfile) -> Dict[str, Any]:
    d = asdict(profile)
    d["library_whitelist"] = sorted(profile.library_whitelist)
    return d


def from_json_dict(d: Dict[str, Any]) -> PolicyProfile:
    if not isinstance(d, dict):
        raise ProfileError("Profile must be a JSON object.")

    base = default_profile()

    whitelist = d.get("library_whitelist", sorted(base.library_whitelist))
    if not isinstance(whitelist, list):
        raise ProfileError("'library_whitelist' must be a list of file names.")
    # Exact, case-sensitive names; only surrounding whitespace is dropped
    names = frozenset(str(x).strip() for x in whitelist if str(x).strip())

    try:
        level = int(d.get("compression_level", base.compression_level))
    except (TypeError, ValueError):
        raise ProfileError("'compression_level' must be an integer.") from None
    if not 0 <= level <= 9:
        raise ProfileError(f"'compression_level' out of range (0-9): {level}")

    ext = str(d.get("archive_extension") or base.archive_extension)
    if not ext.startswith("."):
        ext = "." + ext

    prefix = str(d.get("assets_prefix", base.assets_prefix))
    if prefix and not prefix.endswith("/"):
        prefix += "/"

    return PolicyProfile(
        name=str(d.get("name") or "Custom"),
        builtin_namespace=str(d.get("builtin_namespace") or base.builtin_namespace).strip("."),
        library_whitelist=names,
        archive_extension=ext,
        metadata_suffix=str(d.get("metadata_suffix") or base.metadata_suffix),
        assets_prefix=prefix,
        compression_level=level,
        output_dir=str(d.get("output_dir") or base.output_dir),
    )


def load_profile(path: str) -> PolicyProfile:
    p = Path(path)
    try:
        d = json.loads(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise ProfileError(f"Cannot read profile {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise ProfileError(f"Profile {p} is not valid JSON: {e}") from e
    return from_json_dict(d)


def save_profile(path: str, profile: PolicyProfile) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(to_json_dict(profile), indent=2), encoding="utf-8")
    return p


def ensure_default_profiles_on_disk(profiles_dir: str) -> Dict[str, Path]:
    written: Dict[str, Path] = {}
    Path(profiles_dir).mkdir(parents=True, exist_ok=True)

    for name, prof in default_profiles().items():
        path = profile_path(profiles_dir, name)
        if not path.exists():
            save_profile(str(path), prof)
        written[name] = path
    return written
