from __future__ import annotations

APP_NAME = "Asset Export Pipeline"
APP_VERSION = "1.0.0"

DEFAULT_PROFILE = "Unity"
HASH_ALGO_DEFAULT = "sha1"

MANIFEST_NAME = "export_manifest.json"
PARTIAL_SUFFIX = ".partial"

# read size used when digesting archived files
HASH_CHUNK_SIZE = 1024 * 1024
