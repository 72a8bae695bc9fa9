from __future__ import annotations

import logging
import os
import threading
import zipfile
from pathlib import Path
from typing import List, Optional, Sequence, Set, Union

from assetpack.config import HASH_ALGO_DEFAULT, PARTIAL_SUFFIX
from assetpack.core.hashing import Algo, digest_file
from assetpack.core.planner import plan_archive
from assetpack.core.profiles import PolicyProfile, default_profile
from assetpack.models import ArchivedEntry, ArchivePlanItem, DependencyNode, ExportOutcome, Report

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = '<>:"/\\|?*'


class EntryMissingError(OSError):
    def __init__(self, path: str, code: str):
        super().__init__(f"{path} does not exist or is not supported.")
        self.path = path
        self.code = code


class DestinationDirectory:
    """
    Output folder shared by all targets of a run. Created at most once,
    under a lock, the first time a target needs it. Each archive path is
    handed to a single target.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._ready = False
        self._claimed: Set[str] = set()

    def ensure(self) -> Path:
        with self._lock:
            if not self._ready:
                self.path.mkdir(parents=True, exist_ok=True)
                self._ready = True
        return self.path

    def claim(self, path: Path) -> bool:
        """
        Reserves an archive path for one target of this run.
        False when another target already holds it.
        """
        key = os.path.normcase(os.path.abspath(str(path)))
        with self._lock:
            if key in self._claimed:
                return False
            self._claimed.add(key)
            return True


def archive_stem(name: str) -> str:
    stem = "".join("_" if c in _UNSAFE_NAME_CHARS else c for c in name).strip().strip(".")
    return stem or "export"


class ArchiveExporter:
    """
    Writes one zip per target: every dependency file plus its companion
    metadata file.

    The caller is expected to have a successful Report; policy is not
    re-checked here. A failed export never leaves an archive behind.
    """

    def __init__(
        self,
        assets_root: str,
        profile: Optional[PolicyProfile] = None,
        hash_algo: Optional[Algo] = HASH_ALGO_DEFAULT,
    ):
        self.assets_root = assets_root
        self.profile = profile or default_profile()
        self.hash_algo = hash_algo

    def archive_path_for(self, target: DependencyNode, destination: Union[str, Path]) -> Path:
        return Path(destination) / (archive_stem(target.name) + self.profile.archive_extension)

    def export(
        self,
        report: Report,
        deps: Sequence[DependencyNode],
        destination: Union[str, Path, DestinationDirectory],
    ) -> ExportOutcome:
        target = report.target
        dest = destination if isinstance(destination, DestinationDirectory) else DestinationDirectory(destination)

        try:
            out_dir = dest.ensure()
        except OSError as e:
            return self._fail(
                report,
                "DEST_DIR_CREATE_FAILED",
                f"Failed creating destination folder: {dest.path} ({e})",
            )

        archive_path = self.archive_path_for(target, out_dir)
        partial = archive_path.with_name(archive_path.name + PARTIAL_SUFFIX)
        if not dest.claim(archive_path):
            return self._fail(
                report,
                "DUPLICATE_ARCHIVE_NAME",
                f"Archive {archive_path.name} already belongs to another target in this run.",
            )

        plan, _ = plan_archive(report, deps, self.assets_root, self.profile)

        try:
            entries = self._write(plan, partial)
            os.replace(partial, archive_path)
        except EntryMissingError as e:
            self._discard(partial, archive_path)
            return self._fail(report, e.code, str(e))
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            self._discard(partial, archive_path)
            return self._fail(report, "ARCHIVE_WRITE_FAILED", f"Failed writing {archive_path.name}: {e}")

        resolved = str(archive_path.resolve())
        logger.info("Exported %s -> %s (%d entries)", target.name, resolved, len(entries))
        return ExportOutcome(
            target=target,
            report=report,
            archive_path=resolved,
            entries=tuple(entries),
        )

    def _write(self, plan: Sequence[ArchivePlanItem], path: Path) -> List[ArchivedEntry]:
        entries: List[ArchivedEntry] = []
        with zipfile.ZipFile(
            path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.profile.compression_level,
            strict_timestamps=False,
        ) as zf:
            for item in plan:
                entries.append(self._add(zf, item.src, item.arcname, "SRC_MISSING"))
                entries.append(self._add(zf, item.meta_src, item.meta_arcname, "META_MISSING"))
        return entries

    def _add(self, zf: zipfile.ZipFile, src: str, arcname: str, missing_code: str) -> ArchivedEntry:
        try:
            st = os.stat(src)
        except FileNotFoundError:
            raise EntryMissingError(src, missing_code) from None

        digest = digest_file(src, self.hash_algo)
        # ZipFile.write stamps the entry with the file's mtime and size
        zf.write(src, arcname=arcname)
        return ArchivedEntry(
            arcname=arcname,
            src=src,
            size_bytes=int(st.st_size),
            mtime=st.st_mtime,
            digest=digest,
        )

    def _discard(self, *paths: Path) -> None:
        for p in paths:
            try:
                p.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not remove %s: %s", p, e)

    def _fail(self, report: Report, code: str, message: str) -> ExportOutcome:
        target = report.target
        logger.warning("Export of %s failed: %s", target.name, message)
        report.error(message, target, code=code)
        return ExportOutcome(target=target, report=report, error=message)
