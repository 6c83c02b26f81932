"""
Packager - writes the final module and its zip archive.

Both files are staged next to their destinations and moved into place only
after both staged copies are complete, so a failed write never leaves a
half-written artifact under the final names.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable, Optional

from workerforge.base.config import BuildMode, PathsConfig
from workerforge.build.models import BuildArtifact, BuildState
from workerforge.errors import BuildError, ErrorCode

logger = logging.getLogger(__name__)

TS_NOCHECK_DIRECTIVE = "// @ts-nocheck\n"


def render_worker(code: str) -> str:
    return f"{TS_NOCHECK_DIRECTIVE}{code}"


def write_archive(path: Path, entry_name: str, content: str) -> None:
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as z:
        z.writestr(entry_name, content)


class Packager:
    def __init__(self, paths: Optional[PathsConfig] = None):
        self.paths = paths or PathsConfig()

    def _write_outputs(self, worker: str) -> None:
        dist = self.paths.dist_path
        worker_path = self.paths.worker_path
        archive_path = self.paths.archive_path
        staged_worker = worker_path.with_name(worker_path.name + ".tmp")
        staged_archive = archive_path.with_name(archive_path.name + ".tmp")

        try:
            dist.mkdir(parents=True, exist_ok=True)
            with open(staged_worker, "w", encoding="utf-8", newline="") as f:
                f.write(worker)
            write_archive(staged_archive, self.paths.archive_entry, worker)
            os.replace(staged_worker, worker_path)
            os.replace(staged_archive, archive_path)
        except OSError as e:
            for staged in (staged_worker, staged_archive):
                if staged.is_file():
                    staged.unlink()
            raise BuildError(
                ErrorCode.PACKAGE_WRITE_FAILED,
                f"Failed to write build output to {dist}: {e}",
                details={"path": str(dist), "original_type": type(e).__name__},
            ) from e

    async def package(
        self,
        code: str,
        mode: BuildMode,
        pages: Iterable[str] = (),
        states: Iterable[BuildState] = (),
    ) -> BuildArtifact:
        worker = render_worker(code)
        await asyncio.to_thread(self._write_outputs, worker)

        data = worker.encode("utf-8")
        logger.info(
            f"[Packager] Wrote {self.paths.worker_path.name} ({len(data)} bytes) "
            f"and {self.paths.archive_path.name}"
        )
        return BuildArtifact(
            mode=mode,
            worker_path=str(self.paths.worker_path),
            archive_path=str(self.paths.archive_path),
            archive_entry=self.paths.archive_entry,
            size_bytes=len(data),
            sha256=hashlib.sha256(data).hexdigest(),
            pages=sorted(pages),
            states=list(states),
        )
