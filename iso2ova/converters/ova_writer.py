from __future__ import annotations
import logging
import os
import tarfile
from pathlib import Path
from typing import List, Sequence, Tuple

from rich.progress import Progress, BarColumn, DownloadColumn, TextColumn, TimeElapsedColumn, TimeRemainingColumn
from ..core.utils import U

_CHUNK = 1024 * 1024
class OVA:
    @staticmethod
    def write_ovf(logger: logging.Logger, path: Path, content: str) -> Path:
        U.banner(logger, "Write OVF")
        try:
            U.ensure_dir(path.parent)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            U.die(logger, f"Failed to write OVF {path}: {e}", 1)
        logger.info(f"OVF: {path}")
        return path
    @staticmethod
    def create_ova(logger: logging.Logger, members: Sequence[Tuple[Path, str]], ova: Path) -> Path:
        """
        Write an uncompressed tar holding each (source, arcname) in order.
        Headers carry the source's real mode, size and mtime.
        """
        U.banner(logger, "Create OVA")
        logger.info(f"OVA: {ova}")
        try:
            U.ensure_dir(ova.parent)
            total = sum(src.stat().st_size for src, _ in members)
            # plain ustar: one 512-byte header per member, no pax records
            with tarfile.open(ova, mode="w", format=tarfile.USTAR_FORMAT) as tar:
                with Progress(TextColumn("{task.description}"), BarColumn(), DownloadColumn(), TimeElapsedColumn(), TimeRemainingColumn()) as progress:
                    task = progress.add_task("Packing OVA", total=total)
                    for src, arcname in members:
                        info = tar.gettarinfo(str(src), arcname=arcname)
                        info.mtime = int(info.mtime)
                        logger.debug(f"Adding {src} as {info.name} ({U.human_bytes(info.size)}, mode {info.mode:o})")
                        with open(src, "rb") as f:
                            tar.addfile(info, _ProgressReader(f, lambda n: progress.update(task, advance=n)))
        except (OSError, ValueError, tarfile.TarError) as e:
            U.die(logger, f"Failed to create OVA {ova}: {e}", 1)
        return ova
    @staticmethod
    def list_ova(ova: Path) -> List[Tuple[str, int]]:
        with tarfile.open(ova, mode="r:") as tar:
            return [(m.name, m.size) for m in tar.getmembers()]
class _ProgressReader:
    """File wrapper reporting how many bytes tarfile pulled through it."""
    def __init__(self, f, advance):
        self._f = f
        self._advance = advance
    def read(self, size: int = -1) -> bytes:
        data = self._f.read(_CHUNK if size is None or size < 0 else size)
        self._advance(len(data))
        return data
