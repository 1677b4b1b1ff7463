from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from .exceptions import Fatal

class U:
    @staticmethod
    def die(logger: logging.Logger, msg: str, code: int = 1) -> None:
        logger.error(msg)
        raise Fatal(code, msg)
    @staticmethod
    def ensure_dir(p: Path) -> None:
        p.mkdir(parents=True, exist_ok=True)
    @staticmethod
    def json_dump(obj: Any) -> str:
        try:
            return json.dumps(obj, indent=2, sort_keys=True, default=str)
        except (TypeError, ValueError):
            return repr(obj)
    @staticmethod
    def human_bytes(n: Optional[int]) -> str:
        if n is None:
            return "unknown"
        x = float(n)
        for unit in ["B", "KiB", "MiB", "GiB", "TiB"]:
            if x < 1024 or unit == "TiB":
                return f"{x:.2f} {unit}"
            x /= 1024
        return f"{n} B"
    @staticmethod
    def banner(logger: logging.Logger, title: str) -> None:
        line = "─" * max(10, len(title) + 2)
        logger.info(line)
        logger.info(f" {title}")
        logger.info(line)
    @staticmethod
    def stat_file(logger: logging.Logger, p: Path) -> os.stat_result:
        """stat() a regular file or die. Used before any output is written."""
        try:
            st = p.stat()
        except OSError as e:
            U.die(logger, f"Cannot stat {p}: {e.strerror or e}", 1)
        if not p.is_file():
            U.die(logger, f"Not a regular file: {p}", 1)
        return st
    @staticmethod
    def archive_name(p: Path) -> str:
        """
        Name a file is stored under inside an archive: the path as given,
        normalized. Absolute paths and paths escaping the working directory
        collapse to the base name.
        """
        rel = os.path.normpath(str(p))
        if os.path.isabs(rel) or rel == ".." or rel.startswith(".." + os.sep):
            return p.name
        return rel.replace(os.sep, "/")
