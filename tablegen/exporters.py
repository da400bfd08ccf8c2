# File: tablegen/exporters.py
"""
TableGen - Artifact Writer (File-System Manager)
=================================================

Resolves the target directory of a generated artifact from the output root
and the dot-delimited namespace, creates missing directories, and writes
the file with create-or-truncate semantics.

Overwriting is unconditional: every run fully regenerates the artifacts it
touches.  A failed write is reported as ``WriteFailedError`` and whatever the
filesystem left behind stays in place.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from tablegen.exceptions import WriteFailedError
from tablegen.models import GeneratedArtifact, GeneratorConfig
from tablegen.utils import ensure_directory, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tablegen.exporters")


class ArtifactWriter:
    """
    Writes rendered artifacts below ``output_root/<namespace as path>``.

    Usage::

        writer = ArtifactWriter(Path("out"))
        path = writer.write("com.acme.model", "Accounts", ".java", source)

    Thread-safe: holds no mutable state; concurrent workers write distinct
    files and ``mkdir(exist_ok=True)`` tolerates racing directory creation.
    """

    def __init__(self, output_root: Path) -> None:
        self._output_root: Path = Path(output_root)

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "ArtifactWriter":
        return cls(Path(config.output_dir))

    @property
    def output_root(self) -> Path:
        return self._output_root

    def target_directory(self, namespace: str) -> Path:
        """``output_root`` joined with each non-empty namespace segment."""
        segments: List[str] = [s for s in namespace.split(".") if s]
        return self._output_root.joinpath(*segments)

    def write(
        self,
        namespace: str,
        base_name: str,
        extension: str,
        content: str,
        *,
        table: Optional[str] = None,
    ) -> Path:
        """
        Persist *content* as ``<base_name><extension>`` under *namespace*.

        Returns:
            Path of the written file.

        Raises:
            WriteFailedError: directory creation or the write itself failed.
        """
        if not base_name or not base_name.strip():
            raise WriteFailedError("no artifact name, skipping write", table)

        target_dir: Path = self.target_directory(namespace)
        try:
            ensure_directory(target_dir)
        except OSError as exc:
            raise WriteFailedError(
                f"could not create targetDir: {target_dir}, error: {exc}", table
            ) from exc

        target_file: Path = target_dir / f"{base_name}{extension}"
        try:
            write_file(target_file, content)
        except OSError as exc:
            raise WriteFailedError(
                f"could not write file {target_file}: {exc}", table
            ) from exc

        return target_file

    def write_artifact(
        self,
        namespace: str,
        artifact: GeneratedArtifact,
        *,
        table: Optional[str] = None,
    ) -> Path:
        return self.write(
            namespace,
            artifact.base_name,
            artifact.extension,
            artifact.content,
            table=table,
        )


__all__: List[str] = ["ArtifactWriter"]

logger.debug("tablegen.exporters loaded.")
