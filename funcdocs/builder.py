"""Invokes the external static-site builder on the generated sources."""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Sequence, Union

from .logging import get_logger

Command = Union[str, Sequence[str]]


class BuildError(RuntimeError):
    """Raised when the site builder exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: str = "") -> None:
        super().__init__(f"Site build failed with exit code {returncode}: {' '.join(command)}")
        self.command = list(command)
        self.returncode = returncode
        self.output = output


class SiteBuilder:
    """Runs the configured build command with ``{path}`` pointing at the docs base directory."""

    def __init__(self, command: Command, runner: Callable[..., subprocess.CompletedProcess] | None = None) -> None:
        self.command = command
        self._runner = runner or self._default_runner
        self.logger = get_logger("builder")

    def build(self, docs_base_dir: Path) -> str:
        args = self.expand(docs_base_dir)
        self.logger.info("Building site: %s", " ".join(args))
        result = self._runner(args, cwd=docs_base_dir)
        output = (result.stdout or "") + (result.stderr or "")
        for line in output.splitlines():
            self.logger.info(line)
        if result.returncode != 0:
            raise BuildError(args, result.returncode, output)
        return output

    def expand(self, docs_base_dir: Path) -> List[str]:
        """Split the command and substitute ``{path}`` in every argument."""
        parts = shlex.split(self.command) if isinstance(self.command, str) else list(self.command)
        return [part.replace("{path}", str(docs_base_dir)) for part in parts]

    @staticmethod
    def _default_runner(args: Sequence[str], cwd: Path) -> subprocess.CompletedProcess:
        return subprocess.run(
            list(args),
            cwd=str(cwd),
            check=False,
            capture_output=True,
            text=True,
        )


__all__ = ["BuildError", "SiteBuilder"]
