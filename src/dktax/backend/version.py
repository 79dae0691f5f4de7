"""Single source for the version string reported by the API."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "dktax"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed distribution version, else the one in ``pyproject.toml``."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return read_pyproject_version(PYPROJECT_PATH)


def read_pyproject_version(path: Path) -> str:
    """Pull ``version`` out of the ``[project]`` table of ``path``.

    Only the flat ``key = "value"`` form is understood, which is all the
    project file uses.
    """

    if not path.exists():
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    in_project = False
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]"):
            in_project = line == "[project]"
            continue
        if not in_project:
            continue
        key, separator, value = line.partition("=")
        if separator and key.strip() == "version":
            version = value.strip().strip('"').strip("'")
            if version:
                return version
            break

    raise RuntimeError(f"Unable to determine project version from {path.name}")


__all__ = ["PACKAGE_NAME", "get_project_version", "read_pyproject_version"]
