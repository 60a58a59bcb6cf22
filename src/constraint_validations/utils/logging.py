"""
Project name and version for log records.

The installed distribution's metadata wins. In a source checkout that was never
installed, project.version is read from this project's pyproject.toml.
"""

import tomllib
from functools import lru_cache
from importlib import metadata as importlib_metadata
from pathlib import Path

DISTRIBUTION = "pg-constraint-validations"


@lru_cache()
def _pyproject_project_table() -> dict:
    """[project] table of the nearest pyproject.toml that belongs to this distribution."""
    for directory in Path(__file__).resolve().parents:
        candidate = directory / "pyproject.toml"
        if not candidate.is_file():
            continue
        try:
            with candidate.open("rb") as f:
                project = tomllib.load(f).get("project", {})
        except (OSError, tomllib.TOMLDecodeError):
            continue
        if project.get("name") == DISTRIBUTION:
            return project
    return {}


def get_project_version(default: str = "unknown") -> str:
    try:
        return importlib_metadata.version(DISTRIBUTION)
    except importlib_metadata.PackageNotFoundError:
        return _pyproject_project_table().get("version", default)
