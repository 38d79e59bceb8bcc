"""Tests for waypost.__init__ — lazy imports cover all public names."""

import tomllib
from pathlib import Path

import pytest

import waypost


@pytest.mark.parametrize("name", waypost.__all__)
def test_all_names_resolve(name: str) -> None:
    """Every name in __all__ must resolve via __getattr__ without error."""
    obj = getattr(waypost, name)
    assert obj is not None, f"waypost.{name} resolved to None"


def test_names_match_submodules() -> None:
    from waypost.routing.router import Router
    from waypost.uri.parser import normalize

    assert waypost.Router is Router
    assert waypost.normalize is normalize


def test_unknown_name_raises_attribute_error() -> None:
    """Accessing an unregistered name raises AttributeError."""
    with pytest.raises(AttributeError, match="no attribute"):
        waypost.__getattr__("ThisDoesNotExist")


def test_version_matches_project_metadata() -> None:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    with pyproject.open("rb") as f:
        project = tomllib.load(f)["project"]
    assert waypost.__version__ == project["version"]
