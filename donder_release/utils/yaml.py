"""Contains utility functions for working with YAML files."""

from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

yaml = YAML(typ="safe")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Loads a YAML file and returns a dictionary. An empty file yields an empty dictionary."""
    with open(path, encoding="utf-8") as f:
        content = yaml.load(f)
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}, got {type(content).__name__}")
    return content
