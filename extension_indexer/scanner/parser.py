"""Parsers for reading the corpus manifest."""

import json
import tomllib
from pathlib import Path
from typing import Any

import yaml

from extension_indexer.errors import RepositoryError


MANIFEST_SUFFIXES = {".yaml", ".yml", ".json", ".toml"}


def parse_manifest(file_path: Path) -> Any:
    """
    Parse a corpus manifest and return its contents.

    The format is chosen by suffix; unknown suffixes are tried as JSON and
    then as YAML.

    Args:
        file_path: Path to the manifest file.

    Returns:
        Parsed data structure.

    Raises:
        RepositoryError: If the file cannot be read or parsed.
    """
    suffix = file_path.suffix.lower()

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RepositoryError(f"Unable to read manifest {file_path}: {e}") from e

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(content)

        elif suffix == ".json":
            return json.loads(content)

        elif suffix == ".toml":
            return tomllib.loads(content)

        else:
            try:
                return json.loads(content)
            except json.JSONDecodeError:
                return yaml.safe_load(content)

    except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise RepositoryError(f"Unable to parse manifest {file_path}: {e}") from e
