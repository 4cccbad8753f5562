# SPDX-License-Identifier: MIT
"""Utilities for loading configuration files.

File access is centralised here so read and parse problems are reported
through the error handler and surface to callers as concise exceptions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, TypeVar

import logfire
import yaml
from pydantic import TypeAdapter, ValidationError

from utils.error_handler import ErrorHandler, LoggingErrorHandler

T = TypeVar("T")

DEFAULT_CONFIG_DIR = Path("config")
DEFAULT_CONFIG_FILE = Path("app.yaml")


def _read_file(path: Path, error_handler: ErrorHandler | None = None) -> str:
    """Return the contents of ``path``.

    Raises:
        FileNotFoundError: If the file does not exist.
        RuntimeError: If the file cannot be read.
    """
    handler = error_handler or LoggingErrorHandler()
    try:
        with path.open("r", encoding="utf-8") as file:
            text = file.read()
            logfire.debug("Read text file", path=str(path), bytes=len(text))
            return text
    except FileNotFoundError as exc:
        handler.handle(f"Configuration file not found: {path}", exc)
        raise
    except OSError as exc:
        handler.handle(f"Error reading file {path}", exc)
        raise RuntimeError(f"An error occurred while reading the file: {exc}") from exc


def read_yaml_file(
    path: Path,
    schema: type[T],
    error_handler: ErrorHandler | None = None,
) -> T:
    """Return YAML data loaded from ``path`` validated against ``schema``.

    Args:
        path: File location.
        schema: Pydantic-compatible schema to validate against.
        error_handler: Processor for any errors encountered.
    """
    handler = error_handler or LoggingErrorHandler()
    with logfire.span("fs.read_yaml", path=str(path)):
        try:
            adapter = TypeAdapter(schema)
            return adapter.validate_python(yaml.safe_load(_read_file(path, handler)))
        except FileNotFoundError:
            raise
        except (RuntimeError, ValidationError, yaml.YAMLError, ValueError) as exc:
            handler.handle(f"Error reading YAML file {path}", exc)
            raise RuntimeError(
                f"An error occurred while reading the YAML file: {exc}"
            ) from exc


def load_app_config(
    base_dir: Path | str = DEFAULT_CONFIG_DIR,
    filename: Path | str = DEFAULT_CONFIG_FILE,
) -> dict[str, Any]:
    """Return the raw application configuration mapping from ``base_dir``.

    An empty file yields an empty mapping.
    """
    path = Path(base_dir) / Path(filename)
    return read_yaml_file(path, dict[str, Any] | None) or {}


__all__ = ["load_app_config", "read_yaml_file"]
