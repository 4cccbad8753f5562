"""Input helpers for configuration files.

Exports:
    load_app_config: Read the YAML application configuration.
    read_yaml_file: Read and validate any YAML file.
"""

from .loader import load_app_config, read_yaml_file

__all__ = ["load_app_config", "read_yaml_file"]
