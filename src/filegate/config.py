"""Configuration loading and Pydantic models for FileGate."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

# Environment variable naming the storage container (S3 bucket).
CONTAINER_ENV_VAR = "S3_BUCKET"
# Environment variable pointing the Lambda entry point at a YAML file.
CONFIG_ENV_VAR = "FILEGATE_CONFIG"


class ServerConfig(BaseModel):
    """Server binding configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    shutdown_timeout: int = 30


class LoggingConfig(BaseModel):
    """Log level and output format."""

    level: str = "INFO"
    format: str = "text"


class StorageConfig(BaseModel):
    """Object store backend configuration."""

    backend: str = "aws"
    container: str = ""
    local_root: str = "./data/files"
    aws_region: str = "us-east-1"
    aws_endpoint_url: str = ""
    aws_use_path_style: bool = False
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""


class ObservabilityConfig(BaseModel):
    """Metrics configuration."""

    metrics: bool = True


class FileGateConfig(BaseModel):
    """Top-level FileGate configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


def _parse_server(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the server section from YAML data into a dict for Pydantic."""
    if data is None:
        return {}
    return {
        "host": data.get("host", "0.0.0.0"),
        "port": data.get("port", 8080),
        "shutdown_timeout": data.get("shutdown_timeout", 30),
    }


def _parse_logging(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the logging section from YAML data."""
    if data is None:
        return {}
    return {
        "level": data.get("level", "INFO"),
        "format": data.get("format", "text"),
    }


def _parse_storage(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the storage section from YAML data.

    Handles nested structure: storage.local.root_dir -> local_root,
    storage.aws.region -> aws_region, etc.
    """
    if data is None:
        return {}

    result: dict[str, Any] = {
        "backend": data.get("backend", "aws"),
        "container": data.get("container", ""),
    }

    local_section = data.get("local")
    if isinstance(local_section, dict):
        result["local_root"] = local_section.get("root_dir", "./data/files")

    aws_section = data.get("aws")
    if isinstance(aws_section, dict):
        result["aws_region"] = aws_section.get("region", "us-east-1")
        result["aws_endpoint_url"] = aws_section.get("endpoint_url", "")
        result["aws_use_path_style"] = aws_section.get("use_path_style", False)
        result["aws_access_key_id"] = aws_section.get("access_key_id", "")
        result["aws_secret_access_key"] = aws_section.get("secret_access_key", "")

    return result


def _parse_observability(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the observability section from YAML data."""
    if data is None:
        return {}
    return {"metrics": data.get("metrics", True)}


def load_config(path: Path) -> FileGateConfig:
    """Load a FileGateConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated FileGateConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return FileGateConfig(
        server=ServerConfig(**_parse_server(raw.get("server"))),
        logging=LoggingConfig(**_parse_logging(raw.get("logging"))),
        storage=StorageConfig(**_parse_storage(raw.get("storage"))),
        observability=ObservabilityConfig(**_parse_observability(raw.get("observability"))),
    )


def load_config_from_env(environ: Mapping[str, str] | None = None) -> FileGateConfig:
    """Load the file named by ``FILEGATE_CONFIG``, or defaults if unset."""
    environ = os.environ if environ is None else environ
    path = environ.get(CONFIG_ENV_VAR)
    if not path:
        return FileGateConfig()
    return load_config(Path(path))
