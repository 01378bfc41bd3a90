"""Storage configuration system."""

import os
from pathlib import Path
from typing import Any

import yaml

from .base import StorageConfig

DEFAULT_LOCAL_BASE_PATH = "/tmp/talawa/storage"


def load_storage_config(
    config_path: Path | None = None, env_prefix: str = "TALAWA_STORAGE_"
) -> StorageConfig:
    """Load storage configuration from file and environment variables.

    Args:
        config_path: Path to YAML configuration file
        env_prefix: Prefix for environment variable overrides

    Returns:
        StorageConfig instance
    """
    config_data: dict[str, Any] = {
        "default_provider": "local",
        "providers": {
            "local": {
                "type": "local",
                "config": {"base_path": DEFAULT_LOCAL_BASE_PATH},
            }
        },
    }

    if config_path and config_path.exists():
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to load storage config from {config_path}: {e}") from e
        if file_config.get("storage"):
            config_data.update(file_config["storage"])

    config_data = _apply_env_overrides(config_data, env_prefix)

    return StorageConfig(
        default_provider=config_data["default_provider"],
        providers=config_data["providers"],
    )


def _apply_env_overrides(config_data: dict[str, Any], env_prefix: str) -> dict[str, Any]:
    """Apply environment variable overrides to configuration."""

    default_provider = os.getenv(f"{env_prefix}DEFAULT_PROVIDER")
    if default_provider:
        config_data["default_provider"] = default_provider

    # S3 / MinIO
    s3_bucket = os.getenv(f"{env_prefix}S3_BUCKET")
    if s3_bucket:
        s3_config = {
            "bucket": s3_bucket,
            "region": os.getenv(f"{env_prefix}S3_REGION") or "us-east-1",
            "aws_access_key_id": os.getenv("AWS_ACCESS_KEY_ID"),
            "aws_secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY"),
        }
        endpoint_url = os.getenv(f"{env_prefix}S3_ENDPOINT_URL")
        if endpoint_url:
            s3_config["endpoint_url"] = endpoint_url
        config_data["providers"]["s3"] = {"type": "s3", "config": s3_config}

    local_base_path = os.getenv(f"{env_prefix}LOCAL_BASE_PATH")
    if local_base_path:
        local_config = config_data["providers"].get("local", {}).get("config", {})
        local_config["base_path"] = local_base_path
        config_data["providers"]["local"] = {"type": "local", "config": local_config}

    return config_data


def create_example_config() -> str:
    """Create an example storage configuration YAML."""

    config = {
        "storage": {
            "default_provider": "minio",
            "providers": {
                "local": {
                    "type": "local",
                    "config": {"base_path": "/var/talawa/storage"},
                },
                "minio": {
                    "type": "s3",
                    "config": {
                        "bucket": "talawa",
                        "region": "us-east-1",
                        "endpoint_url": "http://localhost:9000",
                        "aws_access_key_id": "${AWS_ACCESS_KEY_ID}",
                        "aws_secret_access_key": "${AWS_SECRET_ACCESS_KEY}",
                    },
                },
            },
        }
    }

    return yaml.dump(config, default_flow_style=False, indent=2)
