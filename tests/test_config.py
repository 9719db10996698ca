"""Tests for FileGate configuration loading."""

from pathlib import Path

import pytest
import yaml

from filegate.config import FileGateConfig, load_config, load_config_from_env


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "filegate.yaml"
    path.write_text(yaml.dump(data))
    return path


class TestLoadConfig:
    def test_load_example_config(self):
        config = load_config(Path(__file__).resolve().parent.parent / "filegate.example.yaml")
        assert config.server.port == 8080
        assert config.logging.format == "text"
        assert config.storage.backend == "local"
        assert config.storage.container == "files"
        assert config.storage.local_root == "./data/files"
        assert config.storage.aws_region == "us-east-1"
        assert config.observability.metrics is True

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config == FileGateConfig()

    def test_nested_aws_section(self, tmp_path):
        config = load_config(
            _write(
                tmp_path,
                {
                    "storage": {
                        "backend": "aws",
                        "aws": {
                            "region": "eu-central-1",
                            "endpoint_url": "http://minio:9000",
                            "use_path_style": True,
                        },
                    }
                },
            )
        )
        assert config.storage.aws_region == "eu-central-1"
        assert config.storage.aws_endpoint_url == "http://minio:9000"
        assert config.storage.aws_use_path_style is True

    def test_logging_section(self, tmp_path):
        config = load_config(_write(tmp_path, {"logging": {"level": "DEBUG", "format": "json"}}))
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_defaults_instance(self):
        config = FileGateConfig()
        assert config.server.host == "0.0.0.0"
        assert config.storage.backend == "aws"
        assert config.storage.container == ""


class TestLoadConfigFromEnv:
    def test_unset_gives_defaults(self):
        assert load_config_from_env({}) == FileGateConfig()

    def test_reads_named_file(self, tmp_path):
        path = _write(tmp_path, {"storage": {"container": "c1"}})
        config = load_config_from_env({"FILEGATE_CONFIG": str(path)})
        assert config.storage.container == "c1"
