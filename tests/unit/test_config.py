"""Tests for generator and client configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from protobind.config import (
    DEFAULT_CLASS_NAME,
    DEFAULT_DOCUMENTS,
    DEFAULT_VERSION,
    ClientConfig,
    GeneratorConfig,
)


class TestGeneratorConfigDefaults:
    def test_defaults(self) -> None:
        config = GeneratorConfig()

        assert config.version == DEFAULT_VERSION
        assert config.documents == DEFAULT_DOCUMENTS
        assert config.class_name == DEFAULT_CLASS_NAME
        assert config.schema_files == ()
        assert config.refresh is False
        assert "{version}" in config.source_url
        assert "{document}" in config.source_url

    def test_from_env(self, tmp_path: Path) -> None:
        config = GeneratorConfig.from_env(
            {
                "PROTOBIND_SOURCE_URL": "https://mirror.test/{version}/{document}",
                "PROTOBIND_CACHE_DIR": str(tmp_path),
                "PROTOBIND_VERSION": "r1",
                "PROTOBIND_OUTPUT": "out/cdp.py",
            }
        )

        assert config.source_url == "https://mirror.test/{version}/{document}"
        assert config.cache_dir == tmp_path
        assert config.version == "r1"
        assert config.output == Path("out/cdp.py")

    def test_from_env_empty(self) -> None:
        assert GeneratorConfig.from_env({}) == GeneratorConfig()


class TestGeneratorConfigLoad:
    """Layering: environment, YAML file, explicit overrides."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "protobind.yaml"
        path.write_text(
            "version: '1.3'\n"
            "class_name: CDP\n"
            "documents:\n"
            "  - browser_protocol.json\n"
            "schema_files:\n"
            "  - a.json\n"
            "  - b.json\n"
        )

        config = GeneratorConfig.load(path, environ={})

        assert config.version == "1.3"
        assert config.class_name == "CDP"
        assert config.documents == ("browser_protocol.json",)
        assert config.schema_files == (Path("a.json"), Path("b.json"))

    def test_generator_section(self, tmp_path: Path) -> None:
        path = tmp_path / "protobind.yaml"
        path.write_text("generator:\n  output: gen/cdp.py\n")

        config = GeneratorConfig.load(path, environ={})

        assert config.output == Path("gen/cdp.py")

    def test_overrides_win(self, tmp_path: Path) -> None:
        path = tmp_path / "protobind.yaml"
        path.write_text("version: from-file\nclass_name: FromFile\n")

        config = GeneratorConfig.load(
            path,
            environ={"PROTOBIND_VERSION": "from-env"},
            version="from-flag",
            class_name=None,
        )

        assert config.version == "from-flag"
        assert config.class_name == "FromFile"

    def test_file_beats_env(self, tmp_path: Path) -> None:
        path = tmp_path / "protobind.yaml"
        path.write_text("version: from-file\n")

        config = GeneratorConfig.load(path, environ={"PROTOBIND_VERSION": "from-env"})

        assert config.version == "from-file"

    def test_unknown_keys_warned(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "protobind.yaml"
        path.write_text("colour: blue\n")

        config = GeneratorConfig.load(path, environ={})

        assert config.version == DEFAULT_VERSION
        assert "colour" in caplog.text

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "protobind.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            GeneratorConfig.load(path, environ={})

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "protobind.yaml"
        path.write_text("")

        assert GeneratorConfig.load(path, environ={}).version == DEFAULT_VERSION


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig()
        assert config.timeout == 30.0
        assert config.max_message_size is None

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("12.5", 12.5), ("none", None), ("0", None), ("0.0", None), ("", None)],
    )
    def test_request_timeout_from_env(self, raw: str, expected: float | None) -> None:
        assert ClientConfig.from_env({"PROTOBIND_REQUEST_TIMEOUT": raw}).timeout == expected

    def test_env_unset(self) -> None:
        assert ClientConfig.from_env({}).timeout == 30.0
