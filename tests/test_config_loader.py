"""
Tests for YAML config loading.
"""

import pytest

from train_invoke.config import check_config_path, load_config
from train_invoke.errors import ConfigExtensionInvalid, ConfigNotFound, ConfigParseError


class TestCheckConfigPath:
    """Existence is checked before the extension."""

    def test_missing_yaml_is_not_found(self, tmp_path):
        with pytest.raises(ConfigNotFound, match="Config file not found"):
            check_config_path(tmp_path / "missing.yaml")

    def test_missing_txt_is_not_found_not_extension(self, tmp_path):
        with pytest.raises(ConfigNotFound):
            check_config_path(tmp_path / "missing.txt")

    def test_existing_txt_is_extension_invalid(self, tmp_path):
        path = tmp_path / "run.txt"
        path.write_text("a: 1\n")
        with pytest.raises(ConfigExtensionInvalid, match=r"\.yaml/\.yml"):
            check_config_path(path)

    def test_directory_is_not_found(self, tmp_path):
        (tmp_path / "dir.yaml").mkdir()
        with pytest.raises(ConfigNotFound):
            check_config_path(tmp_path / "dir.yaml")

    def test_yml_accepted(self, write_yaml):
        path = write_yaml("a: 1\n", name="run.yml")
        assert check_config_path(path) == path


class TestLoadConfig:
    """Tests for parsing into an ordered flat mapping."""

    def test_preserves_document_order(self, write_yaml):
        path = write_yaml(
            """
            zeta: 1
            alpha: two
            mid: true
            """
        )
        cfg = load_config(path)
        assert list(cfg.keys()) == ["zeta", "alpha", "mid"]
        assert cfg["zeta"] == 1
        assert cfg["alpha"] == "two"
        assert cfg["mid"] is True

    def test_scalar_types_kept(self, write_yaml):
        path = write_yaml(
            """
            lr: 0.001
            epochs: 3
            name: ''
            nothing: null
            """
        )
        cfg = load_config(path)
        assert cfg["lr"] == pytest.approx(0.001)
        assert cfg["epochs"] == 3
        assert cfg["name"] == ""
        assert cfg["nothing"] is None

    def test_interpolation_resolved(self, write_yaml):
        path = write_yaml(
            """
            base: /data
            root_dir: ${base}/office31
            """
        )
        assert load_config(path)["root_dir"] == "/data/office31"

    def test_unresolvable_interpolation_kept_literal(self, write_yaml):
        path = write_yaml(
            """
            tag: run_${USER}
            root_dir: ${nope}
            epochs: 3
            """
        )
        cfg = load_config(path)
        assert cfg["tag"] == "run_${USER}"
        assert cfg["root_dir"] == "${nope}"
        assert cfg["epochs"] == 3

    def test_missing_marker_kept_literal(self, write_yaml):
        path = write_yaml("ckpt: '???'\n")
        assert load_config(path)["ckpt"] == "???"

    def test_non_string_keys_stringified(self, write_yaml):
        path = write_yaml("1: one\n")
        assert load_config(path) == {"1": "one"}

    def test_empty_document_is_empty_mapping(self, write_yaml):
        path = write_yaml("")
        assert load_config(path) == {}

    def test_invalid_yaml(self, write_yaml):
        path = write_yaml("a: [1, 2\n")
        with pytest.raises(ConfigParseError):
            load_config(path)

    def test_duplicate_key_rejected(self, write_yaml):
        path = write_yaml("lr: 0.1\nlr: 0.2\n")
        with pytest.raises(ConfigParseError, match="duplicate key"):
            load_config(path)

    def test_list_root_rejected(self, write_yaml):
        path = write_yaml("- a\n- b\n")
        with pytest.raises(ConfigParseError, match="mapping"):
            load_config(path)

    def test_nested_mapping_rejected(self, write_yaml):
        path = write_yaml(
            """
            outer:
              inner: 1
            """
        )
        with pytest.raises(ConfigParseError, match="outer"):
            load_config(path)

    def test_list_value_rejected(self, write_yaml):
        path = write_yaml("gpus: [0, 1]\n")
        with pytest.raises(ConfigParseError, match="gpus"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigNotFound):
            load_config(tmp_path / "nope.yaml")
