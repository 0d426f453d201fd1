"""Tests for configuration loading and model path resolution."""

import pytest

from bplens_core.config import list_models, load_config, model_paths, resolve_model, validate_config
from bplens_core.errors import ConfigError


def _write_config(tmp_path, text):
    cfg = tmp_path / ".bplens.yml"
    cfg.write_text(text)
    return str(cfg)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["modelpath"] is None
    assert config["models"] == []


def test_config_file_overrides_defaults(tmp_path):
    path = _write_config(tmp_path, "modelpath: /srv/models\nmodels:\n  - name: Contoso\n    alias: c\n")
    config = load_config(config_path=path)
    assert config["modelpath"] == "/srv/models"
    assert config["models"] == [{"name": "Contoso", "alias": "c"}]


def test_cli_overrides_config_file(tmp_path):
    path = _write_config(tmp_path, "modelpath: /srv/models\n")
    config = load_config(config_path=path, cli_overrides={"modelpath": "/other"})
    assert config["modelpath"] == "/other"


def test_none_cli_overrides_ignored(tmp_path):
    path = _write_config(tmp_path, "modelpath: /srv/models\n")
    config = load_config(config_path=path, cli_overrides={"modelpath": None})
    assert config["modelpath"] == "/srv/models"


def test_invalid_yaml_raises_config_error(tmp_path):
    path = _write_config(tmp_path, "models: [unclosed\n")
    with pytest.raises(ConfigError):
        load_config(config_path=path)


def test_non_mapping_yaml_raises_config_error(tmp_path):
    path = _write_config(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigError):
        load_config(config_path=path)


def test_models_list_is_not_shared_reference(tmp_path):
    """Mutating one config's model list must not affect another."""
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["models"].append({"name": "X"})
    assert config_b["models"] == []


class TestValidateConfig:
    def test_missing_modelpath(self):
        with pytest.raises(ConfigError, match="modelpath"):
            validate_config({"modelpath": None, "models": []})

    def test_modelpath_must_exist(self, tmp_path):
        with pytest.raises(ConfigError, match="Base model path"):
            validate_config({"modelpath": str(tmp_path / "missing"), "models": []})

    def test_models_must_be_list(self, tmp_path):
        with pytest.raises(ConfigError, match="list"):
            validate_config({"modelpath": str(tmp_path), "models": {"name": "x"}})

    def test_model_without_name(self, tmp_path):
        with pytest.raises(ConfigError, match="#2"):
            validate_config({"modelpath": str(tmp_path), "models": [{"name": "a"}, {"alias": "b"}]})

    def test_valid_config_passes(self, tmp_path):
        validate_config({"modelpath": str(tmp_path), "models": [{"name": "a", "alias": "x"}]})


class TestModelLookup:
    CONFIG = {"modelpath": "/srv", "models": [{"name": "ContosoCore", "alias": "cc"}, {"name": "Fabrikam"}]}

    def test_list_models_in_order(self):
        assert list_models(self.CONFIG) == ["ContosoCore", "Fabrikam"]

    def test_resolve_by_name(self):
        assert resolve_model(self.CONFIG, "Fabrikam") == "Fabrikam"

    def test_resolve_by_alias(self):
        assert resolve_model(self.CONFIG, "cc") == "ContosoCore"

    def test_unknown_model(self):
        with pytest.raises(ConfigError, match="nope"):
            resolve_model(self.CONFIG, "nope")


class TestModelPaths:
    def test_paths_follow_package_layout(self, tmp_path):
        (tmp_path / "Contoso").mkdir()
        paths = model_paths({"modelpath": str(tmp_path)}, "Contoso")

        assert paths.report == tmp_path / "Contoso" / "BPCheck.xml"
        assert paths.suppressions == (
            tmp_path / "Contoso" / "Contoso" / "AxIgnoreDiagnosticList" / "Contoso_BPSuppressions.xml"
        )

    def test_missing_base_path(self, tmp_path):
        with pytest.raises(ConfigError, match="Base model path in config doesn't exist"):
            model_paths({"modelpath": str(tmp_path / "gone")}, "Contoso")

    def test_missing_model_directory(self, tmp_path):
        with pytest.raises(ConfigError, match="Model in config doesn't exist"):
            model_paths({"modelpath": str(tmp_path)}, "Contoso")
