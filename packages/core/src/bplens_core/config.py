from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from bplens_core.errors import ConfigError

DEFAULT_CONFIG: dict = {
    "modelpath": None,  # root of the packages directory, e.g. C:/AOSService/PackagesLocalDirectory
    "models": [],  # list of {"name": ..., "alias": ...}
}

REPORT_FILENAME = "BPCheck.xml"
SUPPRESSIONS_DIR = "AxIgnoreDiagnosticList"


@dataclass(frozen=True)
class ModelPaths:
    """Files belonging to one model under the configured model path."""

    root: Path
    report: Path
    suppressions: Path


def load_config(config_path: str = ".bplens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .bplens.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "models": list(DEFAULT_CONFIG["models"])}

    path = Path(config_path)
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping at the top level")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def validate_config(config: dict) -> None:
    """Raise ConfigError unless config names an existing model path and a well-formed model list."""
    modelpath = config.get("modelpath")
    if not modelpath:
        raise ConfigError("No modelpath configured. Set 'modelpath' in .bplens.yml.")

    models = config.get("models")
    if not isinstance(models, list):
        raise ConfigError("'models' in .bplens.yml must be a list")
    for i, model in enumerate(models, 1):
        if not isinstance(model, dict) or not model.get("name"):
            raise ConfigError(f"Model #{i} in .bplens.yml has no name")

    if not Path(modelpath).exists():
        raise ConfigError("Base model path in config doesn't exist")


def list_models(config: dict) -> list[str]:
    """Return configured model names in configuration order."""
    return [str(m["name"]) for m in config.get("models") or []]


def resolve_model(config: dict, name_or_alias: str) -> str:
    """Return the model name matching a name or alias."""
    for model in config.get("models") or []:
        if name_or_alias in (model.get("name"), model.get("alias")):
            return str(model["name"])
    raise ConfigError(f"Could not find model '{name_or_alias}' in .bplens.yml")


def model_paths(config: dict, model: str) -> ModelPaths:
    """Resolve the report and suppression file locations for model.

    Directories are checked here; whether the files themselves exist is left
    to the loaders so they can report which file is missing.
    """
    modelpath = config.get("modelpath")
    if not modelpath or not Path(modelpath).exists():
        raise ConfigError("Base model path in config doesn't exist")

    root = Path(modelpath) / model
    if not root.exists():
        raise ConfigError("Model in config doesn't exist")

    return ModelPaths(
        root=root,
        report=root / REPORT_FILENAME,
        suppressions=root / model / SUPPRESSIONS_DIR / f"{model}_BPSuppressions.xml",
    )
