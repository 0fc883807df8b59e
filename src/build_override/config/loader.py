"""Load the YAML configuration for build-override."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

from ..build.invoker import DEFAULT_COMMAND, validate_command
from ..overrides.store import MSBUILD_NAMESPACE, check_setting

CONFIG_DIR = Path("configs")
CONFIG_PATH = CONFIG_DIR / "build_override.yml"
CONFIG_ENV = "BUILD_OVERRIDE_CONFIG"
DB_PATH_ENV = "BUILD_OVERRIDE_DB_PATH"


class ProjectConfig(BaseModel):
    path: Optional[str] = Field(None, description="Selected project file or directory")


class OverrideConfig(BaseModel):
    setting: str = "MvcBuildViews"
    value: str = "true"
    namespace: str = MSBUILD_NAMESPACE
    user_file_suffix: str = ".user"

    @model_validator(mode="after")
    def validate_setting(self) -> OverrideConfig:
        check_setting(self.setting, self.value)
        return self


class BuildConfig(BaseModel):
    command: List[str] = Field(default_factory=lambda: list(DEFAULT_COMMAND), min_length=1)
    configuration: str = "Debug"
    timeout: Optional[int] = None

    @field_validator("command")
    @classmethod
    def validate_command_template(cls, v: List[str]) -> List[str]:
        """Reject unknown placeholders before anything is built."""
        return validate_command(v)


class NotifyConfig(BaseModel):
    locale: str = "en"


class HistoryConfig(BaseModel):
    enabled: bool = True
    db_path: str = "build_override.db"


class ConfigBundle(BaseModel):
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    override: OverrideConfig = Field(default_factory=OverrideConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    notify: NotifyConfig = Field(default_factory=NotifyConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _merge_dict(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge_dict(base.get(key, {}), value)
        else:
            base[key] = value
    return base


def load_config_bundle(config_path: Path | None = None) -> ConfigBundle:
    """Merge the YAML file (if any) over the built-in defaults.

    An explicit ``config_path`` must exist; the default location and the
    ``BUILD_OVERRIDE_CONFIG`` path are optional.
    """
    load_dotenv()
    data = ConfigBundle().model_dump()
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file {config_path} not found")
        data = _merge_dict(data, load_yaml(config_path))
    else:
        file_path = Path(os.getenv(CONFIG_ENV, CONFIG_PATH))
        if file_path.exists():
            data = _merge_dict(data, load_yaml(file_path))
    db_path = os.getenv(DB_PATH_ENV)
    if db_path:
        data["history"]["db_path"] = db_path
    return ConfigBundle(**data)
