"""Project configuration: schema, defaults, loading and saving.

A project is configured by one JSON document found in its root under one of
``CONFIG_FILE_NAMES``. Keys are camelCase on disk and snake_case in Python.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from localegen.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("localegen.config.json", ".localegenrc", ".localegenrc.json")

InterpolationSyntax = Literal["single", "double"]
FileLayout = Literal["flat", "namespaced"]


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class AIConfig(_Schema):
    provider: Literal["openai", "anthropic", "copilot"] = "openai"
    model: StrictStr | None = None
    api_key: StrictStr | None = None


class Config(_Schema):
    source_locale: StrictStr = "en"
    target_locales: list[StrictStr] = Field(default_factory=list)
    locales_dir: StrictStr = "./locales"
    output_dir: StrictStr = "./src/generated/i18n"
    include: list[StrictStr] = Field(default_factory=lambda: ["src/**/*.py"])
    exclude: list[StrictStr] = Field(default_factory=lambda: [".venv", "build", "dist"])
    interpolation: InterpolationSyntax = "single"
    layout: FileLayout = "flat"
    ai: AIConfig | None = None

    @field_validator("target_locales")
    @classmethod
    def _drop_source_locale(cls, value: list[str], info: ValidationInfo) -> list[str]:
        source = info.data.get("source_locale")
        targets: list[str] = []
        for locale in value:
            if locale == source:
                logger.warning(f"Source locale {locale} listed as a target locale, ignoring it")
                continue
            if locale not in targets:
                targets.append(locale)
        return targets

    @property
    def locales(self) -> list[str]:
        return [self.source_locale, *self.target_locales]

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


DEFAULT_CONFIG = Config()


@dataclass
class ConfigCheck:
    config: Config | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.config is not None


def _describe(exc: ValidationError) -> list[str]:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        errors.append(f"{location}: {error['msg']}")
    return errors


def check_config(raw: Any) -> ConfigCheck:
    """Validate ``raw`` without raising; the result carries either a config or errors."""
    if not isinstance(raw, dict):
        return ConfigCheck(errors=[f"expected a JSON object, got {type(raw).__name__}"])
    try:
        return ConfigCheck(config=Config.model_validate(raw))
    except ValidationError as exc:
        return ConfigCheck(errors=_describe(exc))


def validate_config(raw: Any, path: str | None = None) -> Config:
    result = check_config(raw)
    if result.config is None:
        raise ConfigError("invalid configuration: " + "; ".join(result.errors), path)
    return result.config


def find_config_file(project_root: str | Path) -> Path | None:
    root = Path(project_root)
    for file_name in CONFIG_FILE_NAMES:
        config_path = root / file_name
        if config_path.is_file():
            return config_path
    return None


def read_config_file(config_path: str | Path) -> Config:
    config_path = Path(config_path)
    try:
        raw = json.loads(config_path.read_text("utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read configuration: {exc.strerror}", str(config_path)) from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON: {exc}", str(config_path)) from exc
    return validate_config(raw, str(config_path))


def load_config(project_root: str | Path) -> Config:
    config_path = find_config_file(project_root)
    if config_path is None:
        logger.debug(f"No configuration file in {project_root}, using defaults")
        return DEFAULT_CONFIG
    logger.debug(f"Loading configuration from {config_path}")
    return read_config_file(config_path)


def save_config(
    project_root: str | Path, config: Config, file_name: str = CONFIG_FILE_NAMES[0]
) -> Path:
    config_path = Path(project_root) / file_name
    config_path.write_text(json.dumps(config.to_document(), indent=2) + "\n", "utf-8")
    return config_path
