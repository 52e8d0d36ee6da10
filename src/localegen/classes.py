from dataclasses import dataclass, field
from pathlib import Path

from localegen.config import Config

ParsedTranslations = dict[str, str]


@dataclass
class DiscoveredProject:
    id: str
    name: str
    path: Path
    config_path: Path
    config: Config

    @property
    def is_root(self) -> bool:
        return self.id == "root"


@dataclass
class LocaleInfo:
    locale: str
    files: list[Path]


@dataclass
class LocaleTranslations:
    locale: str
    translations: ParsedTranslations = field(default_factory=dict)
    collisions: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class TranslationParam:
    name: str
    type: str = "string"


@dataclass
class PluralForm:
    category: str
    value: str


@dataclass
class MessageMetadata:
    key: str
    value: str
    params: list[TranslationParam]
    plural_forms: list[PluralForm] = field(default_factory=list)


@dataclass
class CompileResult:
    success: bool
    output_path: str
    keys_count: int
    errors: list[str] | None = None
    collisions: int = 0
