class LocalegenError(Exception):
    pass


class ConfigError(LocalegenError):
    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class TranslationParseError(LocalegenError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Error parsing {path}: {reason}")
