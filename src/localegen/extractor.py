"""Structural metadata of translation values.

Extraction is textual: parameter names are matched with a regular expression
selected by the configured interpolation syntax, and ICU ``plural``/``select``
blocks are only split into their branches. Nothing here validates ICU grammar
and nothing here raises on malformed input; what does not match is ignored.
"""

import re
from collections.abc import Iterator, Mapping

from localegen.classes import MessageMetadata, PluralForm, TranslationParam
from localegen.config import InterpolationSyntax

# {name} or {name, hint ...
SINGLE_BRACE = re.compile(r"\{\s*(\w+)\s*(?:,\s*(\w+))?\s*([,}])", re.ASCII)
# {{name}} or {{name, hint}}
DOUBLE_BRACE = re.compile(r"\{\{\s*(\w+)\s*(?:,\s*(\w+)[^{}]*)?\}\}", re.ASCII)

BRANCH = re.compile(r"\s*(?:offset:\s*\d+\s*)?(=?[\w-]+)\s*\{", re.ASCII)

NUMBER_HINTS = {"number", "plural", "selectordinal"}
DATE_HINTS = {"date", "time", "datetime"}
BRANCHED_HINTS = {"plural", "select", "selectordinal"}
PLURAL_HINTS = {"plural", "selectordinal"}


def interpolation_pattern(syntax: InterpolationSyntax = "single") -> re.Pattern[str]:
    return DOUBLE_BRACE if syntax == "double" else SINGLE_BRACE


def param_type(hint: str | None) -> str:
    if hint in NUMBER_HINTS:
        return "number"
    if hint in DATE_HINTS:
        return "date"
    return "string"


def _matching_brace(text: str, open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return -1


def _branches(text: str, start: int, end: int) -> Iterator[tuple[str, str]]:
    pos = start
    while pos < end:
        match = BRANCH.match(text, pos)
        if match is None or match.end() > end:
            return
        close = _matching_brace(text, match.end() - 1)
        if close == -1 or close > end:
            return
        yield match.group(1), text[match.end():close]
        pos = close + 1


def _add(found: dict[str, str], name: str, hint: str | None) -> None:
    kind = param_type(hint)
    if name not in found or (found[name] == "string" and kind != "string"):
        found[name] = kind


def _scan_single(text: str, found: dict[str, str]) -> None:
    pos = 0
    while True:
        match = SINGLE_BRACE.search(text, pos)
        if match is None:
            return
        name, hint, terminator = match.groups()
        _add(found, name, hint)
        if hint in BRANCHED_HINTS and terminator == ",":
            close = _matching_brace(text, match.start())
            if close == -1:
                return
            for _, body in _branches(text, match.end(), close):
                _scan_single(body, found)
            pos = close + 1
        else:
            pos = match.end()


def _scan(value: str, syntax: InterpolationSyntax) -> dict[str, str]:
    found: dict[str, str] = {}
    if syntax == "double":
        for match in DOUBLE_BRACE.finditer(value):
            _add(found, match.group(1), match.group(2))
    else:
        _scan_single(value, found)
    return found


def parse_parameters(value: str, syntax: InterpolationSyntax = "single") -> list[str]:
    return list(_scan(value, syntax))


def extract_params(value: str, syntax: InterpolationSyntax = "single") -> list[TranslationParam]:
    return [TranslationParam(name, kind) for name, kind in _scan(value, syntax).items()]


def extract_plural_forms(value: str, syntax: InterpolationSyntax = "single") -> list[PluralForm]:
    """Branches of the first ICU plural block in ``value``, verbatim."""
    if syntax == "double":
        return []
    for match in SINGLE_BRACE.finditer(value):
        if match.group(2) in PLURAL_HINTS and match.group(3) == ",":
            close = _matching_brace(value, match.start())
            if close == -1:
                return []
            return [PluralForm(category, body) for category, body in _branches(value, match.end(), close)]
    return []


def extract_metadata(
    translations: Mapping[str, str], syntax: InterpolationSyntax = "single"
) -> dict[str, MessageMetadata]:
    return {
        key: MessageMetadata(
            key=key,
            value=value,
            params=extract_params(value, syntax),
            plural_forms=extract_plural_forms(value, syntax),
        )
        for key, value in translations.items()
    }
