"""Source text of the generated Python package.

Three kinds of modules are produced into the output directory:

``messages.py``
    one keyword-only accessor function per source key, plus the explicit
    ``MESSAGE_FUNCTIONS`` mapping from key to function;
``<locale>.py``
    the locale tag and that locale's flat key/value map;
``__init__.py``
    the index, re-exporting the accessors and every locale module.

All functions here are pure; writing the files is the compiler's job.
"""

import json
import keyword
import logging
import re
from collections.abc import Iterable, Mapping

from localegen.config import InterpolationSyntax
from localegen.extractor import extract_params

logger = logging.getLogger(__name__)

HEADER = [
    "# Auto-generated by localegen",
    "# Do not edit manually",
]

MESSAGES_MODULE = "messages"
INDEX_MODULE = "__init__"

RUNTIME_PATTERNS = {
    "single": r"\{\s*(\w+)\s*(?:,\s*(?!(?:plural|select|selectordinal)\b)\w+[^{}]*)?\}",
    "double": r"\{\{\s*(\w+)\s*(?:,[^{}]*)?\}\}",
}

ANNOTATIONS = {
    "string": "str",
    "number": "int | float",
    "date": "_datetime.date | _datetime.datetime",
}

RESERVED_FUNCTION_NAMES = {
    "SOURCE_LOCALE",
    "MESSAGE_FUNCTIONS",
    "use_messages",
    "AVAILABLE_LOCALES",
    "CATALOGS",
    "Literal",
    "Locale",
    "set_locale",
    "str",
    "int",
    "float",
    "_format",
    "_source",
    "_active",
    "_PLACEHOLDER",
    "_datetime",
    "_re",
    "_Callable",
    "_Mapping",
}
RESERVED_ARGUMENT_NAMES = {"_format"}
RESERVED_MODULE_NAMES = {MESSAGES_MODULE}

_NON_IDENTIFIER = re.compile(r"\W", re.ASCII)


def quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def python_identifier(name: str, prefix: str, reserved: Iterable[str] = ()) -> str:
    identifier = _NON_IDENTIFIER.sub("_", name)
    if not identifier or identifier[0].isdigit():
        identifier = prefix + identifier
    if keyword.iskeyword(identifier) or identifier in reserved:
        identifier += "_"
    return identifier


def _unique(names: Iterable[str], prefix: str, reserved: Iterable[str] = ()) -> dict[str, str]:
    result: dict[str, str] = {}
    used: set[str] = set()
    for name in names:
        identifier = python_identifier(name, prefix, reserved)
        if identifier in used:
            suffix = 2
            while f"{identifier}_{suffix}" in used:
                suffix += 1
            logger.warning(f"{name} collides with another name as {identifier}, using {identifier}_{suffix}")
            identifier = f"{identifier}_{suffix}"
        used.add(identifier)
        result[name] = identifier
    return result


def function_names(keys: Iterable[str], reserved: Iterable[str] = ()) -> dict[str, str]:
    return _unique(keys, "key_", RESERVED_FUNCTION_NAMES | set(reserved))


def module_names(locales: Iterable[str]) -> dict[str, str]:
    return _unique(locales, "locale_", RESERVED_MODULE_NAMES)


def _literal(values: Iterable[str]) -> str:
    quoted = [quote(value) for value in values]
    if not quoted:
        return "str"
    return f"Literal[{', '.join(quoted)}]"


def _accessor(key: str, value: str, function: str, syntax: InterpolationSyntax) -> list[str]:
    params = extract_params(value, syntax)
    arguments = _unique((param.name for param in params), "arg_", RESERVED_ARGUMENT_NAMES)
    signature = ", ".join(
        f"{arguments[param.name]}: {ANNOTATIONS[param.type]}" for param in params
    )
    if signature:
        signature = f"*, {signature}"
    values = ", ".join(f"{quote(param.name)}: {arguments[param.name]}" for param in params)
    return [
        "",
        "",
        f"def {function}({signature}) -> str:",
        f"    {quote(value)}",
        f"    return _format({quote(key)}, {{{values}}})",
    ]


def generate_messages_module(
    translations: Mapping[str, str],
    source_locale: str,
    syntax: InterpolationSyntax = "single",
    modules: Iterable[str] = (),
) -> str:
    """Accessor module; ``modules`` are the locale module names the index binds."""
    names = function_names(translations, modules)
    lines = [
        *HEADER,
        "from __future__ import annotations",
        "",
        "import datetime as _datetime",
        "import re as _re",
        "from collections.abc import Callable as _Callable",
        "from collections.abc import Mapping as _Mapping",
        "",
        f"SOURCE_LOCALE = {quote(source_locale)}",
        "",
        f"_PLACEHOLDER = _re.compile({quote(RUNTIME_PATTERNS[syntax])}, _re.ASCII)",
        "",
        "_source: dict[str, str] = {",
    ]
    lines.extend(f"    {quote(key)}: {quote(value)}," for key, value in translations.items())
    lines.extend(
        [
            "}",
            "_active: _Mapping[str, str] = _source",
            "",
            "",
            "def use_messages(messages: _Mapping[str, str]) -> None:",
            "    global _active",
            "    _active = messages",
            "",
            "",
            "def _format(key: str, params: _Mapping[str, object]) -> str:",
            "    template = _active.get(key, _source[key])",
            "    if not params:",
            "        return template",
            "",
            "    def replace(match: _re.Match[str]) -> str:",
            "        name = match.group(1)",
            "        return f\"{params[name]}\" if name in params else match.group(0)",
            "",
            "    return _PLACEHOLDER.sub(replace, template)",
        ]
    )

    for key, value in translations.items():
        lines.extend(_accessor(key, value, names[key], syntax))

    lines.extend(["", "", "MESSAGE_FUNCTIONS: dict[str, _Callable[..., str]] = {"])
    lines.extend(f"    {quote(key)}: {names[key]}," for key in translations)
    lines.append("}")
    lines.append("")
    exported = ["SOURCE_LOCALE", "MESSAGE_FUNCTIONS", "use_messages", *names.values()]
    lines.append("__all__ = [")
    lines.extend(f"    {quote(name)}," for name in exported)
    lines.append("]")
    lines.append("")
    return "\n".join(lines)


def generate_locale_module(locale: str, translations: Mapping[str, str]) -> str:
    lines = [
        *HEADER,
        "from typing import Literal",
        "",
        f"LOCALE = {quote(locale)}",
        "",
        "messages: dict[str, str] = {",
    ]
    lines.extend(f"    {quote(key)}: {quote(value)}," for key, value in translations.items())
    lines.append("}")
    lines.append("")
    lines.append(f"MessageKey = {_literal(translations)}")
    lines.append("")
    return "\n".join(lines)


def generate_index_module(locales: Mapping[str, str]) -> str:
    """Index for ``locales``, a mapping of locale code to module name."""
    lines = [
        *HEADER,
        "from typing import Literal",
        "",
        "from .messages import *  # noqa: F401,F403",
        "from .messages import use_messages",
    ]
    if locales:
        lines.append(f"from . import {', '.join(locales.values())}")
    lines.append("")
    codes = ", ".join(quote(locale) for locale in locales)
    if len(locales) == 1:
        codes += ","
    lines.append(f"AVAILABLE_LOCALES = ({codes})")
    lines.append(f"Locale = {_literal(locales)}")
    lines.append("")
    lines.append("CATALOGS = {")
    lines.extend(f"    {quote(locale)}: {module}.messages," for locale, module in locales.items())
    lines.extend(
        [
            "}",
            "",
            "",
            "def set_locale(locale: Locale) -> None:",
            "    use_messages(CATALOGS[locale])",
            "",
        ]
    )
    return "\n".join(lines)
