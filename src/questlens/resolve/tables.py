"""Static language data consulted while classifying lines.

The resolvers only need three questions answered:
- is this first word a symbol-defining keyword, and which parameter types
  does the matching definition declare (``DefinitionTable``);
- is this line an action or condition invocation, and which parameter type
  sits at a given word position (``ActionTable``);
- which numeric id does a static message alias stand for, and vice versa
  (``MessageAliasTable``).

Hosts may supply their own implementations. The file-backed ones below read
the formats shipped with the quest tooling: ``definitions.json`` keyword
definitions, ``*.dfmodule.json`` action modules and the comma-separated
``Quests-*.txt`` tables.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from questlens.config.constants import GLOBAL_VARS_TABLE, MODULE_SUFFIX, STATIC_MESSAGES_TABLE
from questlens.core.errors import TableError
from questlens.resolve.scanner import get_first_word

if TYPE_CHECKING:
    from questlens.config.models import TablesConfig

logger = structlog.get_logger()


class ParameterTypes:
    """Signature placeholders naming the kind of each parameter."""

    NATURAL_NUMBER = "${nn}"
    INTEGER_NUMBER = "${dd}"
    QUEST_ID = "${questID}"
    QUEST_NAME = "${questName}"
    MESSAGE = "${message}"
    MESSAGE_ID = "${messageID}"
    MESSAGE_NAME = "${messageName}"
    SYMBOL = "${_symbol_}"
    CLOCK_SYMBOL = "${_clock_}"
    FOE_SYMBOL = "${_foe_}"
    ITEM_SYMBOL = "${_item_}"
    PERSON_SYMBOL = "${_person_}"
    PLACE_SYMBOL = "${_place_}"
    TASK = "${task}"


class ActionKind(str, Enum):
    """Category of a module entry."""

    CONDITION = "condition"
    ACTION = "action"


# =============================================================================
# Signatures
# =============================================================================

_PARAMS_TAIL = re.compile(r"\$\{\d:\.\.\.[a-zA-Z0-9_-]+\}$")
_CHOICE_OPEN = re.compile(r"\$\{\d\|")
_CHOICE_CLOSE = re.compile(r"\|\}")
_NAMED_PARAMETER = re.compile(r"\$\{\d:[a-zA-Z0-9_-]+?\}")
_PARAMETER_WORD = r"[a-zA-Z0-9_\-\+'\.]+"


def pretty_signature(signature: str) -> str:
    """``say ${1:message}`` -> ``say message``."""
    return re.sub(r"\|?\}", "", re.sub(r"\$\{\d(:|\|)?", "", signature))


def format_parameter(word: str) -> str:
    """``${1:message}`` -> ``${message}``; ``${2:...task}`` -> ``${task}``."""
    return re.sub(r"\$\{\d:(\.\.\.)?", "${", word, count=1)


@lru_cache(maxsize=1024)
def make_regex_from_signature(signature: str) -> re.Pattern[str]:
    """Convert a snippet signature to a pattern matching whole invocations."""
    if _PARAMS_TAIL.search(signature):
        # Trailing params parameter may repeat
        signature = signature[: signature.rfind(" ")] + r"(\s+" + _PARAMETER_WORD + ")+"

    signature = _CHOICE_OPEN.sub("(", signature)
    signature = _CHOICE_CLOSE.sub(")", signature)
    signature = signature.replace(",", "|")
    signature = _NAMED_PARAMETER.sub(lambda _: _PARAMETER_WORD, signature)
    return re.compile(r"^\s*" + signature + r"\s*$")


@dataclass(frozen=True, slots=True)
class ActionDetails:
    """An action or condition with one or more overloads."""

    summary: str
    overloads: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ActionInfo:
    """An action matched against a line, with the overload that matched."""

    module_name: str
    kind: ActionKind
    details: ActionDetails
    overload: int = 0

    @property
    def signature(self) -> str:
        return self.details.overloads[self.overload]


def get_parameter_at_position(action: ActionInfo, index: int) -> str | None:
    """Parameter type at a word index; a trailing params parameter repeats."""
    words = action.signature.split(" ")
    if 0 < index < len(words):
        return format_parameter(words[index])
    if index >= len(words) and re.match(r"^\$\{\d:\.\.\.", words[-1]):
        return format_parameter(words[-1])
    return None


def action_has_parameter_at_position(action: ActionInfo, index: int, *parameters: str) -> bool:
    """Check whether the parameter at ``index`` is one of the given types."""
    return get_parameter_at_position(action, index) in parameters


@dataclass(frozen=True, slots=True)
class Module:
    """A set of actions and conditions loaded from one module file."""

    display_name: str
    conditions: tuple[ActionDetails, ...] = ()
    actions: tuple[ActionDetails, ...] = ()


# =============================================================================
# Keyword definitions
# =============================================================================


@dataclass(frozen=True, slots=True)
class ParameterMatch:
    """A parameter slot declared by a keyword definition."""

    regex: str
    signature: str


@dataclass(frozen=True, slots=True)
class KeywordDefinition:
    """One signature of a symbol-defining keyword (``Item``, ``Clock``, ...)."""

    snippet: str
    summary: str = ""
    match: str | None = None
    matches: tuple[ParameterMatch, ...] = ()

    @property
    def pattern(self) -> re.Pattern[str]:
        if self.match:
            return re.compile(r"^\s*" + self.match + r"\s*$")
        return make_regex_from_signature(self.snippet)


# =============================================================================
# Collaborator protocols
# =============================================================================


class DefinitionTable(Protocol):
    """Recognizes symbol-defining keyword lines."""

    def find_definition(self, name: str, text: str) -> KeywordDefinition | None: ...


class ActionTable(Protocol):
    """Recognizes action and condition invocations."""

    def find_action(self, text: str, prefix: str | None = None) -> ActionInfo | None: ...


class MessageAliasTable(Protocol):
    """Maps static message aliases to numeric ids."""

    def get_id(self, name: str) -> int | None: ...

    def get_aliases(self, message_id: int) -> list[str]: ...


# =============================================================================
# File-backed implementations
# =============================================================================


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise TableError.file_not_found(str(path))
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise TableError.parse_error(str(path), str(e)) from e


def read_table_rows(path: Path) -> list[list[str]]:
    """Read a comma-separated quest table, skipping comments and the schema line."""
    if not path.exists():
        raise TableError.file_not_found(str(path))
    rows: list[list[str]] = []
    for text in path.read_text(encoding="utf-8", errors="replace").splitlines():
        if re.match(r"^\s*((-|schema).*)?$", text):
            continue
        rows.append([word.strip() for word in text.split(",")])
    return rows


class LanguageTable:
    """Keyword definitions keyed by first word."""

    def __init__(self, definitions: Mapping[str, list[KeywordDefinition]] | None = None) -> None:
        self._definitions = dict(definitions or {})

    @classmethod
    def from_file(cls, path: Path) -> LanguageTable:
        data = _read_json(path)
        if not isinstance(data, dict):
            raise TableError.parse_error(str(path), "expected an object keyed by keyword")
        definitions: dict[str, list[KeywordDefinition]] = {}
        for name, group in data.items():
            definitions[name] = [
                KeywordDefinition(
                    snippet=item["snippet"],
                    summary=item.get("summary", ""),
                    match=item.get("match"),
                    matches=tuple(
                        ParameterMatch(regex=m["regex"], signature=m["signature"])
                        for m in item.get("matches", [])
                    ),
                )
                for item in group
            ]
        logger.debug("language_table_loaded", path=str(path), keywords=len(definitions))
        return cls(definitions)

    def find_definition(self, name: str, text: str) -> KeywordDefinition | None:
        for definition in self._definitions.get(name, ()):
            if definition.pattern.search(text):
                return definition
        return None


class SignatureTable:
    """Action and condition signatures from language modules."""

    def __init__(self, modules: list[Module] | None = None) -> None:
        self.modules = list(modules or [])

    @classmethod
    def from_files(cls, paths: list[Path]) -> SignatureTable:
        modules: list[Module] = []
        for path in paths:
            data = _read_json(path)
            try:
                modules.append(
                    Module(
                        display_name=data.get("displayName", path.stem),
                        conditions=_parse_actions(data.get("conditions")),
                        actions=_parse_actions(data.get("actions")),
                    )
                )
            except (AttributeError, KeyError, TypeError) as e:
                raise TableError.parse_error(str(path), f"malformed module: {e}") from e
        logger.debug("modules_loaded", count=len(modules))
        return cls(modules)

    def find_actions(self, prefix: str, allow_parameter_as_first_word: bool = False) -> Iterator[ActionInfo]:
        """Actions whose first overload starts with ``prefix`` (or with a parameter)."""
        for module in self.modules:
            for kind, entries in ((ActionKind.CONDITION, module.conditions), (ActionKind.ACTION, module.actions)):
                for details in entries:
                    first = details.overloads[0]
                    if first.startswith(prefix) or (allow_parameter_as_first_word and first.startswith("$")):
                        yield ActionInfo(module.display_name, kind, details)

    def find_action(self, text: str, prefix: str | None = None) -> ActionInfo | None:
        """Find the action invoked by a line and the overload it matches."""
        prefix = prefix or get_first_word(text)
        if not prefix:
            return None
        for result in self.find_actions(prefix, allow_parameter_as_first_word=True):
            for index, overload in enumerate(result.details.overloads):
                if make_regex_from_signature(overload).search(text):
                    return replace(result, overload=index)
        return None


def _parse_actions(entries: list[dict[str, Any]] | None) -> tuple[ActionDetails, ...]:
    return tuple(
        ActionDetails(summary=entry.get("summary", ""), overloads=tuple(entry["overloads"]))
        for entry in entries or ()
        if entry.get("overloads")
    )


class StaticMessageTable:
    """Static message aliases (``QuestComplete`` -> 1004)."""

    def __init__(self, messages: Mapping[str, int] | None = None) -> None:
        self.messages = dict(messages or {})

    @classmethod
    def from_file(cls, path: Path) -> StaticMessageTable:
        messages: dict[str, int] = {}
        for row in read_table_rows(path):
            if len(row) < 2 or row[0] == "0":
                continue
            try:
                messages[row[1]] = int(row[0])
            except ValueError as e:
                raise TableError.parse_error(str(path), f"invalid message id {row[0]!r}") from e
        return cls(messages)

    def get_id(self, name: str) -> int | None:
        return self.messages.get(name)

    def get_aliases(self, message_id: int) -> list[str]:
        return [name for name, value in self.messages.items() if value == message_id]


def load_global_vars(path: Path) -> dict[str, int]:
    """Read ``Quests-GlobalVars.txt`` rows (``id, name``) into a name -> id map."""
    global_vars: dict[str, int] = {}
    for row in read_table_rows(path):
        if len(row) < 2:
            continue
        try:
            global_vars[row[1]] = int(row[0])
        except ValueError as e:
            raise TableError.parse_error(str(path), f"invalid global variable id {row[0]!r}") from e
    return global_vars


@dataclass(frozen=True)
class ResolutionTables:
    """The collaborator tables consulted by the message resolver."""

    definitions: DefinitionTable = field(default_factory=LanguageTable)
    actions: ActionTable = field(default_factory=SignatureTable)
    messages: MessageAliasTable = field(default_factory=StaticMessageTable)

    @classmethod
    def from_config(cls, config: TablesConfig, base: Path | None = None) -> ResolutionTables:
        """Load every table the config points at; missing entries stay empty.

        Relative paths are resolved against ``base`` when given.
        """
        definitions = (
            LanguageTable.from_file(_resolve(base, config.language_path)) if config.language_path else LanguageTable()
        )
        actions = SignatureTable.from_files([_resolve(base, module_file_name(p)) for p in config.modules])
        messages = (
            StaticMessageTable.from_file(_resolve(base, config.tables_path) / STATIC_MESSAGES_TABLE)
            if config.tables_path
            else StaticMessageTable()
        )
        return cls(definitions=definitions, actions=actions, messages=messages)


def module_file_name(entry: str) -> str:
    """Bare module names such as ``core`` stand for ``core.dfmodule.json``."""
    return entry if entry.endswith(MODULE_SUFFIX) else entry + MODULE_SUFFIX


def _resolve(base: Path | None, path: str) -> Path:
    resolved = Path(path).expanduser()
    if base is not None and not resolved.is_absolute():
        return base / resolved
    return resolved


def global_vars_path(config: TablesConfig, base: Path | None = None) -> Path | None:
    """Location of the global variable table, if a tables directory is configured."""
    return _resolve(base, config.tables_path) / GLOBAL_VARS_TABLE if config.tables_path else None
