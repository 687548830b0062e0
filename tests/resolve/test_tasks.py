"""Tests for resolve/tasks.py module."""

from pathlib import Path

import pytest

from questlens.resolve.models import Range, TextDocument
from questlens.resolve.tables import ActionDetails, ActionKind, Module, SignatureTable
from questlens.resolve.tasks import (
    EMPTY_CONTEXT,
    GlobalVariableContext,
    TaskDefinition,
    TaskKind,
    find_all_tasks,
    find_all_variables,
    find_global_var_references,
    find_task_definition,
    find_task_references,
    get_global_variable,
    get_task_name,
    get_task_range,
    is_conditional_task,
    parse_task_definition,
)
from questlens.resolve.workspace import StaticWorkspace

GLOBALS = GlobalVariableContext({"Crossroads": 14, "Fought_Vampire": 21, "Ring": 5, "Ring.Of.Power": 6})

QUEST = TextDocument.from_lines(
    [
        "QBN:",
        "variable _talked_",
        "Crossroads _crossed_",
        "",
        "_start_ task:",
        "    when _talked_ and _crossed_",
        "    say 1011",
        "",
        "until _start_ performed:",
        "    clear _talked_",
        "",
        "_clockdone_ task:",
        "    end quest",
    ]
)


class TestGlobalVariableContext:
    def test_empty_context_has_no_pattern(self) -> None:
        assert EMPTY_CONTEXT.pattern is None
        assert len(EMPTY_CONTEXT) == 0

    def test_lookup(self) -> None:
        assert GLOBALS.get("Crossroads") == 14
        assert "Ring" in GLOBALS
        assert "Nope" not in GLOBALS

    def test_names_are_matched_literally(self) -> None:
        """Regex metacharacters inside names never act as wildcards."""
        context = GlobalVariableContext({"Ring.Of.Power": 6})
        assert parse_task_definition("RingXOfXPower _x_", context) is None
        definition = parse_task_definition("Ring.Of.Power _x_", context)
        assert definition == TaskDefinition("_x_", TaskKind.GLOBAL_VAR_LINK, "Ring.Of.Power")

    def test_longest_name_wins_over_prefix(self) -> None:
        assert get_global_variable("Ring.Of.Power _ring_", GLOBALS) == ("Ring.Of.Power", "_ring_")
        assert get_global_variable("Ring _ring_", GLOBALS) == ("Ring", "_ring_")

    def test_from_table(self, tmp_path: Path) -> None:
        table = tmp_path / "Quests-GlobalVars.txt"
        table.write_text("schema: n,*name\n-- comment\n14, Crossroads\n21, Fought_Vampire\n")

        context = GlobalVariableContext.from_table(table)

        assert context.names == ["Crossroads", "Fought_Vampire"]
        assert context.get("Fought_Vampire") == 21


class TestParseTaskDefinition:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("_start_ task:", TaskDefinition("_start_", TaskKind.STANDARD)),
            ("  _start_task: ", TaskDefinition("_start_", TaskKind.STANDARD)),
            ("until _start_ performed:", TaskDefinition("_start_", TaskKind.PERSIST_UNTIL)),
            ("variable _talked_", TaskDefinition("_talked_", TaskKind.VARIABLE)),
            ("Crossroads _crossed_", TaskDefinition("_crossed_", TaskKind.GLOBAL_VAR_LINK, "Crossroads")),
            ("say 1011", None),
        ],
    )
    def test_kinds(self, text: str, expected: TaskDefinition | None) -> None:
        assert parse_task_definition(text, GLOBALS) == expected

    def test_standard_wins_over_global_link(self) -> None:
        """A global name followed by a task declaration is still a standard task."""
        context = GlobalVariableContext({"_start_": 1})
        definition = parse_task_definition("_start_ task:", context)
        assert definition is not None
        assert definition.kind is TaskKind.STANDARD

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("_foo_ task: until", TaskDefinition("_foo_", TaskKind.STANDARD)),
            ("until _foo_ performed: variable", TaskDefinition("_foo_", TaskKind.PERSIST_UNTIL)),
            ("variable _done_", TaskDefinition("_done_", TaskKind.VARIABLE)),
        ],
    )
    def test_kinds_without_context(self, text: str, expected: TaskDefinition) -> None:
        assert parse_task_definition(text) == expected

    def test_global_link_needs_context(self) -> None:
        assert parse_task_definition("Crossroads _crossed_") is None
        assert parse_task_definition("Crossroads _crossed_", EMPTY_CONTEXT) is None

    def test_get_task_name(self) -> None:
        assert get_task_name("until _start_ performed") == "_start_"
        assert get_task_name("give pc _letter_") is None


class TestFindTasks:
    def test_find_all_tasks_standard_and_persist(self) -> None:
        matches = [(m.line.line_number, m.symbol) for m in find_all_tasks(QUEST)]
        assert matches == [(4, "_start_"), (8, "_start_"), (11, "_clockdone_")]

    def test_find_all_variables_then_global_links(self) -> None:
        matches = [(m.line.line_number, m.symbol) for m in find_all_variables(QUEST, GLOBALS)]
        assert matches == [(1, "_talked_"), (2, "_crossed_")]

    def test_find_all_variables_without_context(self) -> None:
        assert [m.symbol for m in find_all_variables(QUEST)] == ["_talked_"]

    def test_find_task_definition(self) -> None:
        line = find_task_definition(QUEST, "_start_")
        assert line is not None
        assert line.line_number == 4

    def test_find_task_definition_global_link(self) -> None:
        line = find_task_definition(QUEST, "_crossed_", GLOBALS)
        assert line is not None
        assert line.line_number == 2
        assert find_task_definition(QUEST, "_crossed_") is None

    def test_find_task_references(self) -> None:
        ranges = list(find_task_references(QUEST, "_talked_"))
        assert ranges == [
            Range.of(1, 9, 1, 17),
            Range.of(5, 9, 5, 17),
            Range.of(9, 10, 9, 18),
        ]

    def test_find_task_references_without_declaration(self) -> None:
        lines = [r.start.line for r in find_task_references(QUEST, "_start_", include_declaration=False)]
        assert lines == []

    def test_task_references_are_whole_words(self) -> None:
        document = TextDocument.from_lines(["_a_ task:", "_a_b task:", "clear _a_"])
        assert [r.start.line for r in find_task_references(document, "_a_")] == [0, 2]


class TestTaskRange:
    def test_range_stops_before_blank_line(self) -> None:
        assert get_task_range(QUEST, 4) == Range.of(4, 0, 6, len("    say 1011"))

    def test_range_at_end_of_document(self) -> None:
        assert get_task_range(QUEST, 11) == Range.of(11, 0, 12, len("    end quest"))


class TestConditionalTask:
    def test_first_line_is_condition(self) -> None:
        actions = SignatureTable(
            [
                Module(
                    display_name="core",
                    conditions=(ActionDetails("when", ("when ${1:...task}",)),),
                    actions=(ActionDetails("say", ("say ${1:message}",)),),
                )
            ]
        )
        assert is_conditional_task(QUEST, 4, actions)
        assert not is_conditional_task(QUEST, 8, actions)
        assert not is_conditional_task(QUEST, 12, actions)

    def test_action_kind_is_reported(self) -> None:
        actions = SignatureTable([Module("core", actions=(ActionDetails("", ("clear ${1:...task}",)),))])
        assert not is_conditional_task(QUEST, 8, actions)
        assert actions.find_action("clear _talked_").kind is ActionKind.ACTION


class TestGlobalVarReferences:
    def test_links_across_documents(self) -> None:
        other = TextDocument.from_lines(["Quest: OTHER", "QBN:", "  Crossroads _here_"], uri="file:///other.txt")
        workspace = StaticWorkspace([QUEST, other])

        locations = find_global_var_references(workspace, "Crossroads", GLOBALS, max_workers=1)

        assert [(loc.uri, loc.range) for loc in locations] == [
            (QUEST.uri, Range.of(2, 0, 2, 10)),
            ("file:///other.txt", Range.of(2, 2, 2, 12)),
        ]

    def test_unknown_name_returns_empty(self) -> None:
        workspace = StaticWorkspace([QUEST])
        assert find_global_var_references(workspace, "Nowhere", GLOBALS) == []
        assert find_global_var_references(workspace, "Crossroads", EMPTY_CONTEXT) == []
