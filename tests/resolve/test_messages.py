"""Tests for resolve/messages.py module."""

import pytest

from questlens.resolve.messages import (
    BlockState,
    MessageBlock,
    StaticMessage,
    find_all_messages,
    find_message_by_index,
    find_message_by_name,
    find_message_definition,
    find_message_references,
    get_message_id_for_position,
    get_message_range,
    get_static_message,
    next_available_message_id,
    parse_message_id,
)
from questlens.resolve.models import Position, Range, TextDocument
from questlens.resolve.tables import (
    ActionDetails,
    KeywordDefinition,
    LanguageTable,
    Module,
    ParameterMatch,
    ResolutionTables,
    SignatureTable,
    StaticMessageTable,
)

QUEST = TextDocument.from_lines(
    [
        "Quest: GREET",
        "QRC:",
        "",
        "GreetingMsg:  [1015]",
        "Hello there.",
        "",
        "",
        "Message: 1011",
        "<ce> Go to =place_.",
        "",
        "Message: 1012",
        "Second.",
        "",
        "QBN:",
        "Place _place_ remote dungeon",
        "Person _contact_ face 1 anyInfo 1012",
        "",
        "_start_ task:",
        "    say 1015",
        "    say GreetingMsg",
        "    say 1011",
        "    log 1012 step 0",
        "    add 1012 gold",
    ]
)


@pytest.fixture
def tables() -> ResolutionTables:
    definitions = LanguageTable(
        {
            "Person": [
                KeywordDefinition(
                    snippet="Person ${1:_person_} face ${2:nn} anyInfo ${3:message}",
                    matches=(ParameterMatch(regex=r"anyInfo\s+(\d+)", signature="${message}"),),
                )
            ]
        }
    )
    actions = SignatureTable(
        [
            Module(
                display_name="core",
                actions=(
                    ActionDetails("Shows a message.", ("say ${1:message}",)),
                    ActionDetails("Gives gold.", ("add ${1:nn} gold",)),
                ),
            )
        ]
    )
    messages = StaticMessageTable({"GreetingMsg": 1015, "QuestComplete": 1004})
    return ResolutionTables(definitions=definitions, actions=actions, messages=messages)


class TestLineParsing:
    def test_parse_message_id(self) -> None:
        assert parse_message_id("Message: 1011") == 1011
        assert parse_message_id("  Message:   42  ") == 42
        assert parse_message_id("Message:1011") is None
        assert parse_message_id("say 1011") is None

    def test_get_static_message(self) -> None:
        assert get_static_message("QuestComplete:  [1004]") == StaticMessage(1004, "QuestComplete")
        assert get_static_message("  RumorsDuringQuest: [ 1005 ]  ") == StaticMessage(1005, "RumorsDuringQuest")
        assert get_static_message("Message: 1011") is None


class TestFindMessage:
    def test_default_message_by_index(self) -> None:
        match = find_message_by_index(QUEST, 1015)
        assert match is not None
        assert match.is_default
        assert match.line.line_number == 3

    def test_additional_message_by_index(self) -> None:
        match = find_message_by_index(QUEST, "1011")
        assert match is not None
        assert not match.is_default
        assert match.line.line_number == 7

    def test_default_takes_precedence(self) -> None:
        document = TextDocument.from_lines(["Message: 1004", "", "", "QuestComplete: [1004]"])
        match = find_message_by_index(document, 1004)
        assert match is not None
        assert match.is_default
        assert match.line.line_number == 3

    def test_id_must_match_whole_number(self) -> None:
        document = TextDocument.from_lines(["Message: 10110", "Other: [10110]"])
        assert find_message_by_index(document, 1011) is None

    def test_find_by_name(self) -> None:
        line = find_message_by_name(QUEST, "GreetingMsg")
        assert line is not None
        assert line.line_number == 3
        assert find_message_by_name(QUEST, "Greeting") is None


class TestFindMessageDefinition:
    def test_default_by_id_points_at_id(self) -> None:
        assert find_message_definition(QUEST, "1015") == Position(3, 15)

    def test_additional_by_id_points_at_line_start(self) -> None:
        assert find_message_definition(QUEST, "1011") == Position(7, 0)

    def test_by_name_points_at_line_start(self) -> None:
        assert find_message_definition(QUEST, "GreetingMsg") == Position(3, 0)

    @pytest.mark.parametrize("word", ["9999", "Unknown"])
    def test_missing(self, word: str) -> None:
        assert find_message_definition(QUEST, word) is None


class TestFindMessageReferences:
    def test_id_includes_alias_pass(self, tables: ResolutionTables) -> None:
        ranges = list(find_message_references(QUEST, "1015", tables))
        assert ranges == [
            Range.of(3, 15, 3, 19),
            Range.of(18, 8, 18, 12),
            Range.of(19, 8, 19, 19),
        ]

    def test_id_without_declaration(self, tables: ResolutionTables) -> None:
        ranges = list(find_message_references(QUEST, "1015", tables, include_declaration=False))
        assert [r.start.line for r in ranges] == [18, 19]

    def test_name_then_id_pass_skips_declaration(self, tables: ResolutionTables) -> None:
        """The id pass never reports the declaration line even though it contains the id."""
        ranges = list(find_message_references(QUEST, "GreetingMsg", tables))
        assert ranges == [
            Range.of(3, 0, 3, 11),
            Range.of(19, 8, 19, 19),
            Range.of(18, 8, 18, 12),
        ]

    def test_definition_keyword_with_message_parameter(self, tables: ResolutionTables) -> None:
        ranges = list(find_message_references(QUEST, "1012", tables))
        assert ranges == [Range.of(10, 9, 10, 13), Range.of(15, 32, 15, 36)]

    def test_non_message_parameter_is_not_a_reference(self, tables: ResolutionTables) -> None:
        """``add 1012 gold`` uses the number as an amount, ``log`` is unknown."""
        lines = [r.start.line for r in find_message_references(QUEST, "1012", tables)]
        assert 21 not in lines
        assert 22 not in lines

    def test_without_tables_only_declaration(self) -> None:
        assert list(find_message_references(QUEST, "1011")) == [Range.of(7, 9, 7, 13)]

    def test_alias_pass_reports_same_line_again(self) -> None:
        document = TextDocument.from_lines(["Msg: [7]", "say 7 Msg"])
        tables = ResolutionTables(
            actions=SignatureTable([Module("core", actions=(ActionDetails("", ("say ${1:message} ${2:message}",)),))]),
            messages=StaticMessageTable({"Msg": 7}),
        )
        ranges = list(find_message_references(document, "7", tables, include_declaration=False))
        assert ranges == [Range.of(1, 4, 1, 5), Range.of(1, 6, 1, 9)]

    def test_unknown_message_yields_nothing(self, tables: ResolutionTables) -> None:
        assert list(find_message_references(QUEST, "4242", tables)) == []


class TestFindAllMessages:
    def test_defaults_then_additional(self) -> None:
        found = [(m.symbol, m.line.line_number) for m in find_all_messages(QUEST)]
        assert found == [("GreetingMsg", 3), ("1011", 7), ("1012", 10)]


class TestMessageIds:
    def test_next_available_skips_used_ids(self) -> None:
        assert next_available_message_id(QUEST, 1011) == "1013"
        assert next_available_message_id(QUEST, "1015") == "1016"
        assert next_available_message_id(QUEST, 2000) == "2000"

    def test_next_available_is_free(self) -> None:
        result = next_available_message_id(QUEST, 1000)
        assert int(result) >= 1000
        assert find_message_by_index(QUEST, result) is None

    def test_id_for_position_follows_previous_message(self) -> None:
        document = TextDocument.from_lines(
            ["Quest: X", "QRC:", "", "Message: 1011", "text", "", "", "QBN:"]
        )
        assert get_message_id_for_position(document, 7) == "1012"

    def test_id_for_position_uses_closest_message_above(self) -> None:
        assert get_message_id_for_position(QUEST, 13) == "1013"
        assert get_message_id_for_position(QUEST, 8) == "1013"

    def test_id_for_position_falls_back_to_baseline(self) -> None:
        assert get_message_id_for_position(QUEST, 5) == "1013"
        assert get_message_id_for_position(QUEST, 5, baseline=1500) == "1500"

    def test_id_for_position_past_end(self) -> None:
        assert get_message_id_for_position(QUEST, 500) == "1013"


class TestMessageBlock:
    def test_ends_at_two_blank_lines(self) -> None:
        document = TextDocument.from_lines(["Message: 1011", "line a", "line b", "", ""])
        block = MessageBlock(document, 0)

        assert [block.is_inside() for _ in range(4)] == [True, True, False, False]
        assert block.state is BlockState.AT_END

    def test_blank_line_inside_body(self) -> None:
        document = TextDocument.from_lines(["Message: 1011", "para one", "", "para two", "", ""])
        block = MessageBlock(document, 0)

        inside = []
        while block.is_inside():
            inside.append(block.current_line)

        assert inside == [1, 2, 3]

    @pytest.mark.parametrize("next_line", ["Message: 1012", "Other: [1004]", "-- comment", "QBN:"])
    def test_ends_before_next_declaration(self, next_line: str) -> None:
        document = TextDocument.from_lines(["Message: 1011", "body", "", next_line, "more"])
        block = MessageBlock(document, 0)

        assert block.is_inside()
        assert not block.is_inside()

    def test_fast_forward_to_target(self) -> None:
        document = TextDocument.from_lines(["Message: 1011", "a", "b", "c", "", ""])
        block = MessageBlock(document, 0)

        assert block.is_inside(3)
        assert block.current_line == 3
        assert block.state is BlockState.SCANNING

    def test_fast_forward_past_end(self) -> None:
        document = TextDocument.from_lines(["Message: 1011", "a", "", "", "later"])
        block = MessageBlock(document, 0)

        assert not block.is_inside(4)
        assert block.state is BlockState.AT_END

    def test_end_of_document(self) -> None:
        block = MessageBlock(TextDocument.from_lines(["Message: 1011", "body"]), 0)

        assert block.is_inside()
        assert not block.is_inside()
        assert block.state is BlockState.AT_END

    def test_long_body_is_iterative(self) -> None:
        """Thousands of body lines do not exhaust the stack."""
        lines = ["Message: 1011", *(f"line {i}" for i in range(5000)), "", ""]
        block = MessageBlock(TextDocument.from_lines(lines), 0)

        assert block.is_inside(5000)
        assert not block.is_inside(6000)


class TestMessageRange:
    def test_range_of_message(self) -> None:
        assert get_message_range(QUEST, 3) == Range.of(3, 0, 4, len("Hello there."))

    def test_range_stops_before_next_message(self) -> None:
        assert get_message_range(QUEST, 7) == Range.of(7, 0, 8, len("<ce> Go to =place_."))

    def test_trailing_blank_at_end_of_document(self) -> None:
        document = TextDocument.from_lines(["Message: 1011", "body", ""])
        assert get_message_range(document, 0) == Range.of(0, 0, 2, 0)

    def test_declaration_on_last_line(self) -> None:
        document = TextDocument.from_lines(["Message: 1011"])
        assert get_message_range(document, 0) == Range.of(0, 0, 0, 13)
