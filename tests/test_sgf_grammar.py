"""Tests for SGF tokenising and the coarse scope structure."""

import pytest

from sgfparser import sgf_grammar
from sgfparser.errors import ParseError
from sgfparser.sgf_grammar import Coarse_game_tree, parse_sgf_collection


class TestCollectionStructure:
    def test_single_sequence(self):
        trees = parse_sgf_collection("(;B[aa];W[bb])")
        assert len(trees) == 1
        assert trees[0].items == [[("B", ["aa"])], [("W", ["bb"])]]

    def test_nested_scopes_keep_document_order(self):
        (tree,) = parse_sgf_collection("(;B[aa](;W[bb])(;W[cc]))")
        node, first, second = tree.items
        assert node == [("B", ["aa"])]
        assert isinstance(first, Coarse_game_tree)
        assert isinstance(second, Coarse_game_tree)
        assert first.items == [[("W", ["bb"])]]
        assert second.items == [[("W", ["cc"])]]

    def test_several_top_level_game_trees(self):
        trees = parse_sgf_collection("(;GM[1])(;GM[1])")
        assert len(trees) == 2

    def test_list_values(self):
        (tree,) = parse_sgf_collection("(;AB[aa][bb][cc])")
        assert tree.items == [[("AB", ["aa", "bb", "cc"])]]

    def test_repeated_property_kept_separately(self):
        (tree,) = parse_sgf_collection("(;C[one]C[two])")
        assert tree.items == [[("C", ["one"]), ("C", ["two"])]]

    def test_node_without_properties(self):
        (tree,) = parse_sgf_collection("(;;B[aa])")
        assert tree.items == [[], [("B", ["aa"])]]

    def test_whitespace_outside_values_is_ignored(self):
        (tree,) = parse_sgf_collection("( ;B [aa]\n\t;W[bb] )\n")
        assert tree.items == [[("B", ["aa"])], [("W", ["bb"])]]

    def test_whitespace_inside_values_is_kept(self):
        (tree,) = parse_sgf_collection("(;C[ two  words ])")
        assert tree.items == [[("C", [" two  words "])]]

    def test_lower_case_letters_in_identifier(self):
        (tree,) = parse_sgf_collection("(;CoPyright[2017])")
        assert tree.items == [[("CoPyright", ["2017"])]]

    def test_empty_input(self):
        assert parse_sgf_collection("") == []

    def test_empty_scope(self):
        (tree,) = parse_sgf_collection("()")
        assert tree.items == []
        assert tree.is_empty()

    def test_nested_empty_scopes(self):
        (tree,) = parse_sgf_collection("(())")
        assert tree.is_empty()

    def test_scope_with_node_is_not_empty(self):
        (tree,) = parse_sgf_collection("((;B[aa]))")
        assert not tree.is_empty()


class TestEscapes:
    def test_escaped_bracket(self):
        (tree,) = parse_sgf_collection(r"(;C[line one \] line two])")
        assert tree.items == [[("C", ["line one ] line two"])]]

    def test_escaped_backslash(self):
        (tree,) = parse_sgf_collection(r"(;C[back\\slash])")
        assert tree.items == [[("C", ["back\\slash"])]]

    def test_escaped_backslash_before_closing_bracket(self):
        (tree,) = parse_sgf_collection(r"(;C[end\\];B[aa])")
        assert tree.items == [[("C", ["end\\"])], [("B", ["aa"])]]

    def test_other_backslashes_are_kept(self):
        (tree,) = parse_sgf_collection(r"(;C[a\nb\:c])")
        assert tree.items == [[("C", [r"a\nb\:c"])]]

    def test_unescape_value(self):
        assert sgf_grammar.unescape_value(r"a\]b\\c\d") == "a]b\\c\\d"

    def test_parentheses_and_semicolons_inside_values(self):
        (tree,) = parse_sgf_collection("(;C[(;)])")
        assert tree.items == [[("C", ["(;)"])]]


class TestStructuralErrors:
    @pytest.mark.parametrize(
        "data",
        [
            "(;B[aa]",
            "(;B[aa](;W[bb])",
            "(;B[aa]))",
            ";B[aa]",
            "(;[aa])",
            "(;B)",
            "(B[aa])",
            "(B[aa];W[bb])",
            "(;C[unclosed)",
            "(;B[aa]]",
            "junk(;B[aa])",
        ],
    )
    def test_malformed_input_raises(self, data):
        with pytest.raises(ParseError):
            parse_sgf_collection(data)

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_sgf_collection("(;B[aa]")

    def test_unexpected_character_position(self):
        with pytest.raises(ParseError) as excinfo:
            parse_sgf_collection("(;B[aa]\n%)")
        assert excinfo.value.line == 2
        assert excinfo.value.column == 1
        assert "unexpected character" in str(excinfo.value)

    def test_lark_error_is_chained(self):
        with pytest.raises(ParseError) as excinfo:
            parse_sgf_collection("(;B[aa]")
        assert excinfo.value.__cause__ is not None


class TestValueHelpers:
    def test_parse_compose(self):
        assert sgf_grammar.parse_compose("aa:bb") == ("aa", "bb")

    def test_parse_compose_without_delimiter(self):
        assert sgf_grammar.parse_compose("abc") == ("abc", None)

    def test_parse_compose_splits_at_first_colon(self):
        assert sgf_grammar.parse_compose("a:b:c") == ("a", "b:c")

    def test_parse_compose_escaped_colon(self):
        assert sgf_grammar.parse_compose(r"a\:b:c") == ("a:b", "c")

    def test_simpletext_value(self):
        assert sgf_grammar.simpletext_value("a\r\nb\tc\nd") == "a b c d"

    def test_text_value(self):
        assert sgf_grammar.text_value("a\r\nb\rc\td") == "a\nb\nc d"

    def test_is_valid_property_identifier(self):
        assert sgf_grammar.is_valid_property_identifier("B")
        assert sgf_grammar.is_valid_property_identifier("MULTIGOGM")
        assert not sgf_grammar.is_valid_property_identifier("")
        assert not sgf_grammar.is_valid_property_identifier("Ab")
        assert not sgf_grammar.is_valid_property_identifier("A" * 65)
