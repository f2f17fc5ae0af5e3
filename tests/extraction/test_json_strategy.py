"""Unit tests for the four JSON recovery methods and their ordering."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import json

from listing_extract.extraction.json_strategy import (
    extract_json_tables,
    find_matching_bracket,
    parse_bare_arrays,
    parse_direct,
    parse_table_fragments,
    parse_tables_array,
    strip_code_fences,
    strip_control_chars,
)
from listing_extract.extraction.pipeline import parse_response
from listing_extract.extraction.schema import RawTable

CLEAN_JSON = '{"tables":[{"name":"Inventory","headers":["Unit","Price"],"data":[["A1","1.0M"]]}]}'

INVENTORY = RawTable(name="Inventory", headers=["Unit", "Price"], data=[["A1", "1.0M"]])


# ===========================================================================
# Cleanup helpers
# ===========================================================================


class TestCleanupHelpers:

    def test_strip_json_fence(self):
        assert strip_code_fences("```json\n{}\n```").strip() == "{}"

    def test_strip_control_chars_c0_and_c1(self):
        assert strip_control_chars("a\x00b\x1fc\x7fd\x9fe\nf\tg") == "abcdefg"

    def test_strip_control_chars_keeps_unicode_text(self):
        assert strip_control_chars("Café ñ 1,000 m²") == "Café ñ 1,000 m²"

    def test_matching_bracket_simple(self):
        text = '[["a"], ["b"]] trailing'
        assert find_matching_bracket(text, 0) == text.index("]]") + 1

    def test_matching_bracket_ignores_brackets_in_strings(self):
        text = '["Price [USD]", "a\\"]"] x'
        assert text[find_matching_bracket(text, 0)] == "]"
        assert json.loads(text[: find_matching_bracket(text, 0) + 1]) == ["Price [USD]", 'a"]']

    def test_matching_bracket_unbalanced(self):
        assert find_matching_bracket('[["a"]', 0) is None


# ===========================================================================
# Method 1: direct parse
# ===========================================================================


class TestParseDirect:

    def test_clean_json(self):
        assert parse_direct(CLEAN_JSON) == [INVENTORY]

    def test_fenced_json_parses_like_unfenced(self):
        fenced = f"```json\n{CLEAN_JSON}\n```"
        assert parse_direct(fenced) == parse_direct(CLEAN_JSON)

    def test_surrounding_prose(self):
        text = f"Here are the tables you asked for:\n{CLEAN_JSON}\nLet me know if you need more."
        assert parse_direct(text) == [INVENTORY]

    def test_control_chars_inside_strings_removed(self):
        text = '{"tables":[{"name":"Inven\ntory\x01","headers":["Unit"],"data":[["A1"]]}]}'
        tables = parse_direct(text)
        assert tables[0].name == "Inventory"

    def test_single_table_schema(self):
        text = '{"name":"Real Estate Inventory","headers":["Unit","Price"],"data":[["A1","1.0M"]]}'
        tables = parse_direct(text)
        assert tables == [RawTable(name="Real Estate Inventory", headers=["Unit", "Price"], data=[["A1", "1.0M"]])]

    def test_non_string_cells_coerced(self):
        text = '{"tables":[{"name":"T","headers":["A","B","C","D"],"data":[[1, null, true, 2.5]]}]}'
        assert parse_direct(text)[0].data == [["1", "", "true", "2.5"]]

    def test_object_rows_follow_header_order(self):
        text = '{"tables":[{"name":"T","headers":["Unit","Price"],"data":[{"Price":"1.0M","Unit":"A1"}]}]}'
        assert parse_direct(text)[0].data == [["A1", "1.0M"]]

    def test_missing_name_is_none(self):
        text = '{"tables":[{"headers":["Unit"],"data":[["A1"]]}]}'
        assert parse_direct(text)[0].name is None

    def test_tables_without_headers_skipped(self):
        text = '{"tables":[{"name":"Empty","headers":[],"data":[]},{"name":"Real","headers":["H"],"data":[["v"]]}]}'
        assert [table.name for table in parse_direct(text)] == ["Real"]

    def test_object_without_tables_rejected(self):
        assert parse_direct('{"answer": "no tables here"}') is None

    def test_invalid_json_rejected(self):
        assert parse_direct('{"tables": [oops]}') is None

    def test_no_braces(self):
        assert parse_direct("no json at all") is None


# ===========================================================================
# Method 2: tables-array isolation
# ===========================================================================


class TestParseTablesArray:

    BROKEN_WRAPPER = 'Result: {"tables": [{"name":"Inventory","headers":["Unit","Price"],"data":[["A1","1.0M"]]}], "note": oops}'

    def test_direct_parse_fails_on_broken_wrapper(self):
        assert parse_direct(self.BROKEN_WRAPPER) is None

    def test_array_recovered_from_broken_wrapper(self):
        assert parse_tables_array(self.BROKEN_WRAPPER) == [INVENTORY]

    def test_brackets_inside_cells(self):
        text = '{"tables": [{"name":"T","headers":["Price [USD]"],"data":[["1,000"]]}], broken'
        assert parse_tables_array(text)[0].headers == ["Price [USD]"]

    def test_unterminated_array(self):
        assert parse_tables_array('{"tables": [{"name":"T","headers":["A"]') is None

    def test_no_tables_key(self):
        assert parse_tables_array('{"rows": []}') is None


# ===========================================================================
# Method 3: per-table fragments
# ===========================================================================


class TestParseTableFragments:

    MISSING_COMMA = (
        '{"tables": [{"name":"A","headers":["H1","H2"],"data":[["1","2"]]} '
        '{"name":"B","headers":["X"],"data":[["y"],["z"]]}]}'
    )

    def test_earlier_methods_fail_on_inter_table_error(self):
        assert parse_direct(self.MISSING_COMMA) is None
        assert parse_tables_array(self.MISSING_COMMA) is None

    def test_each_fragment_recovered(self):
        tables = parse_table_fragments(self.MISSING_COMMA)
        assert tables == [
            RawTable(name="A", headers=["H1", "H2"], data=[["1", "2"]]),
            RawTable(name="B", headers=["X"], data=[["y"], ["z"]]),
        ]

    def test_locally_invalid_fragment_skipped(self):
        text = '{"name":"Bad","headers":["H1" "H2"],"data":[["1"]]} {"name":"Good","headers":["H"],"data":[["v"]]}'
        assert [table.name for table in parse_table_fragments(text)] == ["Good"]

    def test_empty_data(self):
        tables = parse_table_fragments('{"name":"Only Headers","headers":["H"],"data":[]}')
        assert tables == [RawTable(name="Only Headers", headers=["H"], data=[])]

    def test_no_fragments(self):
        assert parse_table_fragments("nothing here") is None


# ===========================================================================
# Method 4: bare string arrays
# ===========================================================================


class TestParseBareArrays:

    def test_first_array_is_headers(self):
        text = 'Columns ["Unit", "Price"] then ["A1", "1.0M"] and ["B2", "2.0M"]'
        assert parse_bare_arrays(text) == [
            RawTable(name="Extracted Table", headers=["Unit", "Price"], data=[["A1", "1.0M"], ["B2", "2.0M"]])
        ]

    def test_single_array_not_enough(self):
        assert parse_bare_arrays('just ["Unit", "Price"]') is None

    def test_numeric_arrays_ignored(self):
        assert parse_bare_arrays("[1, 2] [3, 4]") is None


# ===========================================================================
# extract_json_tables ordering
# ===========================================================================


class TestExtractJsonTables:

    def test_clean_json_scenario(self):
        assert extract_json_tables(CLEAN_JSON) == [INVENTORY]

    def test_falls_through_to_fragments(self):
        assert len(extract_json_tables(TestParseTableFragments.MISSING_COMMA)) == 2

    def test_falls_through_to_bare_arrays(self):
        tables = extract_json_tables('["Unit", "Price"]\n["A1", "1.0M"]')
        assert tables[0].name == "Extracted Table"

    def test_protocol_text_is_not_json(self):
        assert extract_json_tables("TABLE: Inventory\nHEADERS: Unit | Price\nROW: A1 | 1.0M") is None

    def test_garbage(self):
        assert extract_json_tables("random prose with no structure") is None


# ===========================================================================
# Oversized or deeply nested input
# ===========================================================================


class TestDecoderLimits:
    TABLES = '"tables":[{"name":"Inventory","headers":["Unit","Price"],"data":[["A1","1.0M"]]}]'
    HUGE_NUMBER = '{"ref": ' + "1" * 5000 + ", " + TABLES + "}"
    DEEP_NESTING = '{"ref": ' + "[" * 100000 + "]" * 100000 + ", " + TABLES + "}"

    def test_deep_nesting_rejected_by_direct_parse(self):
        assert parse_direct(self.DEEP_NESTING) is None

    def test_deep_nesting_recovered_by_tables_array(self):
        assert extract_json_tables(self.DEEP_NESTING) == [INVENTORY]

    def test_oversized_integer_recovered(self):
        assert extract_json_tables(self.HUGE_NUMBER) == [INVENTORY]

    def test_pipeline_keeps_json_strategy(self):
        for text in (self.HUGE_NUMBER, self.DEEP_NESTING):
            result = parse_response(text)
            assert result.debug.strategy == "json"
            assert result.tables[0].data == [["A1", "1.0M"]]
