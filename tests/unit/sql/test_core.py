"""
Unit tests for SQL core utilities: identifiers, parameters, compiled statements.
"""

from datetime import datetime

import pytest
import sqlalchemy as sa

from tablekit.sql.core.identifier import (
    columnize,
    qualify_table,
    quote_identifier,
    quote_qualified,
)
from tablekit.sql.core.parameters import ParameterCollector
from tablekit.sql.core.statements import (
    CompiledStatement,
    OnConflictDirective,
    PlainInsert,
    UpdateStatement,
    UpsertInsert,
)

pytestmark = pytest.mark.unit


class TestQuoteIdentifier:
    """Tests for quote_identifier and friends."""

    def test_quote_ascii_column(self):
        assert quote_identifier("email") == '"email"'

    def test_quote_non_ascii_column(self):
        assert quote_identifier("年金计划号") == '"年金计划号"'

    def test_quote_with_internal_quotes(self):
        """Internal double quotes should be escaped."""
        assert quote_identifier('column"name') == '"column""name"'

    def test_star_is_not_quoted(self):
        assert quote_identifier("*") == "*"

    def test_quote_qualified_splits_on_dots(self):
        assert quote_qualified("courses.id") == '"courses"."id"'
        assert quote_qualified("courses.*") == '"courses".*'

    def test_columnize(self):
        assert columnize(["id", "email"]) == '"id", "email"'
        assert columnize(["*"]) == "*"


class TestQualifyTable:
    def test_qualify_with_schema(self):
        assert qualify_table("users", schema="app") == 'app."users"'

    def test_qualify_without_schema(self):
        assert qualify_table("users") == '"users"'


class TestParameters:
    def test_collector_names_in_order(self):
        params = ParameterCollector()

        assert params.add("a") == ":p_0"
        assert params.add_many([1, 2]) == [":p_1", ":p_2"]
        assert list(params.values.items()) == [("p_0", "a"), ("p_1", 1), ("p_2", 2)]
        assert len(params) == 3

    def test_collectors_do_not_share_state(self):
        first, second = ParameterCollector(), ParameterCollector()
        first.add(1)

        assert second.add(2) == ":p_0"


class TestCompiledStatement:
    def test_bindings_follow_placeholder_order(self):
        compiled = CompiledStatement("SELECT :p_0, :p_1", {"p_0": "x", "p_1": 2})

        assert compiled.bindings == ["x", 2]
        assert str(compiled) == "SELECT :p_0, :p_1"

    def test_to_clause_binds_values_with_inferred_types(self):
        stamp = datetime(2024, 1, 1)
        clause = CompiledStatement("SELECT :p_0", {"p_0": stamp}).to_clause()

        assert isinstance(clause, sa.TextClause)
        bind = clause._bindparams["p_0"]
        assert bind.value == stamp
        assert isinstance(bind.type, sa.DateTime)

    def test_to_clause_without_params(self):
        clause = CompiledStatement("SELECT 1").to_clause()

        assert clause.text == "SELECT 1"

    def test_params_are_read_only(self):
        source = {"p_0": 1}
        compiled = CompiledStatement("SELECT :p_0", source)
        source["p_0"] = 2

        assert compiled.params == {"p_0": 1}
        with pytest.raises(TypeError):
            compiled.params["p_1"] = 3


class TestStatements:
    def test_insert_values_are_read_only(self):
        values = {"email": "a@b.com"}
        statement = PlainInsert("users", values)
        values["email"] = "changed"

        assert statement.values == {"email": "a@b.com"}
        with pytest.raises(TypeError):
            statement.values["n"] = 1

    def test_upsert_mappings_are_read_only(self):
        directive = OnConflictDirective(("email",), {"n": 1})
        statement = UpsertInsert("users", {"email": "a@b.com"}, directive)

        with pytest.raises(TypeError):
            directive.updates["n"] = 2
        with pytest.raises(TypeError):
            statement.values["email"] = "x"

    def test_update_values_are_read_only(self):
        statement = UpdateStatement("users", {"n": 1})

        with pytest.raises(TypeError):
            statement.values["n"] = 2
