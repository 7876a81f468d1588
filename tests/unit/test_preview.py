"""
Unit tests for preview statement splitting.
"""

from grantwizard.preview import print_sql_statements_preview, split_sql_statements


class TestSplitSqlStatements:
    """Tests for split_sql_statements."""

    def test_empty_string_returns_empty_list(self) -> None:
        assert split_sql_statements("") == []
        assert split_sql_statements("   \n\n  ") == []

    def test_single_statement_no_semicolon(self) -> None:
        sql = "GRANT SELECT ON TABLE public.orders TO app_role"
        assert split_sql_statements(sql) == [sql]

    def test_multiple_statements_on_separate_lines(self) -> None:
        sql = (
            "GRANT SELECT ON TABLE public.orders TO app_role;\n"
            "GRANT EXECUTE ON FUNCTION public.calc(int) TO app_role;"
        )
        assert split_sql_statements(sql) == [
            "GRANT SELECT ON TABLE public.orders TO app_role",
            "GRANT EXECUTE ON FUNCTION public.calc(int) TO app_role",
        ]

    def test_multiple_statements_on_one_line(self) -> None:
        assert split_sql_statements("GRANT A TO r; GRANT B TO r;") == ["GRANT A TO r", "GRANT B TO r"]

    def test_statement_spanning_lines(self) -> None:
        sql = "GRANT SELECT\n    ON TABLE public.orders\n    TO app_role;"
        assert split_sql_statements(sql) == [
            "GRANT SELECT\n    ON TABLE public.orders\n    TO app_role"
        ]

    def test_semicolon_inside_double_quotes_not_split(self) -> None:
        sql = 'GRANT SELECT ON TABLE public."odd;name" TO app_role;'
        result = split_sql_statements(sql)
        assert len(result) == 1
        assert "odd;name" in result[0]

    def test_semicolon_inside_single_quotes_not_split(self) -> None:
        sql = "COMMENT ON TABLE t IS 'a; b';"
        assert split_sql_statements(sql) == ["COMMENT ON TABLE t IS 'a; b'"]

    def test_comment_only_lines_skipped(self) -> None:
        sql = "-- Table: orders\nGRANT SELECT ON TABLE t TO r;\n\n-- Function\nGRANT EXECUTE ON FUNCTION f() TO r;"
        result = split_sql_statements(sql)
        assert len(result) == 2
        assert result[0].startswith("GRANT SELECT")
        assert result[1].startswith("GRANT EXECUTE")


def test_print_preview_lists_statements(capsys) -> None:
    print_sql_statements_preview(
        ["GRANT SELECT ON TABLE t TO r", "GRANT USAGE ON SEQUENCE s TO r"],
        action_prompt="Execute 2 statements?",
    )
    out = capsys.readouterr().out
    assert "Statement 1/2" in out
    assert "Statement 2/2" in out
    assert "GRANT USAGE ON SEQUENCE s TO r" in out
    assert "Execute 2 statements?" in out


def test_print_preview_truncates_long_statements(capsys) -> None:
    long_statement = "\n".join(f"line {i}" for i in range(10))
    print_sql_statements_preview([long_statement])
    out = capsys.readouterr().out
    assert "line 0" in out
    assert "(6 more lines)" in out
    assert "line 9" in out
    assert "line 5" not in out
