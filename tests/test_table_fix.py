from __future__ import annotations

from parallelize.config import RewriteConfig
from parallelize.rewrite import State, SubtestRewriter, TableFixer
from parallelize.syntax import render
from parallelize.syntax.nodes import AssignStmt
from tests.go_helpers import go_source
from tests.rewrite_helpers import func, parse_unit

TABLE = """
    package sample

    import "testing"

    func TestTable(t *testing.T) {
        tests := []struct {
            name string
            in   int
        }{
            {name: "one", in: 1},
            {name: "two", in: 2},
        }

        for _, tt := range tests {
            t.Run(tt.name, func(t *testing.T) {
                if tt.in == 0 {
                    t.Fatal("zero")
                }
            })
        }
    }
    """


def _fix(text: str, name: str = "TestTable", config: RewriteConfig | None = None):
    tree, _ = parse_unit(text)
    decl = func(tree, name)
    result = SubtestRewriter(config).rewrite(decl, "t")
    assert result.state is State.SUBTEST_PARALLELIZED
    fixed = TableFixer(config).fix(decl, result.stmt)
    return tree, decl, fixed


def test_table_loop_gets_case_variable_rebound() -> None:
    tree, _, fixed = _fix(TABLE)
    assert fixed is True
    assert render(tree) == go_source(
        """
        package sample

        import "testing"

        func TestTable(t *testing.T) {
            tests := []struct {
                name string
                in   int
            }{
                {name: "one", in: 1},
                {name: "two", in: 2},
            }

            for _, tt := range tests {
                tt := tt
                t.Run(tt.name, func(t *testing.T) {
                    t.Parallel()
                    if tt.in == 0 {
                        t.Fatal("zero")
                    }
                })
            }
        }
        """
    )


def test_table_bound_by_var_or_plain_assignment() -> None:
    tree, decl, fixed = _fix(
        """
        package sample

        func TestVar(t *testing.T) {
            var tests = cases()
            for _, tt := range tests {
                t.Run(tt.name, func(t *testing.T) {})
            }
        }

        func TestAssign(t *testing.T) {
            var tests []testCase
            tests = cases()
            for tt := range tests {
                t.Run(tt.name, func(t *testing.T) {})
            }
        }
        """,
        "TestVar",
    )
    assert fixed is True
    loop_body = decl.body.stmts[1].body
    assert isinstance(loop_body.stmts[0], AssignStmt)
    _, _, fixed = _fix(render(tree), "TestAssign")
    assert fixed is True


def test_no_fix_without_table_binding() -> None:
    _, decl, fixed = _fix(
        """
        package sample

        func TestCases(t *testing.T) {
            cases := load()
            for _, tt := range cases {
                t.Run(tt.name, func(t *testing.T) {})
            }
        }
        """,
        "TestCases",
    )
    assert fixed is False
    assert "tt := tt" not in render(decl)


def test_no_fix_for_other_case_variable_name() -> None:
    _, decl, fixed = _fix(
        """
        package sample

        func TestTc(t *testing.T) {
            tests := load()
            for _, tc := range tests {
                t.Run(tc.name, func(t *testing.T) {})
            }
        }
        """,
        "TestTc",
    )
    assert fixed is False
    assert "tc := tc" not in render(decl)


def test_no_fix_when_subtest_is_outside_the_table_loop() -> None:
    _, _, fixed = _fix(
        """
        package sample

        func TestOutside(t *testing.T) {
            tests := load()
            t.Run("all", func(t *testing.T) {
                for _, tt := range tests {
                    check(t, tt)
                }
            })
            for _, tt := range tests {
                use(tt)
            }
        }
        """,
        "TestOutside",
    )
    assert fixed is False


def test_fix_honours_configured_names() -> None:
    config = RewriteConfig(table_var="cases", case_var="tc")
    _, decl, fixed = _fix(
        """
        package sample

        func TestCases(t *testing.T) {
            cases := load()
            for _, tc := range cases {
                t.Run(tc.name, func(t *testing.T) {})
            }
        }
        """,
        "TestCases",
        config,
    )
    assert fixed is True
    assert "\t\ttc := tc\n" in render(decl)
