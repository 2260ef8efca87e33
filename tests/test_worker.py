from __future__ import annotations

import io
from pathlib import Path

from parallelize.config import RewriteConfig
from parallelize.dispatch import OutputSink
from parallelize.loader import load_units
from parallelize.rewrite import State
from parallelize.worker import Worker
from tests.go_helpers import go_source

USER_TEST = """
    // Package user holds tests for the worker.
    package user

    import (
        "math/rand"
        "strings"
        "testing"
    )

    func TestJustAnAssert(t *testing.T) {
        s := "uh"
        if strings.HasPrefix(s, "u") {
            t.Error("Should not start with 'u'")
        }
    }

    func TestMultipleRunCalls(t *testing.T) {
        t.Run("This is a test", func(t *testing.T) {
            val := 100
            if rand.Int() == val {
                t.Error("Unlucky")
            }
        })
        t.Run("This is another", func(t *testing.T) {
            val := 200
            if rand.Int() == val {
                t.Error("Unlucky")
            }
        })
    }

    func TestBroken(t *testing.T) {
        t.Run("missing closure")
    }

    func helper() int { return 1 }
    """

USER_TEST_REWRITTEN = """
    // Package user holds tests for the worker.
    package user

    import (
        "math/rand"
        "strings"
        "testing"
    )

    func TestJustAnAssert(t *testing.T) {
        t.Parallel()
        s := "uh"
        if strings.HasPrefix(s, "u") {
            t.Error("Should not start with 'u'")
        }
    }

    func TestMultipleRunCalls(t *testing.T) {
        t.Run("This is a test", func(t *testing.T) {
            t.Parallel()
            val := 100
            if rand.Int() == val {
                t.Error("Unlucky")
            }
        })
        t.Run("This is another", func(t *testing.T) {
            val := 200
            if rand.Int() == val {
                t.Error("Unlucky")
            }
        })
    }

    func TestBroken(t *testing.T) {
        t.Run("missing closure")
    }

    func helper() int { return 1 }
    """

USER = """
    package user

    func Name() string {
        return "user"
    }
    """


def _test_unit(root: Path, config: RewriteConfig | None = None):
    units = load_units(root, config=config)
    return next(unit for unit in units if unit.is_test_variant())


def test_worker_rewrites_test_files_and_reports_outcomes(go_module) -> None:
    root = go_module({"user.go": USER, "user_test.go": USER_TEST})
    stream = io.StringIO()
    report = Worker(_test_unit(root), OutputSink(stream)).run()

    assert stream.getvalue() == go_source(USER_TEST_REWRITTEN)
    assert [Path(path).name for path in report.files] == ["user_test.go"]
    states = {outcome.function: outcome.state for outcome in report.functions}
    assert states == {
        "TestJustAnAssert": State.SIMPLE_PARALLELIZED,
        "TestMultipleRunCalls": State.SUBTEST_PARALLELIZED,
        "TestBroken": State.REWRITE_ABORTED,
        "helper": State.IGNORED,
    }
    counts = report.counts()
    assert counts[State.IGNORED] == 1
    assert counts[State.TABLE_FIXED] == 0
    assert [outcome.function for outcome in report.aborted()] == ["TestBroken"]
    assert report.aborted()[0].messages


def test_worker_can_emit_non_test_files(go_module) -> None:
    root = go_module({"user.go": USER, "user_test.go": USER_TEST})
    config = RewriteConfig(emit_non_test_files=True)
    stream = io.StringIO()
    Worker(_test_unit(root, config), OutputSink(stream), config=config).run()
    assert stream.getvalue() == go_source(USER) + go_source(USER_TEST_REWRITTEN)


def test_worker_marks_table_tests_fixed(go_module) -> None:
    root = go_module(
        {
            "table_test.go": """
                package table

                import "testing"

                func TestTable(t *testing.T) {
                    tests := []struct{ name string }{{"a"}, {"b"}}
                    for _, tt := range tests {
                        t.Run(tt.name, func(t *testing.T) {
                            _ = tt.name
                        })
                    }
                }
                """
        }
    )
    stream = io.StringIO()
    report = Worker(_test_unit(root), OutputSink(stream)).run()
    assert [outcome.state for outcome in report.functions] == [State.TABLE_FIXED]
    assert "\t\ttt := tt\n\t\tt.Run(tt.name, func(t *testing.T) {\n\t\t\tt.Parallel()\n" in stream.getvalue()


def test_worker_writes_one_chunk_per_file_to_any_sink(go_module) -> None:
    root = go_module({"user.go": USER, "user_test.go": USER_TEST})
    chunks: list[str] = []

    class ListSink:
        def write(self, text: str) -> None:
            chunks.append(text)

    Worker(_test_unit(root), ListSink()).run()
    assert chunks == [go_source(USER_TEST_REWRITTEN)]
