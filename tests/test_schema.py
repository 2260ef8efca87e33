from __future__ import annotations

import json

from parallelize.rewrite import FunctionOutcome, State, UnitReport
from parallelize.schema import RunReportDTO, run_report_dto


def test_run_report_dto_totals_states_across_units() -> None:
    reports = [
        UnitReport(
            unit_id="b [b.test]",
            files=["b_test.go"],
            functions=[FunctionOutcome("b_test.go", "TestB", State.TABLE_FIXED)],
        ),
        UnitReport(
            unit_id="a [a.test]",
            files=["a_test.go"],
            functions=[
                FunctionOutcome("a_test.go", "TestA", State.SIMPLE_PARALLELIZED),
                FunctionOutcome(
                    "a_test.go",
                    "TestBad",
                    State.REWRITE_ABORTED,
                    ["found t.Run call, but number of arguments is 1 instead of 2"],
                ),
            ],
        ),
    ]
    dto = run_report_dto(reports)
    assert [unit.unit_id for unit in dto.units] == ["a [a.test]", "b [b.test]"]
    assert dto.counts[State.SIMPLE_PARALLELIZED] == 1
    assert dto.counts[State.TABLE_FIXED] == 1
    assert dto.counts[State.IGNORED] == 0

    payload = json.loads(dto.model_dump_json())
    assert payload["units"][0]["functions"][1]["state"] == "rewrite_aborted"
    assert payload["units"][0]["counts"]["rewrite_aborted"] == 1
    assert RunReportDTO.model_validate(payload) == dto
