from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel

from parallelize.rewrite import State, UnitReport


class FunctionOutcomeDTO(BaseModel):
    path: str
    function: str
    state: State
    messages: List[str] = []


class UnitReportDTO(BaseModel):
    unit_id: str
    files: List[str]
    functions: List[FunctionOutcomeDTO]
    counts: Dict[State, int] = {}


class RunReportDTO(BaseModel):
    units: List[UnitReportDTO]
    counts: Dict[State, int] = {}


def unit_report_dto(report: UnitReport) -> UnitReportDTO:
    return UnitReportDTO(
        unit_id=report.unit_id,
        files=list(report.files),
        functions=[
            FunctionOutcomeDTO(
                path=item.path,
                function=item.function,
                state=item.state,
                messages=list(item.messages),
            )
            for item in report.functions
        ],
        counts=report.counts(),
    )


def run_report_dto(reports: List[UnitReport]) -> RunReportDTO:
    units = [unit_report_dto(report) for report in sorted(reports, key=lambda r: r.unit_id)]
    totals = {state: sum(unit.counts.get(state, 0) for unit in units) for state in State}
    return RunReportDTO(units=units, counts=totals)
