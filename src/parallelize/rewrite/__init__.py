from parallelize.rewrite.classifier import Classifier
from parallelize.rewrite.model import FunctionOutcome, State, UnitReport
from parallelize.rewrite.subtest import SubtestResult, SubtestRewriter, parallel_call_stmt, subtest_call
from parallelize.rewrite.table_fix import TableFixer

__all__ = [
    "Classifier",
    "FunctionOutcome",
    "State",
    "SubtestResult",
    "SubtestRewriter",
    "TableFixer",
    "UnitReport",
    "parallel_call_stmt",
    "subtest_call",
]
