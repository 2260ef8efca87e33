"""Decide which function declarations are test entry points."""

from __future__ import annotations

from parallelize.config import RewriteConfig
from parallelize.log_context import ContextLogger, get_logger
from parallelize.syntax.nodes import FuncDecl, StarExpr
from parallelize.typetable import Named, TypeTable


class Classifier:
    def __init__(
        self,
        type_table: TypeTable,
        config: RewriteConfig | None = None,
        logger: ContextLogger | None = None,
    ) -> None:
        self.type_table = type_table
        self.config = config or RewriteConfig()
        self.logger = logger or get_logger()

    def is_test_func(self, decl: FuncDecl, logger: ContextLogger | None = None) -> bool:
        """True iff ``decl`` is ``func TestXxx(t *testing.T)``.

        Every other shape, including methods and parameters whose type could
        not be resolved, is rejected.
        """
        log = logger or self.logger
        log.debug("checking if it's a test function")
        if decl.recv is not None:
            log.debug("not a test function: declaration has a receiver")
            return False
        if not decl.name.name.startswith(self.config.test_prefix):
            log.debug(f"not a test function: name does not start with {self.config.test_prefix!r}")
            return False
        count = decl.type.param_count()
        if count != 1:
            log.debug(f"not a test function: parameter count is {count}, not one")
            return False
        param_type = decl.type.params[0].type
        if not isinstance(param_type, StarExpr):
            log.debug("not a test function: parameter is not a pointer")
            return False
        pointee = self.type_table.type_of(param_type.x)
        if not isinstance(pointee, Named):
            log.debug(f"not a test function: parameter points to {pointee or 'an unresolved type'}")
            return False
        if str(pointee) != self.config.handle_type:
            log.debug(f"not a test function: parameter is not {self.config.handle_type}")
            return False
        log.debug("is a test function")
        return True

    def handle_name(self, decl: FuncDecl) -> str | None:
        """Name of the single handle parameter; None when unnamed or blank."""
        if not decl.type.params:
            return None
        names = decl.type.params[0].names
        if not names or names[0].name == "_":
            return None
        return names[0].name
