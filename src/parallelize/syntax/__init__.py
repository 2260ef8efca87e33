from parallelize.syntax.parser import parse_file
from parallelize.syntax.printer import Printer, render
from parallelize.syntax.walk import Visit, children, contains, find_first, walk

__all__ = [
    "Printer",
    "Visit",
    "children",
    "contains",
    "find_first",
    "parse_file",
    "render",
    "walk",
]
