"""SQL functions whose spelling differs between PostgreSQL and SQLite.

PostgreSQL is the production store. SQLite only backs the in-memory test
database, so the SQLite renderings only need to agree with PostgreSQL on the
result, not on the plan.
"""

from typing import Any

from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import ColumnElement, FunctionElement


class greatest(FunctionElement):
    """``GREATEST(a, b, ...)`` with PostgreSQL semantics: NULL arguments are ignored
    and the result is NULL only when every argument is NULL.

    The result type is taken from the first argument.
    """

    name = "greatest"
    inherit_cache = True

    def __init__(self, *clauses: ColumnElement[Any]) -> None:
        if len(clauses) < 2:
            raise ValueError("greatest() needs at least two arguments")
        super().__init__(*clauses)
        self.type = clauses[0].type


@compiles(greatest)
def _compile_greatest(element: greatest, compiler: Any, **kw: Any) -> str:
    return "GREATEST(%s)" % compiler.process(element.clauses, **kw)


@compiles(greatest, "sqlite")
def _compile_greatest_sqlite(element: greatest, compiler: Any, **kw: Any) -> str:
    # SQLite's scalar max() returns NULL as soon as one argument is NULL. Each
    # argument is coalesced with the others so a NULL one falls back to a value
    # that never exceeds the true maximum.
    args = [compiler.process(clause, **kw) for clause in element.clauses]
    coalesced = [
        "coalesce(%s)" % ", ".join([arg] + args[:i] + args[i + 1 :])
        for i, arg in enumerate(args)
    ]
    return "max(%s)" % ", ".join(coalesced)
