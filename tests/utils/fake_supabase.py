"""In-memory stand-in for the supabase-py table query builder."""

import copy
import re
from typing import Any, Optional

_JOIN_RE = re.compile(r"(\w+)\(([^)]*)\)")


class FakeResult:
    def __init__(self, data: list[dict], count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Records a chained query and applies it to the owning FakeSupabase on execute()."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op: Optional[str] = None
        self.payload: Any = None
        self.columns = "*"
        self.count: Optional[str] = None
        self.filters: list[tuple[str, Any]] = []
        self.order_by: Optional[tuple[str, bool]] = None

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self.op = "select"
        self.columns = columns
        self.count = count
        return self

    def insert(self, payload: dict) -> "FakeQuery":
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self.op = "update"
        self.payload = payload
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self.filters)

    def _project(self, row: dict) -> dict:
        joins = _JOIN_RE.findall(self.columns)
        plain = [c.strip() for c in _JOIN_RE.sub("", self.columns).split(",") if c.strip()]

        if "*" in plain:
            result = copy.deepcopy(row)
        else:
            result = {column: copy.deepcopy(row.get(column)) for column in plain}

        for joined_table, joined_columns in joins:
            wanted = [c.strip() for c in joined_columns.split(",") if c.strip()]
            target = next(
                (r for r in self.db.tables.get(joined_table, []) if r.get("id") == row.get("agent_id")),
                None,
            )
            result[joined_table] = {c: target.get(c) for c in wanted} if target else None
        return result

    def execute(self) -> FakeResult:
        self.db.calls.append((self.op, self.table_name))
        failure = self.db.failures.get((self.table_name, self.op))
        if failure is not None:
            raise failure

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.op == "insert":
            row = copy.deepcopy(self.payload)
            rows.append(row)
            return FakeResult([copy.deepcopy(row)])

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResult(updated)

        selected = [row for row in rows if self._matches(row)]
        if self.order_by:
            column, desc = self.order_by
            selected.sort(key=lambda r: r.get(column) or "", reverse=desc)
        count = None
        if self.count == "exact":
            count = len(selected)
            self.db.counted.append((self.table_name, dict(self.filters)))
        if self.db.max_rows is not None:
            selected = selected[:self.db.max_rows]
        return FakeResult([self._project(row) for row in selected], count)


class FakeSupabase:
    """
    Tables are plain lists of row dicts; ``failures`` maps (table, op) to an
    exception to raise. ``max_rows`` caps select responses the way the
    hosted API does; exact counts ignore it. ``counted`` records every
    exact-count query as (table, filters).
    """

    def __init__(self, max_rows: Optional[int] = None):
        self.max_rows = max_rows
        self.counted: list[tuple[str, dict]] = []
        self.tables: dict[str, list[dict]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> list[dict]:
        return self.tables.get(name, [])
