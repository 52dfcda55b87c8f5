"""
In-memory stand-in for the supabase-py client used by the services.

Supports the query-builder subset the app uses (select / insert / update /
delete / upsert with eq, neq, in_, is_, ilike, order, limit and range), serial
primary keys, column defaults and the unique constraints of sql/schema.sql.
Unique violations raise postgrest's APIError with SQLSTATE 23505, like
PostgREST does, and `max_rows` caps select responses like its db-max-rows.
"""

import copy
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from postgrest.exceptions import APIError

PRIMARY_KEYS = {
    "users": "user_id",
    "rounds": "round_id",
    "fixtures": "fixture_id",
    "predictions": "prediction_id",
    "leagues": "league_id",
    "league_memberships": "membership_id",
    "friendships": "id",
    "news_items": "news_item_id",
}

UNIQUE_CONSTRAINTS = {
    "users": [("email",), ("email_verification_token",), ("password_reset_token",)],
    "rounds": [("name",)],
    "fixtures": [("round_id", "home_team", "away_team", "match_time")],
    "predictions": [("user_id", "fixture_id")],
    "leagues": [("invite_code",)],
    "league_memberships": [("league_id", "user_id")],
    "friendships": [("requester_id", "addressee_id")],
    "news_items": [],
}

DEFAULTS = {
    "users": {
        "role": "PLAYER", "team_name": None, "avatar_url": None, "email_verified": False,
        "email_verification_token": None, "password_reset_token": None,
        "password_reset_expires": None, "subscription_tier": "FREE",
        "notifies_new_round": True, "notifies_deadline_reminder": True,
        "notifies_round_results": True,
    },
    "rounds": {"status": "SETUP", "joker_limit": 1, "created_by": None},
    "fixtures": {"home_score": None, "away_score": None, "status": "SCHEDULED"},
    "predictions": {
        "predicted_home_goals": None, "predicted_away_goals": None,
        "is_joker": False, "points_awarded": None,
    },
    "leagues": {"description": None},
    "league_memberships": {"role": "MEMBER", "status": "ACCEPTED", "invited_at": None, "joined_at": None},
    "friendships": {"status": "PENDING"},
    "news_items": {"posted_by_user_id": None},
}

TIMESTAMP_COLUMNS = {
    "users": ("created_at", "updated_at"),
    "rounds": ("created_at", "updated_at"),
    "fixtures": ("created_at", "updated_at"),
    "predictions": ("submitted_at",),
    "leagues": ("created_at", "updated_at"),
    "league_memberships": (),
    "friendships": ("created_at", "updated_at"),
    "news_items": ("created_at",),
}


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data
        self.count = None


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self.limit_count: Optional[int] = None
        self.offset = 0

    # Actions

    def select(self, columns: str = "*", **kwargs):
        self.columns = columns
        return self

    def insert(self, payload, **kwargs):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload, **kwargs):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self, **kwargs):
        self.action = "delete"
        return self

    def upsert(self, payload, on_conflict: str = "", **kwargs):
        self.action = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    # Filters

    def eq(self, column: str, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column: str, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def is_(self, column: str, value):
        expected = None if value in (None, "null") else value
        self.filters.append(lambda row: row.get(column) is expected)
        return self

    def ilike(self, column: str, pattern: str):
        # LIKE semantics: % and _ are wildcards, backslash escapes the next character
        parts = []
        chars = iter(pattern)
        for ch in chars:
            if ch == "\\":
                parts.append(re.escape(next(chars, "\\")))
            elif ch == "%":
                parts.append(".*")
            elif ch == "_":
                parts.append(".")
            else:
                parts.append(re.escape(ch))
        regex = re.compile("^" + "".join(parts) + "$", re.IGNORECASE | re.DOTALL)
        self.filters.append(lambda row: row.get(column) is not None and bool(regex.match(str(row[column]))))
        return self

    def order(self, column: str, desc: bool = False, **kwargs):
        self.orders.append((column, desc))
        return self

    def limit(self, size: int, **kwargs):
        self.limit_count = size
        return self

    def range(self, start: int, end: int, **kwargs):
        self.offset = start
        self.limit_count = end - start + 1
        return self

    # Execution

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(f(row) for f in self.filters)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        columns = [c.strip() for c in self.columns.split(",") if c.strip()]
        return {c: copy.deepcopy(row.get(c)) for c in columns}

    def _sorted(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # Postgres puts NULLs last when ascending and first when descending
        for column, desc in reversed(self.orders):
            rows = sorted(rows, key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        return rows

    def execute(self) -> FakeResponse:
        rows = self.db.tables.setdefault(self.table, [])
        if self.action == "select":
            found = self._sorted([r for r in rows if self._matches(r)])
            found = found[self.offset:]
            if self.limit_count is not None:
                found = found[:self.limit_count]
            if self.db.max_rows is not None:
                found = found[:self.db.max_rows]
            return FakeResponse([self._project(r) for r in found])

        if self.action == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResponse(self.db.insert_rows(self.table, payload))

        if self.action == "update":
            targets = [r for r in rows if self._matches(r)]
            updated = [{**r, **copy.deepcopy(self.payload)} for r in targets]
            self.db.check_unique(self.table, updated, exclude=targets)
            for row, new in zip(targets, updated):
                row.update(new)
            return FakeResponse([copy.deepcopy(r) for r in targets])

        if self.action == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse([copy.deepcopy(r) for r in removed])

        if self.action == "upsert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            conflict = [c.strip() for c in (self.on_conflict or PRIMARY_KEYS[self.table]).split(",")]
            result = []
            for item in payload:
                existing = next(
                    (r for r in self.db.tables[self.table] if all(r.get(c) == item.get(c) for c in conflict)),
                    None,
                )
                if existing is not None:
                    new = {**existing, **copy.deepcopy(item)}
                    self.db.check_unique(self.table, [new], exclude=[existing])
                    existing.update(new)
                    result.append(copy.deepcopy(existing))
                else:
                    result.extend(self.db.insert_rows(self.table, [item]))
            return FakeResponse(result)

        raise ValueError(f"Unsupported action {self.action}")


class FakeSupabase:
    def __init__(self, max_rows: Optional[int] = None):
        self.max_rows = max_rows
        self.tables: Dict[str, List[Dict[str, Any]]] = {name: [] for name in PRIMARY_KEYS}
        self._next_ids: Dict[str, int] = {name: 1 for name in PRIMARY_KEYS}
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def _now(self) -> str:
        # Strictly increasing so created_at ordering is deterministic
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def check_unique(self, table: str, candidates: List[Dict[str, Any]], exclude: List[Dict[str, Any]] = ()):
        excluded_ids = {id(r) for r in exclude}
        others = [r for r in self.tables[table] if id(r) not in excluded_ids]
        for columns in UNIQUE_CONSTRAINTS.get(table, []):
            seen = set()
            for row in others + list(candidates):
                key = tuple(row.get(c) for c in columns)
                if any(v is None for v in key):
                    continue
                if key in seen:
                    raise APIError({
                        "code": "23505",
                        "message": f"duplicate key value violates unique constraint on {table}({', '.join(columns)})",
                        "details": None,
                        "hint": None,
                    })
                seen.add(key)

    def insert_rows(self, table: str, payload: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        pk = PRIMARY_KEYS[table]
        new_rows = []
        for item in payload:
            row = {**DEFAULTS.get(table, {})}
            for column in TIMESTAMP_COLUMNS.get(table, ()):
                row[column] = self._now()
            row.update(copy.deepcopy(item))
            if row.get(pk) is None:
                row[pk] = self._next_ids[table]
            self._next_ids[table] = max(self._next_ids[table], row[pk] + 1)
            new_rows.append(row)

        self.check_unique(table, new_rows)
        self.tables[table].extend(new_rows)
        return [copy.deepcopy(r) for r in new_rows]

    # Test helpers

    def seed(self, table: str, **values) -> Dict[str, Any]:
        return self.insert_rows(table, [values])[0]

    def rows(self, table: str, **filters) -> List[Dict[str, Any]]:
        return [
            copy.deepcopy(r) for r in self.tables[table]
            if all(r.get(k) == v for k, v in filters.items())
        ]
