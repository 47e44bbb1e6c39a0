import copy
import threading
import uuid


class MockAPIError(Exception):
    """Raised by the mock when a table operation has been set up to fail."""


class MockResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class MockSupabaseClient:
    """
    In-memory stand-in for the Supabase client.

    Supports the chainable subset of the PostgREST builder that the app uses.
    `fail_on` holds (table, operation) pairs that should raise MockAPIError,
    e.g. {("training_plans", "delete")}.
    """

    def __init__(self, data=None):
        self.data = {
            "profiles": [],
            "training_plans": [],
            "user_training_feedback": [],
            "coach_messages": [],
            "chat_summaries": [],
            "chats": [],
        }
        if data:
            for table_name, rows in data.items():
                self.data[table_name] = [dict(r) for r in rows]
        self.fail_on = set()
        self.calls = []
        self.lock = threading.RLock()

    def table(self, table_name):
        self.data.setdefault(table_name, [])
        return MockQuery(self, table_name)

    def rows(self, table_name):
        return self.data.get(table_name, [])


class MockQuery:
    def __init__(self, client, table_name):
        self.client = client
        self.table_name = table_name
        self.operation = "select"
        self.payload = None
        self.on_conflict = None
        self.filters = []
        self.negate_next = False
        self.order_by = []
        self.limit_count = None
        self.single_mode = False

    # --- operations ---

    def select(self, columns="*", count=None):
        self.operation = "select"
        return self

    def insert(self, data):
        self.operation = "insert"
        self.payload = data
        return self

    def upsert(self, data, on_conflict=None):
        self.operation = "upsert"
        self.payload = data
        self.on_conflict = on_conflict
        return self

    def update(self, data):
        self.operation = "update"
        self.payload = data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # --- filters ---

    def _add(self, predicate):
        if self.negate_next:
            self.negate_next = False
            self.filters.append(lambda row: not predicate(row))
        else:
            self.filters.append(predicate)
        return self

    @property
    def not_(self):
        self.negate_next = True
        return self

    def eq(self, column, value):
        return self._add(lambda row: str(row.get(column)) == str(value))

    def neq(self, column, value):
        return self._add(lambda row: str(row.get(column)) != str(value))

    def gte(self, column, value):
        return self._add(lambda row: row.get(column) is not None and str(row.get(column)) >= str(value))

    def lte(self, column, value):
        return self._add(lambda row: row.get(column) is not None and str(row.get(column)) <= str(value))

    def lt(self, column, value):
        return self._add(lambda row: row.get(column) is not None and str(row.get(column)) < str(value))

    def in_(self, column, values):
        wanted = {str(v) for v in values}
        return self._add(lambda row: str(row.get(column)) in wanted)

    def ilike(self, column, pattern):
        clean_pattern = pattern.replace("%", "").lower()
        return self._add(lambda row: clean_pattern in str(row.get(column, "")).lower())

    # --- modifiers ---

    def order(self, column, desc=False):
        self.order_by.append((column, desc))
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def single(self):
        self.single_mode = True
        return self

    def maybe_single(self):
        return self.single()

    # --- execution ---

    def _matching(self):
        rows = self.client.data[self.table_name]
        for f in self.filters:
            rows = [r for r in rows if f(r)]
        return rows

    def execute(self):
        with self.client.lock:
            return self._execute()

    def _execute(self):
        self.client.calls.append((self.table_name, self.operation))
        if (self.table_name, self.operation) in self.client.fail_on:
            raise MockAPIError(f"{self.operation} on {self.table_name} failed")

        table = self.client.data[self.table_name]

        if self.operation in ("insert", "upsert"):
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            written = []
            for item in items:
                item = copy.deepcopy(item)
                item.setdefault("id", str(uuid.uuid4()))
                existing = None
                if self.operation == "upsert":
                    keys = (self.on_conflict or "id").split(",")
                    for row in table:
                        if all(str(row.get(k)) == str(item.get(k)) for k in keys):
                            existing = row
                            break
                if existing is not None:
                    item.pop("id", None)
                    existing.update(item)
                    written.append(copy.deepcopy(existing))
                else:
                    table.append(item)
                    written.append(copy.deepcopy(item))
            return MockResponse(written)

        rows = self._matching()

        if self.operation == "update":
            for row in rows:
                row.update(copy.deepcopy(self.payload))
            return MockResponse([copy.deepcopy(r) for r in rows])

        if self.operation == "delete":
            doomed = {id(r) for r in rows}
            self.client.data[self.table_name] = [r for r in table if id(r) not in doomed]
            return MockResponse([copy.deepcopy(r) for r in rows])

        for column, desc in reversed(self.order_by):
            rows = sorted(rows, key=lambda r: (r.get(column) is None, str(r.get(column))), reverse=desc)

        if self.limit_count is not None:
            rows = rows[:self.limit_count]

        rows = [copy.deepcopy(r) for r in rows]
        if self.single_mode:
            return MockResponse(rows[0] if rows else None)
        return MockResponse(rows, count=len(rows))
