"""
Generic tracker: one feature bound to its collaborators.

A tracker owns the in-memory collection of its feature's rows. Reads and
mutations go through the injected store; outcomes are reported through the
injected notifier. Persistence failures are reported and swallowed, and the
collection is only patched after the store confirms a change. ``update`` is
the exception: it re-raises so an edit dialog can stay open for a retry.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable, Mapping

from .dialog import EditEntryDialog
from .errors import AuthError, StoreError, ValidationError
from .fields import clean
from .models import TODAY, Feature
from .services import DESTRUCTIVE, Auth, Notifier
from .store import Store
from .trends import daily_totals, day_start, local_day, parse_timestamp, window

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tracker:
    def __init__(
        self,
        feature: Feature,
        store: Store,
        auth: Auth,
        notifier: Notifier,
        *,
        clock: Callable[[], datetime] | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self.feature = feature
        self.store = store
        self.auth = auth
        self.notifier = notifier
        self.clock = clock or _utcnow
        self.tz = tz
        self.entries: list[dict] = []
        self.submitting = False

    def __repr__(self):
        return f"<Tracker {self.feature.key} ({len(self.entries)} entries)>"

    def _error(self, description: str) -> None:
        self.notifier.notify("Error", description, DESTRUCTIVE)

    def _failed(self, action: str) -> None:
        self._error(f"Failed to {action} {self.feature.noun.lower()}.")

    def _filters(self) -> dict[str, Any]:
        user_id = self.auth.current_user_id()
        if self.feature.owned and user_id:
            return {"user_id": user_id}
        return {}

    def find(self, entry_id: str) -> dict | None:
        for entry in self.entries:
            if entry["id"] == entry_id:
                return entry
        return None

    def _patch(self, row: Mapping[str, Any]) -> None:
        self.entries = [{**e, **row} if e["id"] == row["id"] else e for e in self.entries]

    # ---- Reads ----

    def load(self) -> list[dict]:
        f = self.feature
        # Owned rows are invisible until someone signs in
        if f.owned and not self.auth.current_user_id():
            self.entries = []
            return self.entries
        since = None
        if f.scope == TODAY:
            since = day_start(local_day(self.clock(), self.tz), self.tz)
        try:
            self.entries = self.store.select(
                f.table,
                filters=self._filters(),
                since=since,
                order_by=f.order_by,
                descending=f.descending,
            )
        except StoreError:
            self._error(f"Failed to fetch {f.plural}.")
        return self.entries

    def summary(self) -> dict:
        return self.feature.summarize(self.entries)

    def cards(self, hidden: bool = False) -> list[tuple[str, str]]:
        return self.feature.cards(self.summary(), hidden)

    def trend(self) -> list[tuple[date, float]]:
        """Seven-day series of the feature's trend measure, oldest day first."""
        f = self.feature
        if not f.trend_field:
            raise ValueError(f"{f.key} has no trend chart")
        now = self.clock()
        start = day_start(window(now, tz=self.tz)[0], self.tz)
        try:
            rows = self.store.select(f.table, filters=self._filters(), since=start)
        except StoreError:
            self._error(f"Failed to load history for {f.plural}.")
            rows = []
        points = ((parse_timestamp(r["created_at"]), r[f.trend_field] or 0) for r in rows)
        return daily_totals(now, points, tz=self.tz)

    # ---- Mutations ----

    def add(self, form: Mapping[str, Any]) -> dict | None:
        """Validate and insert a new row; returns it, or None after a reported failure."""
        f = self.feature
        if self.submitting:
            return None
        try:
            values = clean(f.form_fields, form)
            f.check(values)
        except ValidationError as exc:
            self._error(str(exc))
            return None

        row = {**f.defaults, **values}
        self.submitting = True
        try:
            if f.owned:
                user_id = self.auth.current_user_id()
                if not user_id:
                    raise AuthError("User not authenticated")
                row["user_id"] = user_id
            created = self.store.insert(f.table, row)
        except AuthError as exc:
            self._error(str(exc))
            return None
        except StoreError:
            self._failed("add")
            return None
        finally:
            self.submitting = False

        logger.info("Added %s %s", f.key, created.get("id"))
        self.notifier.notify("Success", f.added_message)
        self.load()
        return created

    def delete(self, entry_id: str) -> bool:
        f = self.feature
        if self.find(entry_id) is None:
            self._error(f"{f.noun} not found.")
            return False
        try:
            removed = self.store.delete(f.table, [entry_id])
        except StoreError:
            self._failed("delete")
            return False
        if not removed:
            self._error(f"{f.noun} not found.")
            return False
        self.entries = [e for e in self.entries if e["id"] != entry_id]
        logger.info("Deleted %s %s", f.key, entry_id)
        self.notifier.notify("Success", f"{f.noun} deleted successfully!")
        return True

    def clear(self) -> int:
        """Delete every entry whose clear flag is set, as one id-set delete."""
        f = self.feature
        if not f.clear_field:
            raise ValueError(f"{f.key} has nothing to clear")
        ids = [e["id"] for e in self.entries if e.get(f.clear_field)]
        if not ids:
            return 0
        try:
            count = self.store.delete(f.table, ids)
        except StoreError:
            self._error(f"Failed to clear completed {f.plural}.")
            return 0
        self.entries = [e for e in self.entries if e["id"] not in ids]
        logger.info("Cleared %d %s entries", count, f.key)
        self.notifier.notify("Success", f"Cleared {count} completed item(s).")
        return count

    def update(self, entry_id: str, values: Mapping[str, Any]) -> dict:
        """Save callback for the edit dialog; failures are reported then re-raised."""
        f = self.feature
        if self.find(entry_id) is None:
            exc = StoreError(f"{f.noun} not found.")
            self._error(str(exc))
            raise exc
        try:
            cleaned = clean(f.edit_fields, values)
            f.check(cleaned)
        except ValidationError as exc:
            self._error(str(exc))
            raise
        try:
            updated = self.store.update(f.table, entry_id, cleaned)
        except StoreError:
            self._failed("update")
            raise
        self._patch(updated)
        logger.info("Updated %s %s", f.key, entry_id)
        self.notifier.notify("Success", f"{f.noun} updated successfully!")
        return updated

    def set_field(self, entry_id: str, name: str, raw: Any) -> bool:
        """Single-field quick update (bill status, account balance)."""
        f = self.feature
        if name not in f.quick_fields:
            raise ValueError(f"{name} is not a quick field of {f.key}")
        descriptor = f.edit_field(name)
        if self.find(entry_id) is None:
            self._error(f"{f.noun} not found.")
            return False
        try:
            value = descriptor.coerce(raw.strip() if isinstance(raw, str) else raw)
            f.check({name: value})
        except ValidationError as exc:
            self._error(str(exc))
            return False
        try:
            updated = self.store.update(f.table, entry_id, {name: value})
        except StoreError:
            self._failed("update")
            return False
        self._patch(updated)
        self.notifier.notify("Success", f"{descriptor.label} updated successfully!")
        return True

    def toggle(self, entry_id: str) -> bool:
        f = self.feature
        if not f.toggle_field:
            raise ValueError(f"{f.key} has nothing to toggle")
        entry = self.find(entry_id)
        if entry is None:
            self._error(f"{f.noun} not found.")
            return False
        try:
            updated = self.store.update(f.table, entry_id, {f.toggle_field: not entry[f.toggle_field]})
        except StoreError:
            self._failed("update")
            return False
        self._patch(updated)
        self.notifier.notify("Success", f"{f.noun} updated successfully!")
        return True

    def edit_dialog(self, entry_id: str) -> EditEntryDialog | None:
        """An open dialog seeded from the entry, saving through ``update``."""
        entry = self.find(entry_id)
        if entry is None:
            return None
        initial = {d.name: "" if entry.get(d.name) is None else entry[d.name] for d in self.feature.edit_fields}
        dialog = EditEntryDialog(
            self.feature.noun,
            self.feature.edit_fields,
            initial,
            lambda values: self.update(entry_id, values),
        )
        dialog.open()
        return dialog
