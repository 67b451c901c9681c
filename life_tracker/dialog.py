"""
Generic edit-entry dialog.

Every tracker edits its records through the same view-state object: a list
of field descriptors, a working copy of the record's values, and a save
callback supplied by the tracker that performs the actual update. The dialog
renders nothing itself; the web layer draws it from ``rows()`` and feeds the
submitted inputs back through ``set_value``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from .errors import TrackerError
from .fields import NUMBER, FieldDescriptor

logger = logging.getLogger(__name__)

SaveCallback = Callable[[dict[str, Any]], Any]


class EditEntryDialog:
    def __init__(
        self,
        title: str,
        fields: Iterable[FieldDescriptor],
        initial_values: Mapping[str, Any],
        on_save: SaveCallback,
        *,
        open: bool = False,
    ) -> None:
        self.title = title
        self.fields = tuple(fields)
        if not self.fields:
            raise ValueError("An edit dialog needs at least one field")
        names = [f.name for f in self.fields]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate field names: {names}")
        self._by_name = {f.name: f for f in self.fields}
        self.on_save = on_save
        self.is_open = open
        self.saving = False
        self.last_error: TrackerError | None = None
        self._initial: dict[str, Any] = {}
        self.values: dict[str, Any] = {}
        self.initial_values = initial_values

    @property
    def initial_values(self) -> dict[str, Any]:
        return dict(self._initial)

    @initial_values.setter
    def initial_values(self, values: Mapping[str, Any]) -> None:
        # Any newly handed-in map discards whatever was typed before
        self._initial = self._seed(values)
        self.values = dict(self._initial)

    def _seed(self, values: Mapping[str, Any]) -> dict[str, Any]:
        seeded = {}
        for field in self.fields:
            if field.name in values:
                seeded[field.name] = values[field.name]
            elif field.default is not None:
                seeded[field.name] = field.default
            else:
                seeded[field.name] = 0 if field.kind == NUMBER else ""
        return seeded

    def open(self, initial_values: Mapping[str, Any] | None = None) -> None:
        if initial_values is not None:
            self.initial_values = initial_values
        self.last_error = None
        self.is_open = True

    def set_value(self, name: str, raw: Any) -> Any:
        """Store one edited input, coerced according to its descriptor."""
        field = self._by_name[name]
        value = field.coerce(raw)
        self.values[name] = value
        return value

    def apply(self, form: Mapping[str, Any]) -> None:
        """Set every descriptor present in ``form``; absent fields keep their value."""
        for field in self.fields:
            if field.name in form:
                self.set_value(field.name, form[field.name])

    def rows(self) -> list[tuple[FieldDescriptor, Any]]:
        return [(field, self.values[field.name]) for field in self.fields]

    def save(self) -> bool:
        """Hand the edited values to the save callback.

        Returns True and closes on success. A save already in flight, or a
        callback failing with :class:`TrackerError`, returns False and leaves
        the dialog open with its values untouched.
        """
        if self.saving:
            logger.debug("Ignoring save for %s: already saving", self.title)
            return False
        self.saving = True
        try:
            self.on_save(dict(self.values))
        except TrackerError as exc:
            self.last_error = exc
            return False
        finally:
            self.saving = False
        self.last_error = None
        self.is_open = False
        return True

    def cancel(self) -> None:
        self.values = dict(self._initial)
        self.last_error = None
        self.is_open = False
