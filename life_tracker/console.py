# Terminal front end for the trackers
# Pick a tab, then add, list, edit or delete its entries.
# Tables and trends are printed as pandas DataFrames.

from __future__ import annotations

import logging
from typing import Callable

import pandas as pd

from .errors import ValidationError
from .models import FEATURES, Feature
from .services import ConsoleNotifier, StaticAuth
from .store import Store
from .trackers import Tracker
from .trends import day_label

logger = logging.getLogger(__name__)


def entries_frame(feature: Feature, entries: list[dict]) -> pd.DataFrame:
    columns = ["id"] + [key for key, _, _ in feature.columns if key != "id"]
    df = pd.DataFrame(entries, columns=columns)
    return df.rename(columns={key: header for key, header, _ in feature.columns})


def trend_frame(series) -> pd.DataFrame:
    return pd.DataFrame([(day_label(day), total) for day, total in series], columns=["Day", "Total"])


def show_entries(tracker: Tracker) -> None:
    f = tracker.feature
    if not tracker.entries:
        print(f.empty_message)
        return
    print(f"\n{f.title}:")
    print(entries_frame(f, tracker.entries))


def show_summary(tracker: Tracker) -> None:
    for label, value in tracker.cards():
        print(f"{label}: {value}")
    if tracker.feature.trend_field:
        print(f"\n{tracker.feature.trend_title}:")
        print(trend_frame(tracker.trend()))


def prompt_form(feature: Feature, fields, input_fn: Callable[[str], str], current=None) -> dict:
    form = {}
    for field in fields:
        hint = ""
        if field.choices:
            hint = f" [{'/'.join(field.choice_values())}]"
        if current is not None:
            hint += f" ({current.get(field.name)})"
        form[field.name] = input_fn(f"{field.label}{hint}: ")
    return form


def _pick(tracker: Tracker, input_fn) -> str | None:
    show_entries(tracker)
    if not tracker.entries:
        return None
    raw = input_fn("Row number: ").strip()
    row = int(raw) if raw.isdigit() else -1
    if not 0 <= row < len(tracker.entries):
        print("Unknown row")
        return None
    return tracker.entries[row]["id"]


def edit_entry(tracker: Tracker, input_fn) -> None:
    entry_id = _pick(tracker, input_fn)
    if entry_id is None:
        return
    dialog = tracker.edit_dialog(entry_id)
    form = prompt_form(tracker.feature, dialog.fields, input_fn, current=dialog.values)
    # blank answers keep the current value
    try:
        dialog.apply({k: v for k, v in form.items() if v.strip()})
    except ValidationError as exc:
        print(f"[!] {exc}")
        dialog.cancel()
        return
    if not dialog.save():
        dialog.cancel()


def run_feature(tracker: Tracker, input_fn: Callable[[str], str]) -> None:
    f = tracker.feature
    while True:
        tracker.load()
        print(f"\n{f.title}: choose an input:")
        print("1. Add")
        print("2. Show")
        print("3. Edit")
        print("4. Delete")
        print("5. Summary")
        if f.toggle_field:
            print(f"6. Toggle {f.toggle_field}")
        if f.clear_field:
            print("7. Clear completed")
        print("0. Back")
        choice = input_fn("> ").strip()

        if choice == "1":
            tracker.add(prompt_form(f, f.form_fields, input_fn))
        elif choice == "2":
            show_entries(tracker)
        elif choice == "3":
            edit_entry(tracker, input_fn)
        elif choice == "4":
            entry_id = _pick(tracker, input_fn)
            if entry_id is not None:
                tracker.delete(entry_id)
        elif choice == "5":
            show_summary(tracker)
        elif choice == "6" and f.toggle_field:
            entry_id = _pick(tracker, input_fn)
            if entry_id is not None:
                tracker.toggle(entry_id)
        elif choice == "7" and f.clear_field:
            tracker.clear()
        elif choice == "0":
            return
        else:
            print("Unknown command")


def run_console(store: Store, user_id: str | None = None, *, input_fn: Callable[[str], str] = input, tz=None) -> None:
    auth = StaticAuth(user_id)
    notifier = ConsoleNotifier()
    keys = list(FEATURES)
    while True:
        print("\nChoose a tracker:")
        for i, key in enumerate(keys, start=1):
            print(f"{i}. {FEATURES[key].title}")
        print("0. Quit")
        choice = input_fn("> ").strip()
        if choice == "0":
            print("Goodbye :)")
            break
        number = int(choice) if choice.isdigit() else 0
        if not 1 <= number <= len(keys):
            print("Unknown command")
            continue
        feature = FEATURES[keys[number - 1]]
        if feature.owned and not auth.current_user_id():
            print("[!] Sign in with --user to use this tracker")
            continue
        logger.debug("Opening %s", feature.key)
        run_feature(Tracker(feature, store, auth, notifier, tz=tz), input_fn)
