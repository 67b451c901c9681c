"""
Web front end: one tab per feature, all rendered from a single page template.

- Every POST redirects back to its tab; outcomes arrive as flashed messages.
- Editing is a modal dialog opened with ``?edit=<id>``. A failed save
  re-renders the page with the dialog still open and the edits kept.
- ``?hide_balances=1`` masks money on the bank tab; forms carry it along.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, tzinfo
from typing import Callable

from flask import Flask, abort, flash, redirect, render_template_string, request, url_for

from . import config
from .errors import ValidationError
from .models import FEATURES, Feature, adjacent_features, fmt_money, fmt_number
from .services import DESTRUCTIVE, FlashNotifier, SessionAuth
from .store import RestStore, SqlStore, Store, make_engine
from .templates import PAGE_TEMPLATE
from .trackers import Tracker
from .trends import chart_data, parse_timestamp

logger = logging.getLogger(__name__)


def format_cell(entry: dict, key: str, fmt: str, feature: Feature, *, hidden: bool = False, tz: tzinfo | None = None) -> str:
    """Display text for one table cell."""
    value = entry.get(key)
    if fmt == "number":
        return fmt_number(value)
    if fmt == "money":
        return "****" if hidden else fmt_money(value)
    if fmt == "flag":
        return feature.flag_labels[0] if value else feature.flag_labels[1]
    if fmt == "mask":
        return f"****{value}" if value else ""
    if fmt == "date":
        if not value:
            return ""
        return parse_timestamp(value).astimezone(tz).strftime("%b %d, %Y %H:%M")
    return "" if value is None else str(value)


# -----------------------------
# App factory (allows testing)
# -----------------------------

def create_app(
    db_url: str | None = None,
    *,
    engine_override=None,
    store_override: Store | None = None,
    clock: Callable[[], datetime] | None = None,
    tz: tzinfo | None = None,
) -> Flask:
    app = Flask(__name__)
    app.secret_key = config.SECRET_KEY

    engine = None
    if store_override is not None:
        store = store_override
    elif engine_override is not None:
        engine = engine_override
        store = SqlStore(engine, clock=clock)
    elif db_url is None and config.BACKEND_URL and config.BACKEND_KEY:
        store = RestStore(config.BACKEND_URL, config.BACKEND_KEY)
    else:
        engine = make_engine(db_url or config.DATABASE_URL or config.DEFAULT_DATABASE_URL)
        store = SqlStore(engine, clock=clock)

    if tz is None:
        tz = config.resolve_timezone(config.TIMEZONE)
    logger.info("Using %s", type(store).__name__)

    def _feature_or_404(key: str) -> Feature:
        feature = FEATURES.get(key)
        if feature is None:
            abort(404)
        return feature

    def _tracker(feature: Feature) -> Tracker:
        return Tracker(feature, store, SessionAuth(), FlashNotifier(), clock=clock, tz=tz)

    def _hidden() -> bool:
        raw = request.form.get("_hide_balances") if request.method == "POST" else request.args.get("hide_balances")
        return (raw or "").strip() == "1"

    def _back(feature: Feature):
        if feature.maskable and _hidden():
            return redirect(url_for("tab", key=feature.key, hide_balances=1))
        return redirect(url_for("tab", key=feature.key))

    def _render(tracker: Tracker, *, dialog=None, dialog_entry_id=None):
        feature = tracker.feature
        hidden = feature.maskable and _hidden()
        trend = chart_data(tracker.trend()) if feature.trend_field else None
        prev_key, next_key = adjacent_features(feature.key)
        clearable = bool(feature.clear_field) and any(e.get(feature.clear_field) for e in tracker.entries)

        def cell(entry, key, fmt):
            return format_cell(entry, key, fmt, feature, hidden=hidden, tz=tz)

        return render_template_string(
            PAGE_TEMPLATE,
            feature=feature,
            features=list(FEATURES.values()),
            prev_key=prev_key,
            next_key=next_key,
            user_id=tracker.auth.current_user_id(),
            entries=tracker.entries,
            summary=tracker.summary(),
            cards=tracker.cards(hidden),
            hidden=hidden,
            clearable=clearable,
            trend=trend,
            trend_json=json.dumps(trend or {"labels": [], "values": []}),
            cell=cell,
            dialog=dialog,
            dialog_entry_id=dialog_entry_id,
        )

    # ---- Pages ----

    @app.get("/")
    def index():
        return tab(next(iter(FEATURES)))

    @app.get("/<key>")
    def tab(key: str):
        tracker = _tracker(_feature_or_404(key))
        tracker.load()
        dialog = None
        edit_id = (request.args.get("edit") or "").strip()
        if edit_id:
            dialog = tracker.edit_dialog(edit_id)
            if dialog is None:
                flash(f"Error: {tracker.feature.noun} not found.", DESTRUCTIVE)
        return _render(tracker, dialog=dialog, dialog_entry_id=edit_id or None)

    # ---- Mutations ----

    @app.post("/<key>/add")
    def add(key: str):
        feature = _feature_or_404(key)
        _tracker(feature).add(request.form)
        return _back(feature)

    @app.post("/<key>/delete/<entry_id>")
    def delete(key: str, entry_id: str):
        feature = _feature_or_404(key)
        tracker = _tracker(feature)
        tracker.load()
        tracker.delete(entry_id)
        return _back(feature)

    @app.post("/<key>/edit/<entry_id>")
    def edit(key: str, entry_id: str):
        feature = _feature_or_404(key)
        tracker = _tracker(feature)
        tracker.load()
        dialog = tracker.edit_dialog(entry_id)
        if dialog is None:
            flash(f"Error: {feature.noun} not found.", DESTRUCTIVE)
            return _back(feature)
        try:
            dialog.apply(request.form)
        except ValidationError as exc:
            flash(f"Error: {exc}", DESTRUCTIVE)
            return _render(tracker, dialog=dialog, dialog_entry_id=entry_id), 400
        if dialog.save():
            return _back(feature)
        # still open: the tracker has already flashed why
        return _render(tracker, dialog=dialog, dialog_entry_id=entry_id), 400

    @app.post("/<key>/toggle/<entry_id>")
    def toggle(key: str, entry_id: str):
        feature = _feature_or_404(key)
        if not feature.toggle_field:
            abort(404)
        tracker = _tracker(feature)
        tracker.load()
        tracker.toggle(entry_id)
        return _back(feature)

    @app.post("/<key>/set/<entry_id>")
    def set_field(key: str, entry_id: str):
        feature = _feature_or_404(key)
        name = (request.form.get("field") or "").strip()
        if name not in feature.quick_fields:
            abort(400)
        tracker = _tracker(feature)
        tracker.load()
        tracker.set_field(entry_id, name, request.form.get("value"))
        return _back(feature)

    @app.post("/<key>/clear")
    def clear(key: str):
        feature = _feature_or_404(key)
        if not feature.clear_field:
            abort(404)
        tracker = _tracker(feature)
        tracker.load()
        tracker.clear()
        return _back(feature)

    # ---- Session ----

    @app.post("/signin")
    def signin():
        user_id = (request.form.get("user_id") or "").strip()
        next_key = (request.form.get("_next") or "").strip()
        target = url_for("tab", key=next_key) if next_key in FEATURES else url_for("index")
        if not user_id:
            flash("Error: Please enter your email to sign in.", DESTRUCTIVE)
            return redirect(target)
        SessionAuth().sign_in(user_id)
        flash(f"Signed in as {user_id}.")
        return redirect(target)

    @app.post("/signout")
    def signout():
        SessionAuth().sign_out()
        flash("Signed out.")
        return redirect(url_for("index"))

    # Expose store/engine for tests
    app.config["_STORE"] = store
    app.config["_ENGINE"] = engine

    return app
