"""
Feature definitions: one per tracker tab.

Each feature names its table, the descriptors of its add form and edit
dialog, the columns shown in its list, any checks beyond the descriptors,
and the reduction that feeds its summary cards. The generic ``Tracker`` in
``trackers.py`` runs all six.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Mapping

from .errors import ValidationError
from .fields import CHOICE, NUMBER, FieldDescriptor, options
from .store import TABLE_BANK, TABLE_BILLS, TABLE_EXERCISE, TABLE_FOOD, TABLE_SHOPPING, TABLE_WEIGHT

TODAY = "today"
ALL = "all"

ACCOUNT_TYPES = (
    "Checking", "Savings", "Credit Card", "Investment", "Money Market",
    "Certificate of Deposit", "IRA", "401k", "Other",
)
CURRENCIES = ("USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "CNY")
BILL_CATEGORIES = (
    "Utilities", "Subscriptions", "Insurance", "Loans", "Rent/Mortgage",
    "Internet/Phone", "Entertainment", "Other",
)
FREQUENCIES = ("weekly", "monthly", "quarterly", "yearly")
STATUSES = ("pending", "paid", "overdue")
WEIGHT_UNITS = ("kg", "lbs")


def fmt_number(value: Any) -> str:
    value = float(value or 0)
    if value.is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def fmt_money(value: Any) -> str:
    return f"${float(value or 0):.2f}"


def _no_check(values: Mapping[str, Any]) -> None:
    return None


@dataclass(frozen=True)
class Feature:
    key: str
    title: str
    noun: str
    table: str
    form_fields: tuple[FieldDescriptor, ...]
    edit_fields: tuple[FieldDescriptor, ...]
    # (row key, header, format) where format is text|number|money|date|flag|mask
    columns: tuple[tuple[str, str, str], ...]
    summarize: Callable[[list[dict]], dict]
    cards: Callable[[dict, bool], list[tuple[str, str]]]
    # list name used in messages ("food entries")
    plural: str = "entries"
    check: Callable[[Mapping[str, Any]], None] = _no_check
    defaults: Mapping[str, Any] = field(default_factory=dict)
    added_message: str = "Entry added."
    empty_message: str = "No entries yet."
    order_by: str = "created_at"
    descending: bool = False
    scope: str = ALL
    owned: bool = False
    trend_field: str | None = None
    trend_title: str = ""
    toggle_field: str | None = None
    # button text when the flag is currently (true, false)
    toggle_labels: tuple[str, str] = ("Undo", "Done")
    flag_labels: tuple[str, str] = ("Yes", "No")
    quick_fields: tuple[str, ...] = ()
    clear_field: str | None = None
    # balances can be masked with ?hide_balances=1
    maskable: bool = False

    def edit_field(self, name: str) -> FieldDescriptor:
        for f in self.edit_fields:
            if f.name == name:
                return f
        raise KeyError(name)


# ---- Calories ----

def summarize_calories(entries):
    return {
        "total_calories": sum(e["calories"] or 0 for e in entries),
        "count": len(entries),
    }


def calorie_cards(summary, hidden=False):
    return [
        ("Total Calories Today", fmt_number(summary["total_calories"])),
        ("Entries", str(summary["count"])),
    ]


FOOD_FIELDS = (
    FieldDescriptor("name", "Food name", placeholder="Food name (e.g., Apple)"),
    FieldDescriptor("calories", "Calories", NUMBER, placeholder="Calories"),
)


# ---- Shopping list ----

def summarize_shopping(entries):
    total = len(entries)
    completed = sum(1 for e in entries if e["completed"])
    return {
        "completed_count": completed,
        "total_count": total,
        "progress_pct": 0.0 if total == 0 else round(completed / total * 100, 2),
    }


def shopping_cards(summary, hidden=False):
    return [("Items Collected", f"{summary['completed_count']}/{summary['total_count']}")]


SHOPPING_FIELDS = (
    FieldDescriptor("name", "Item", placeholder="Enter food item (e.g., Bananas, Chicken breast)"),
)


# ---- Exercise ----

def summarize_exercise(entries):
    return {
        "total_sets": sum(e["sets"] or 0 for e in entries),
        "total_volume": sum((e["sets"] or 0) * (e["reps"] or 0) * (e["weight"] or 0) for e in entries),
    }


def exercise_cards(summary, hidden=False):
    return [
        ("Total Sets", fmt_number(summary["total_sets"])),
        ("Total Volume", f"{summary['total_volume']:.1f} lbs"),
    ]


EXERCISE_FIELDS = (
    FieldDescriptor("exercise", "Exercise Name", placeholder="e.g., Bench Press"),
    FieldDescriptor("sets", "Sets", NUMBER, integer=True, placeholder="3"),
    FieldDescriptor("reps", "Reps", NUMBER, integer=True, placeholder="10"),
    FieldDescriptor("weight", "Weight (lbs)", NUMBER, placeholder="135"),
)


def check_exercise(values):
    for name in ("sets", "reps", "weight"):
        if name in values and values[name] is not None and values[name] < 0:
            raise ValidationError(f"{name.capitalize()} cannot be negative.", name)


# ---- Weight ----

def weight_trend(entries):
    """Change between the two most recent readings (entries newest first)."""
    if len(entries) < 2:
        return None
    latest = entries[0]
    difference = latest["weight"] - entries[1]["weight"]
    if difference > 0:
        direction = "up"
    elif difference < 0:
        direction = "down"
    else:
        direction = "same"
    return {"direction": direction, "amount": abs(difference), "unit": latest["unit"]}


def summarize_weight(entries):
    return {
        "current": entries[0] if entries else None,
        "trend": weight_trend(entries),
    }


def weight_cards(summary, hidden=False):
    current = summary["current"]
    cards = [(
        "Current Weight",
        f"{fmt_number(current['weight'])} {current['unit']}" if current else "No entries yet",
    )]
    trend = summary["trend"]
    if trend:
        if trend["direction"] == "same":
            change = "No change"
        else:
            arrow = "▲" if trend["direction"] == "up" else "▼"
            change = f"{arrow} {trend['amount']:.1f} {trend['unit']}"
        cards.append(("From last entry", change))
    return cards


WEIGHT_FIELDS = (
    FieldDescriptor("weight", "Weight", NUMBER, placeholder="Enter weight"),
    FieldDescriptor("unit", "Unit", CHOICE, options(WEIGHT_UNITS), required=False, default="kg"),
)


def check_weight(values):
    if "weight" in values and (values["weight"] is None or values["weight"] <= 0):
        raise ValidationError("Please enter a valid weight.", "weight")


# ---- Bank accounts ----

def is_credit(account) -> bool:
    return "credit" in (account["account_type"] or "").lower()


def summarize_accounts(entries):
    active = [a for a in entries if a["is_active"]]
    total_balance = sum(a["balance"] or 0 for a in active if not is_credit(a))
    credit_balance = sum(abs(a["balance"] or 0) for a in active if is_credit(a))
    return {
        "total_balance": total_balance,
        "credit_balance": credit_balance,
        "active_count": len(active),
        "net_worth": total_balance - credit_balance,
    }


def account_cards(summary, hidden=False):
    def money(value):
        return "****" if hidden else fmt_money(value)

    return [
        ("Total Assets", money(summary["total_balance"])),
        ("Credit Debt", money(summary["credit_balance"])),
        ("Active Accounts", str(summary["active_count"])),
        ("Net Worth", money(summary["net_worth"])),
    ]


ACCOUNT_NAME = FieldDescriptor("account_name", "Account Name", placeholder="My Checking Account")
BANK_NAME = FieldDescriptor("bank_name", "Bank Name", placeholder="Chase, Wells Fargo, etc.")
ACCOUNT_TYPE = FieldDescriptor("account_type", "Account Type", CHOICE, options(ACCOUNT_TYPES))
CURRENCY = FieldDescriptor("currency", "Currency", CHOICE, options(CURRENCIES), required=False, default="USD")

ACCOUNT_FORM_FIELDS = (
    ACCOUNT_NAME,
    BANK_NAME,
    ACCOUNT_TYPE,
    FieldDescriptor("balance", "Current Balance", NUMBER, required=False, default=0.0, placeholder="1000.00"),
    CURRENCY,
    FieldDescriptor(
        "account_number_last_four", "Last 4 Digits (Optional)",
        required=False, max_length=4, placeholder="1234",
    ),
)
ACCOUNT_EDIT_FIELDS = (
    ACCOUNT_NAME,
    BANK_NAME,
    ACCOUNT_TYPE,
    FieldDescriptor("balance", "Balance", NUMBER),
    CURRENCY,
)


def check_account(values):
    last_four = values.get("account_number_last_four")
    if last_four and not last_four.isdigit():
        raise ValidationError("Last 4 digits must be numeric.", "account_number_last_four")


# ---- Bills & subscriptions ----

def summarize_bills(entries):
    return {
        "total_amount": sum(b["amount"] or 0 for b in entries),
        "paid_count": sum(1 for b in entries if b["status"] == "paid"),
        "pending_count": sum(1 for b in entries if b["status"] == "pending"),
        "overdue_count": sum(1 for b in entries if b["status"] == "overdue"),
    }


def bill_cards(summary, hidden=False):
    return [
        ("Total Monthly", fmt_money(summary["total_amount"])),
        ("Paid This Month", str(summary["paid_count"])),
        ("Pending", str(summary["pending_count"])),
        ("Overdue", str(summary["overdue_count"])),
    ]


BILL_FIELDS = (
    FieldDescriptor("name", "Name", placeholder="Netflix, Electricity, etc."),
    FieldDescriptor("amount", "Amount", NUMBER, placeholder="29.99"),
    FieldDescriptor("due_date", "Due Date", input_type="date", placeholder="YYYY-MM-DD"),
    FieldDescriptor("category", "Category", CHOICE, options(BILL_CATEGORIES)),
    FieldDescriptor("frequency", "Frequency", CHOICE, options(FREQUENCIES), required=False, default="monthly"),
    FieldDescriptor("status", "Status", CHOICE, options(STATUSES), required=False, default="pending"),
    FieldDescriptor("notes", "Notes", required=False, default="", placeholder="Additional notes..."),
)


def check_bill(values):
    due = values.get("due_date")
    if due is None:
        return
    try:
        datetime.strptime(str(due), "%Y-%m-%d")
    except ValueError:
        raise ValidationError("Due date must be a date (YYYY-MM-DD).", "due_date") from None


# -----------------------------
# Registry (tab order)
# -----------------------------

CALORIES = Feature(
    key="calories",
    title="Calorie Calculator",
    noun="Food entry",
    plural="food entries",
    table=TABLE_FOOD,
    form_fields=FOOD_FIELDS,
    edit_fields=FOOD_FIELDS,
    columns=(("name", "Food", "text"), ("calories", "Calories", "number")),
    summarize=summarize_calories,
    cards=calorie_cards,
    added_message="Food entry added.",
    empty_message="No entries yet. Add your first food item above!",
    scope=TODAY,
    trend_field="calories",
    trend_title="Daily Calories (Last 7 Days)",
)

SHOPPING = Feature(
    key="shopping",
    title="Shopping List",
    noun="Shopping item",
    plural="shopping items",
    table=TABLE_SHOPPING,
    form_fields=SHOPPING_FIELDS,
    edit_fields=SHOPPING_FIELDS,
    columns=(("name", "Item", "text"), ("completed", "Collected", "flag")),
    summarize=summarize_shopping,
    cards=shopping_cards,
    defaults={"completed": False},
    added_message="Item added to your shopping list.",
    empty_message="Your shopping list is empty. Add some items above!",
    toggle_field="completed",
    toggle_labels=("Uncheck", "Collect"),
    flag_labels=("Collected", ""),
    clear_field="completed",
)

EXERCISE = Feature(
    key="exercise",
    title="Exercise Tracker",
    noun="Exercise",
    plural="exercises",
    table=TABLE_EXERCISE,
    form_fields=EXERCISE_FIELDS,
    edit_fields=EXERCISE_FIELDS,
    columns=(
        ("exercise", "Exercise", "text"),
        ("sets", "Sets", "number"),
        ("reps", "Reps", "number"),
        ("weight", "Weight (lbs)", "number"),
    ),
    summarize=summarize_exercise,
    cards=exercise_cards,
    check=check_exercise,
    added_message="Exercise logged.",
    empty_message="No exercises logged yet. Start your workout!",
    scope=TODAY,
    trend_field="sets",
    trend_title="Daily Exercise Sets (Last 7 Days)",
)

WEIGHT = Feature(
    key="weight",
    title="Weight Tracker",
    noun="Weight entry",
    plural="weight entries",
    table=TABLE_WEIGHT,
    form_fields=WEIGHT_FIELDS,
    edit_fields=WEIGHT_FIELDS,
    columns=(("weight", "Weight", "number"), ("unit", "Unit", "text"), ("created_at", "Date", "date")),
    summarize=summarize_weight,
    cards=weight_cards,
    check=check_weight,
    added_message="Weight logged.",
    empty_message="No weight entries yet. Start tracking your weight!",
    descending=True,
)

BANK = Feature(
    key="bank",
    title="Bank Accounts",
    noun="Bank account",
    plural="bank accounts",
    table=TABLE_BANK,
    form_fields=ACCOUNT_FORM_FIELDS,
    edit_fields=ACCOUNT_EDIT_FIELDS,
    columns=(
        ("account_name", "Account Name", "text"),
        ("account_number_last_four", "Number", "mask"),
        ("bank_name", "Bank", "text"),
        ("account_type", "Type", "text"),
        ("balance", "Balance", "money"),
        ("is_active", "Status", "flag"),
    ),
    summarize=summarize_accounts,
    cards=account_cards,
    check=check_account,
    defaults={"is_active": True},
    added_message="Bank account added successfully!",
    empty_message="No accounts yet. Add your first account!",
    descending=True,
    owned=True,
    toggle_field="is_active",
    toggle_labels=("Deactivate", "Activate"),
    flag_labels=("Active", "Inactive"),
    quick_fields=("balance",),
    maskable=True,
)

BILLS = Feature(
    key="bills",
    title="Bills & Subscriptions",
    noun="Bill/subscription",
    plural="bills and subscriptions",
    table=TABLE_BILLS,
    form_fields=BILL_FIELDS,
    edit_fields=BILL_FIELDS,
    columns=(
        ("name", "Name", "text"),
        ("category", "Category", "text"),
        ("amount", "Amount", "money"),
        ("due_date", "Due Date", "text"),
        ("frequency", "Frequency", "text"),
        ("status", "Status", "text"),
    ),
    summarize=summarize_bills,
    cards=bill_cards,
    check=check_bill,
    added_message="Bill/subscription added successfully!",
    empty_message="No bills or subscriptions yet. Add your first one!",
    order_by="due_date",
    owned=True,
    quick_fields=("status",),
)

FEATURES: dict[str, Feature] = {f.key: f for f in (CALORIES, SHOPPING, EXERCISE, WEIGHT, BANK, BILLS)}


def adjacent_features(key: str) -> tuple[str, str]:
    """Previous and next tab keys, wrapping around at both ends."""
    keys = list(FEATURES)
    i = keys.index(key)
    return keys[i - 1], keys[(i + 1) % len(keys)]
