from __future__ import annotations

import unittest
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from .routes import create_app
from .store import TABLE_BANK, TABLE_BILLS, TABLE_FOOD, TABLE_SHOPPING

NOW = datetime(2026, 10, 18, 15, 0, tzinfo=timezone.utc)


class LifeTrackerWebAppTests(unittest.TestCase):
    def setUp(self):
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        self.app = create_app(engine_override=engine, clock=lambda: NOW, tz=timezone.utc)
        self.app.config["TESTING"] = True
        self.client = self.app.test_client()
        self.store = self.app.config["_STORE"]

    def _add_food(self, name="Apple", calories="95"):
        return self.client.post("/calories/add", data={"name": name, "calories": calories}, follow_redirects=True)

    def _only_row(self, table):
        rows = self.store.select(table)
        self.assertEqual(len(rows), 1)
        return rows[0]

    def _sign_in(self, user_id="a@example.com"):
        return self.client.post("/signin", data={"user_id": user_id}, follow_redirects=True)

    # Pages
    def test_index_renders_first_tab(self):
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b"Calorie Calculator", resp.data)
        self.assertIn(b"No entries yet. Add your first food item above!", resp.data)

    def test_unknown_tab_is_404(self):
        self.assertEqual(self.client.get("/nope").status_code, 404)
        self.assertEqual(self.client.post("/nope/add").status_code, 404)

    def test_tabs_wrap_around(self):
        first = self.client.get("/calories")
        self.assertIn(b'href="/bills" id="prev-tab"', first.data)
        self.assertIn(b'href="/shopping" id="next-tab"', first.data)
        last = self.client.get("/bills")
        self.assertIn(b'href="/calories" id="next-tab"', last.data)

    def test_trend_chart_data_present(self):
        self._add_food()
        resp = self.client.get("/calories")
        self.assertIn(b'id="trend_chart"', resp.data)
        self.assertIn(b'"labels": ["Oct 12", "Oct 13", "Oct 14", "Oct 15", "Oct 16", "Oct 17", "Oct 18"]', resp.data)
        self.assertIn(b'"values": [0, 0, 0, 0, 0, 0, 95.0]', resp.data)

    def test_no_chart_on_shopping(self):
        resp = self.client.get("/shopping")
        self.assertNotIn(b'id="trend_chart"', resp.data)

    # Add / delete
    def test_add_food_entry(self):
        resp = self._add_food()
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b"Success: Food entry added.", resp.data)
        self.assertIn(b"<td>Apple</td>", resp.data)
        self.assertEqual(self._only_row(TABLE_FOOD)["calories"], 95)

    def test_add_validation(self):
        resp = self._add_food(name="")
        self.assertIn(b"Error: Food name is required.", resp.data)
        resp = self._add_food(calories="lots")
        self.assertIn(b"Error: Calories must be a number.", resp.data)
        self.assertEqual(self.store.select(TABLE_FOOD), [])

    def test_delete_entry(self):
        self._add_food()
        self._add_food(name="Pear", calories="60")
        apple = next(r for r in self.store.select(TABLE_FOOD) if r["name"] == "Apple")
        resp = self.client.post(f"/calories/delete/{apple['id']}", follow_redirects=True)
        self.assertIn(b"Food entry deleted successfully!", resp.data)
        self.assertEqual([r["name"] for r in self.store.select(TABLE_FOOD)], ["Pear"])

    def test_delete_nonexistent_is_reported(self):
        resp = self.client.post("/calories/delete/missing", follow_redirects=True)
        self.assertEqual(resp.status_code, 200)
        self.assertIn(b"Error: Food entry not found.", resp.data)

    # Edit dialog
    def test_edit_dialog_opens(self):
        self._add_food()
        row = self._only_row(TABLE_FOOD)
        resp = self.client.get(f"/calories?edit={row['id']}")
        self.assertIn(b'id="edit-dialog"', resp.data)
        self.assertIn(b"Save changes", resp.data)

    def test_edit_saves(self):
        self._add_food()
        row = self._only_row(TABLE_FOOD)
        resp = self.client.post(f"/calories/edit/{row['id']}", data={"name": "Green apple", "calories": "80"})
        self.assertEqual(resp.status_code, 302)
        updated = self._only_row(TABLE_FOOD)
        self.assertEqual(updated["name"], "Green apple")
        self.assertEqual(updated["calories"], 80)

    def test_edit_invalid_keeps_dialog_open(self):
        self._add_food()
        row = self._only_row(TABLE_FOOD)
        resp = self.client.post(f"/calories/edit/{row['id']}", data={"name": "Green apple", "calories": "abc"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn(b'id="edit-dialog"', resp.data)
        self.assertIn(b"Calories must be a number.", resp.data)
        self.assertIn(b'value="Green apple"', resp.data)
        self.assertEqual(self._only_row(TABLE_FOOD)["name"], "Apple")

    def test_edit_unknown_entry(self):
        resp = self.client.get("/calories?edit=missing")
        self.assertNotIn(b'id="edit-dialog"', resp.data)
        self.assertIn(b"Error: Food entry not found.", resp.data)

    # Shopping list
    def test_toggle_and_clear(self):
        self.client.post("/shopping/add", data={"name": "Milk"})
        self.client.post("/shopping/add", data={"name": "Eggs"})
        milk = next(r for r in self.store.select(TABLE_SHOPPING) if r["name"] == "Milk")
        self.client.post(f"/shopping/toggle/{milk['id']}")
        page = self.client.get("/shopping")
        self.assertIn(b"1/2", page.data)
        self.assertIn(b"Clear Completed", page.data)
        resp = self.client.post("/shopping/clear", follow_redirects=True)
        self.assertIn(b"Cleared 1 completed item(s).", resp.data)
        self.assertEqual([r["name"] for r in self.store.select(TABLE_SHOPPING)], ["Eggs"])

    def test_toggle_not_offered_everywhere(self):
        self.assertEqual(self.client.post("/calories/toggle/x").status_code, 404)
        self.assertEqual(self.client.post("/calories/clear").status_code, 404)

    # Owned tabs
    def test_bank_requires_sign_in(self):
        data = {"account_name": "Main", "bank_name": "Chase", "account_type": "Checking", "balance": "100"}
        resp = self.client.post("/bank/add", data=data, follow_redirects=True)
        self.assertIn(b"Error: User not authenticated", resp.data)
        self.assertEqual(self.store.select(TABLE_BANK), [])

        self._sign_in()
        resp = self.client.post("/bank/add", data=data, follow_redirects=True)
        self.assertIn(b"Bank account added successfully!", resp.data)
        self.assertEqual(self._only_row(TABLE_BANK)["user_id"], "a@example.com")

    def test_hide_balances(self):
        self._sign_in()
        data = {"account_name": "Main", "bank_name": "Chase", "account_type": "Checking", "balance": "1234.5"}
        self.client.post("/bank/add", data=data)
        shown = self.client.get("/bank")
        self.assertIn(b"$1234.50", shown.data)
        hidden = self.client.get("/bank?hide_balances=1")
        self.assertNotIn(b"$1234.50", hidden.data)
        self.assertIn(b"Show balances", hidden.data)

    def test_bill_status_quick_update(self):
        self._sign_in()
        self.client.post(
            "/bills/add",
            data={"name": "Netflix", "amount": "15.99", "due_date": "2026-10-25", "category": "Subscriptions"},
        )
        row = self._only_row(TABLE_BILLS)
        resp = self.client.post(f"/bills/set/{row['id']}", data={"field": "status", "value": "paid"}, follow_redirects=True)
        self.assertIn(b"Status updated successfully!", resp.data)
        self.assertEqual(self._only_row(TABLE_BILLS)["status"], "paid")
        self.assertEqual(self.client.post(f"/bills/set/{row['id']}", data={"field": "name", "value": "x"}).status_code, 400)

    def test_sign_out_hides_owned_rows(self):
        self._sign_in()
        self.client.post(
            "/bills/add",
            data={"name": "Gym", "amount": "15.99", "due_date": "2026-10-25", "category": "Subscriptions"},
        )
        self.assertIn(b"<td>Gym</td>", self.client.get("/bills").data)
        self.client.post("/signout")
        self.assertNotIn(b"<td>Gym</td>", self.client.get("/bills").data)

    def test_sign_in_requires_user(self):
        resp = self.client.post("/signin", data={"user_id": " "}, follow_redirects=True)
        self.assertIn(b"Please enter your email to sign in.", resp.data)


if __name__ == "__main__":
    unittest.main()
