from __future__ import annotations

import io
import unittest
from contextlib import redirect_stdout

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from .console import entries_frame, run_console
from .models import SHOPPING
from .store import TABLE_FOOD, TABLE_SHOPPING, SqlStore


def scripted(*answers):
    replies = iter(answers)
    return lambda prompt="": next(replies)


class ConsoleTests(unittest.TestCase):
    def setUp(self):
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        self.store = SqlStore(engine)

    def run_script(self, *answers, user_id=None):
        out = io.StringIO()
        with redirect_stdout(out):
            run_console(self.store, user_id, input_fn=scripted(*answers))
        return out.getvalue()

    def test_add_and_show_food(self):
        output = self.run_script("1", "1", "Apple", "95", "2", "0", "0")
        self.assertIn("[*] Success: Food entry added.", output)
        self.assertIn("Apple", output)
        self.assertIn("Goodbye :)", output)
        self.assertEqual([r["name"] for r in self.store.select(TABLE_FOOD)], ["Apple"])

    def test_validation_error_printed(self):
        output = self.run_script("1", "1", "", "95", "0", "0")
        self.assertIn("[!] Error: Food name is required.", output)
        self.assertEqual(self.store.select(TABLE_FOOD), [])

    def test_owned_tracker_needs_user(self):
        output = self.run_script("5", "0")
        self.assertIn("Sign in with --user", output)

    def test_negative_menu_choice_is_unknown(self):
        output = self.run_script("-1", "7", "x", "0")
        self.assertEqual(output.count("Unknown command"), 3)
        self.assertNotIn("choose an input", output)

    def test_negative_row_deletes_nothing(self):
        self.run_script("1", "1", "Apple", "95", "1", "Pear", "60", "4", "-1", "4", "9", "0", "0")
        self.assertEqual(sorted(r["name"] for r in self.store.select(TABLE_FOOD)), ["Apple", "Pear"])

    def test_toggle_and_clear_shopping(self):
        self.run_script("2", "1", "Milk", "6", "0", "7", "0", "0")
        self.assertEqual(self.store.select(TABLE_SHOPPING), [])

    def test_edit_keeps_blank_answers(self):
        self.run_script("1", "1", "Apple", "95", "3", "0", "", "120", "0", "0")
        row = self.store.select(TABLE_FOOD)[0]
        self.assertEqual(row["name"], "Apple")
        self.assertEqual(row["calories"], 120)

    def test_entries_frame_uses_headers(self):
        df = entries_frame(SHOPPING, [{"id": "1", "name": "Milk", "completed": False}])
        self.assertEqual(list(df.columns), ["id", "Item", "Collected"])


if __name__ == "__main__":
    unittest.main()
