import unittest
from decimal import Decimal

from pulse.exports.formatting import format_currency, format_percent, currency_number, series_amounts


class TestFormatting(unittest.TestCase):
    def test_format_currency(self):
        self.assertEqual(format_currency(Decimal("1234.5")), "$1,235")
        self.assertEqual(format_currency(Decimal("0")), "$0")
        self.assertEqual(format_currency(1234567), "$1,234,567")
        self.assertEqual(format_currency(Decimal("-50.4")), "-$50")
        self.assertEqual(format_currency(0.5), "$1")

    def test_format_percent(self):
        self.assertEqual(format_percent(12.5), "12.5%")
        self.assertEqual(format_percent(0.0), "0.0%")
        self.assertEqual(format_percent(100), "100.0%")

    def test_json_numbers(self):
        self.assertEqual(currency_number(Decimal("10.005")), 10.01)
        rows = [{"weekStart": "2025-06-29", "amount": Decimal("12.50")}]
        out = series_amounts(rows, "amount")
        self.assertEqual(out, [{"weekStart": "2025-06-29", "amount": 12.5}])
        # source rows stay Decimal
        self.assertIsInstance(rows[0]["amount"], Decimal)


if __name__ == "__main__":
    unittest.main()
