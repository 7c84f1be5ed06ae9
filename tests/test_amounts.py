import unittest

from application.amounts import (
    format_cents,
    parse_amount,
    parse_positive_amount,
    parse_query_limit,
    parse_signed_amount,
    split_amount_and_reason,
)
from domain.errors import InvalidAmount


class ParseAmountTests(unittest.TestCase):
    def test_plain_decimals_become_cents(self):
        cases = {
            "12": 1200,
            "12.3": 1230,
            "8.99": 899,
            ".5": 50,
            "+5": 500,
            "-3.50": -350,
            " 7 ": 700,
            "1000000000000": 100000000000000,
        }
        for text, expected in cases.items():
            with self.subTest(text=text):
                self.assertEqual(parse_amount(text), expected)

    def test_fractions_of_a_cent_round_half_up(self):
        self.assertEqual(parse_amount("1.234"), 123)
        self.assertEqual(parse_amount("1.235"), 124)
        self.assertEqual(parse_amount("0.005"), 1)
        self.assertEqual(parse_amount("-0.005"), -1)

    def test_rejects_anything_but_a_plain_decimal(self):
        for text in ["", "   ", "abc", "1,000", "1,5", "1 000", "1e3", "nan", "inf",
                     "--1", "+-1", "1.", "$5", "12.34.5", "５"]:
            with self.subTest(text=text):
                with self.assertRaises(InvalidAmount):
                    parse_amount(text)

    def test_rejects_absurdly_large_amounts(self):
        with self.assertRaises(InvalidAmount):
            parse_amount("1000000000000.01")

    def test_positive_amount_rejects_zero_and_negatives(self):
        for text in ["0", "0.00", "-1", "0.004"]:
            with self.subTest(text=text):
                with self.assertRaises(InvalidAmount):
                    parse_positive_amount(text)
        self.assertEqual(parse_positive_amount("0.005"), 1)

    def test_signed_amount_rejects_zero(self):
        for text in ["0", "+0.00", "-0.004"]:
            with self.subTest(text=text):
                with self.assertRaises(InvalidAmount):
                    parse_signed_amount(text)
        self.assertEqual(parse_signed_amount("10"), 1000)
        self.assertEqual(parse_signed_amount("-3"), -300)


class ArgumentParsingTests(unittest.TestCase):
    def test_split_amount_and_reason(self):
        self.assertEqual(split_amount_and_reason("8.99 sandwich"), ("8.99", "sandwich"))
        self.assertEqual(split_amount_and_reason("8.99"), ("8.99", None))
        self.assertEqual(split_amount_and_reason("  -3   tip jar "), ("-3", "tip jar"))

    def test_split_requires_an_amount(self):
        with self.assertRaises(InvalidAmount):
            split_amount_and_reason("   ")

    def test_query_limit_falls_back_to_default(self):
        self.assertEqual(parse_query_limit(None), 10)
        self.assertEqual(parse_query_limit(""), 10)
        self.assertEqual(parse_query_limit("0"), 10)
        self.assertEqual(parse_query_limit("-5"), 10)
        self.assertEqual(parse_query_limit("abc"), 10)

    def test_query_limit_accepts_and_clamps_positive_values(self):
        self.assertEqual(parse_query_limit(" 3 "), 3)
        self.assertEqual(parse_query_limit("500"), 50)


class FormatCentsTests(unittest.TestCase):
    def test_format_cents(self):
        self.assertEqual(format_cents(1599), "$15.99")
        self.assertEqual(format_cents(5), "$0.05")
        self.assertEqual(format_cents(0), "$0.00")
        self.assertEqual(format_cents(-300), "-$3.00")
        self.assertEqual(format_cents(123456789), "$1,234,567.89")


if __name__ == "__main__":
    unittest.main()
