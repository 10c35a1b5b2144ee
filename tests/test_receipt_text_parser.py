import pytest
from pydantic import ValidationError

from app.receipt.base import ParsedField, ParsedReceipt
from app.receipt.text_parser import (
    parse_amount,
    parse_currency,
    parse_date,
    parse_merchant,
    parse_receipt_text,
)

WOOLWORTHS_RECEIPT = """\
WOOLWORTHS METRO
ABN: 88 000 014 675
Sydney NSW 2000
15/03/2024 14:32
Milk 2L            $3.10
Bread              $4.50
TOTAL              $7.60
"""


class TestParseAmount:
    def test_total_keyword_wins_over_larger_stray_number(self):
        result = parse_amount("Table 12\nOrder 120\nTotal: 45.00")
        assert result.value == 45.00
        assert result.confidence == 0.9

    def test_amount_on_following_lines(self):
        result = parse_amount("AMOUNT DUE\n\n$ 123.40\nThank you")
        assert result.value == pytest.approx(123.40)
        assert result.confidence == 0.9

    def test_takes_largest_number_near_keyword(self):
        result = parse_amount("GST 4.09\nTOTAL 45.00\nCASH 50.00\nCHANGE 5.00")
        assert result.value == 50.00
        assert result.confidence == 0.9

    def test_subtotal_is_not_a_total_keyword(self):
        result = parse_amount("Subtotal 40.00\nService 4.00")
        assert result.value == 40.00
        assert result.confidence == 0.5

    def test_fallback_to_largest_number(self):
        result = parse_amount("Coffee 4.50\nCake 6.00")
        assert result.value == 6.00
        assert result.confidence == 0.5

    def test_no_numbers(self):
        result = parse_amount("Thanks for visiting")
        assert result.value is None
        assert result.confidence == 0

    def test_thousands_commas(self):
        assert parse_amount("Grand Total: $1,234.56").value == pytest.approx(1234.56)

    def test_european_decimal_comma_is_misread(self):
        # commas are always stripped, "1.234,56" becomes 1.23456
        result = parse_amount("Summe 1.234,56")
        assert result.value == pytest.approx(1.23456)
        assert result.confidence == 0.9

    def test_zero_total_is_rejected(self):
        result = parse_amount("Total 0.00")
        assert result.value is None
        assert result.confidence == 0

    def test_implausibly_large_total_is_rejected(self):
        assert parse_amount("Total 5,000,000.00").value is None

    def test_hebrew_total(self):
        result = parse_amount('קפה 12.00\nסה"כ 120.00')
        assert result.value == 120.00
        assert result.confidence == 0.9

    def test_hebrew_gershayim_total(self):
        assert parse_amount("סה״כ לתשלום ₪ 89.90").value == pytest.approx(89.90)

    @pytest.mark.parametrize("keyword", ["Balance Due", "Amount payable", "To pay", "Totaal", "Totale"])
    def test_multilingual_keywords(self, keyword):
        result = parse_amount(f"Item 99.00\nItem 150.00\n{keyword} 30.00")
        assert result.value == 30.00
        assert result.confidence == 0.9

    def test_date_digits_are_not_amounts(self):
        result = parse_amount("03/04/2024")
        assert result.value is None

    def test_multi_dot_token_reads_leading_number(self):
        result = parse_amount("Total 1.234.567")
        assert result.value == pytest.approx(1.234)
        assert result.confidence == 0.9

    def test_multi_dot_token_in_fallback(self):
        result = parse_amount("Ref 1.234.56\nItem 0.50")
        assert result.value == pytest.approx(1.234)
        assert result.confidence == 0.5


class TestParseCurrency:
    def test_iso_code(self):
        result = parse_currency("Total EUR 12.00")
        assert result.value == "EUR"
        assert result.confidence == 0.95

    def test_iso_code_case_insensitive(self):
        assert parse_currency("paid in usd").value == "USD"

    def test_iso_code_beats_symbol(self):
        result = parse_currency("€ 10.00 USD")
        assert result.value == "USD"
        assert result.confidence == 0.95

    def test_iso_code_needs_word_boundary(self):
        # "AUDIT" is not AUD, and AU inside a word is not an AU hint
        result = parse_currency("AUDIT $5.00")
        assert result.value == "USD"
        assert result.confidence == 0.6

    @pytest.mark.parametrize(
        "text,code",
        [("₪ 50.00", "ILS"), ("€5,00", "EUR"), ("£3.20", "GBP")],
    )
    def test_distinctive_symbols(self, text, code):
        result = parse_currency(text)
        assert result.value == code
        assert result.confidence == 0.9

    def test_dollar_defaults_to_usd(self):
        result = parse_currency("Total $45.00")
        assert result.value == "USD"
        assert result.confidence == 0.6

    def test_dollar_with_australian_retailer(self):
        result = parse_currency("Woolworths\nTotal $45.00")
        assert result.value == "AUD"
        assert result.confidence == 0.85

    @pytest.mark.parametrize("hint", ["ABN 12 345 678 901", "Melbourne VIC", "AU", "Made in Australia"])
    def test_dollar_with_australian_context(self, hint):
        assert parse_currency(f"{hint}\n$9.95").value == "AUD"

    def test_nothing_found(self):
        result = parse_currency("Thanks for visiting")
        assert result.value is None
        assert result.confidence == 0


class TestParseDate:
    def test_day_first(self):
        result = parse_date("03/04/2024")
        assert result.value == "2024-04-03"
        assert result.confidence == 0.85

    def test_dotted_and_dashed_day_first(self):
        assert parse_date("15.01.2024").value == "2024-01-15"
        assert parse_date("5-1-2024").value == "2024-01-05"

    def test_iso(self):
        assert parse_date("Date: 2024-04-03 10:15").value == "2024-04-03"

    def test_year_first_with_slashes(self):
        assert parse_date("2024/04/03").value == "2024-04-03"

    def test_month_names(self):
        assert parse_date("15 Jan 2024").value == "2024-01-15"
        assert parse_date("5 September 2023").value == "2023-09-05"
        assert parse_date("1 DEC 2022").value == "2022-12-01"

    def test_invalid_calendar_date_is_skipped(self):
        assert parse_date("31/02/2024\nPaid 01/03/2024").value == "2024-03-01"

    def test_first_date_in_text_wins(self):
        assert parse_date("Issued 10/05/2024\nDue 2024-06-01").value == "2024-05-10"

    def test_month_first_dates_are_read_day_first(self):
        # 12/25/2024 is not a valid day-first date
        assert parse_date("12/25/2024").value is None

    def test_no_date(self):
        result = parse_date("no dates here")
        assert result.value is None
        assert result.confidence == 0


class TestParseMerchant:
    def test_skips_header_lines(self):
        result = parse_merchant("TAX INVOICE\nABN: 12 345 678 901\nCafe Milano\nLatte 4.50")
        assert result.value == "Cafe Milano"
        assert result.confidence == 0.7

    def test_strips_legal_suffixes(self):
        assert parse_merchant("WOOLWORTHS PTY LTD\n$4.50").value == "WOOLWORTHS"
        assert parse_merchant("Acme Inc.").value == "Acme"

    def test_skips_contact_lines(self):
        text = "www.beanthere.com\nPh: 03 9999 1234\nEmail: hi@beanthere.com\nBean There"
        assert parse_merchant(text).value == "Bean There"

    def test_skips_lines_without_letters_or_with_long_numbers(self):
        assert parse_merchant("12345\n$4.50\n\n  Cafe  ").value == "Cafe"

    def test_too_short_after_cleaning(self):
        assert parse_merchant("AB\nCo.\nCafe Roma").value == "Cafe Roma"

    def test_too_long(self):
        long_line = "A" * 51
        assert parse_merchant(f"{long_line}\nShort Name").value == "Short Name"

    def test_non_latin_lines_are_not_merchants(self):
        result = parse_merchant("קפה רומא\n₪ 12.00")
        assert result.value is None
        assert result.confidence == 0

    def test_empty(self):
        assert parse_merchant("").value is None


class TestParseReceiptText:
    def test_full_receipt(self):
        result = parse_receipt_text(WOOLWORTHS_RECEIPT)

        assert result.amount == pytest.approx(7.60)
        assert result.currency == "AUD"
        assert result.date == "2024-03-15"
        assert result.merchant == "WOOLWORTHS METRO"
        assert result.confidence.amount == 0.9
        assert result.confidence.currency == 0.85
        assert result.confidence.date == 0.85
        assert result.confidence.merchant == 0.7

    def test_fields_are_independent(self):
        result = parse_receipt_text("03/04/2024")

        assert result.date == "2024-04-03"
        assert result.amount is None
        assert result.currency is None
        assert result.merchant is None
        assert result.confidence.date == 0.85
        assert result.confidence.amount == 0
        assert result.confidence.currency == 0
        assert result.confidence.merchant == 0

    def test_empty_text(self):
        assert parse_receipt_text("") == ParsedReceipt()

    def test_windows_line_endings(self):
        result = parse_receipt_text("Cafe Milano\r\nTotal\r\n€ 18.50\r\n")
        assert result.merchant == "Cafe Milano"
        assert result.amount == pytest.approx(18.50)
        assert result.currency == "EUR"

    def test_result_is_immutable(self):
        result = parse_receipt_text("Total 10.00")
        with pytest.raises(ValidationError):
            result.amount = 20.0


class TestParsedField:
    def test_defaults_to_absent(self):
        field = ParsedField[str]()
        assert field.value is None
        assert field.confidence == 0

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            ParsedField[float](value=1.0, confidence=1.5)


MESSY_TEXTS = [
    "1.234.567",
    "Total 1.234.56",
    "1.",
    ",,,",
    "Total ,,, ...",
    'סה"כ 1.2.3 Total',
    "Кафе 12.34.56 Café ₪1.2",
    "9" * 5000,
    "Total " + "1.000" * 200,
    "\r\n\r\n",
    "$$$",
    "€.,.,",
    "31/13/2024 Total 00.00",
    "2024/99/99 15 Foo 2024",
]


class TestMessyInput:
    @pytest.mark.parametrize("text", MESSY_TEXTS)
    @pytest.mark.parametrize("parser", [parse_amount, parse_currency, parse_date, parse_merchant])
    def test_field_parsers_do_not_raise(self, parser, text):
        result = parser(text)
        assert isinstance(result, ParsedField)
        assert 0 <= result.confidence <= 1

    @pytest.mark.parametrize("text", MESSY_TEXTS)
    def test_parse_receipt_text_does_not_raise(self, text):
        result = parse_receipt_text(text)
        assert isinstance(result, ParsedReceipt)
        for score in result.confidence.model_dump().values():
            assert 0 <= score <= 1
