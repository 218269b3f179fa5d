"""Tests for the extraction rules and the per-document field parsers."""

import re

import pytest

from src.extraction.fields import (
    FlightTicketFields,
    PassportFields,
    TaxIdFields,
    fields_from_dict,
    fields_to_dict,
)
from src.extraction.flight_ticket_parser import find_dates, parse_flight_ticket_text
from src.extraction.passport_parser import (
    PASSPORT_NUMBER_RULES,
    classify_date_line,
    parse_passport_text,
)
from src.extraction.rules import first_match, rule, split_lines, trailing_segment
from src.extraction.tax_id_parser import (
    DOB_RULE,
    NAME_RULE,
    TAX_ID_RULE,
    parse_tax_id_text,
)


class TestExtractionRule:
    def test_apply_returns_group(self) -> None:
        r = rule("amount", r"Total:\s*(\d+)", group=1)
        assert r.apply("Total: 42") == "42"

    def test_apply_no_match(self) -> None:
        assert rule("digits", r"\d+").apply("no digits") is None

    def test_apply_blank_capture_is_none(self) -> None:
        r = rule("label", r"Name:(\s*)", group=1)
        assert r.apply("Name:   ") is None

    def test_first_match_tries_rules_in_order(self) -> None:
        rules = [rule("strict", r"X\d{3}"), rule("loose", r"\d{3}")]
        assert first_match(rules, ["123", "X456"]) == ("strict", "X456")

    def test_first_match_none(self) -> None:
        assert first_match([rule("never", r"zzz")], ["a", "b"]) is None

    def test_trailing_segment(self) -> None:
        assert trailing_segment("Surname: DOE") == "DOE"
        assert trailing_segment("P<IND<<SHARMA") == "SHARMA"
        assert trailing_segment("Name:") is None
        assert trailing_segment("no delimiter") is None

    def test_split_lines_handles_crlf(self) -> None:
        assert split_lines("a\r\nb\rc") == ["a", "b", "c"]


class TestPassportNumber:
    def test_bare_number_matches_strict_rule(self) -> None:
        result = parse_passport_text("P1234567")
        assert result == PassportFields(
            passport_number="P1234567", document_number="P1234567"
        )

    def test_first_line_wins_for_strict_rule(self) -> None:
        result = parse_passport_text("Old No: A1111111\nPassport No: B2222222")
        assert result.passport_number == "A1111111"

    def test_strict_rule_takes_first_eight_characters(self) -> None:
        result = parse_passport_text("Z123456789")
        assert result.passport_number == "Z1234567"

    def test_marker_fallback_for_lowercase_number(self) -> None:
        name, value = first_match(PASSPORT_NUMBER_RULES, ["passport no p12345678"])
        assert name == "passport_no_marker"
        assert value == "p12345678"

    def test_no_marker_fallback_strips_marker(self) -> None:
        result = parse_passport_text("no. x1234567")
        assert result.passport_number == "x1234567"
        assert result.document_number == "x1234567"

    def test_rule_order(self) -> None:
        assert [r.name for r in PASSPORT_NUMBER_RULES] == [
            "strict_letter_7_digits",
            "letter_7_8_digits",
            "passport_no_marker",
            "no_marker",
            "document_no_marker",
        ]

    def test_missing_number_stays_empty(self) -> None:
        result = parse_passport_text("Surname: DOE")
        assert result.passport_number is None
        assert result.document_number is None


class TestPassportParser:
    def test_full_passport(self, passport_text: str) -> None:
        result = parse_passport_text(passport_text)
        assert result.document_type == "passport"
        assert result.passport_number == "P1234567"
        assert result.full_name == "SHARMA"
        assert result.nationality == "INDIAN"
        assert result.date_of_birth == "14/08/1990"
        assert result.date_of_issue == "02/03/2018"
        assert result.date_of_expiry == "01/03/2028"

    def test_empty_text_sets_only_discriminant(self) -> None:
        assert parse_passport_text("") == PassportFields()

    def test_name_skips_lines_without_value(self) -> None:
        result = parse_passport_text("Name:\nGiven names < RAHUL")
        assert result.full_name == "RAHUL"

    def test_name_without_delimiter_is_ignored(self) -> None:
        assert parse_passport_text("Surname SHARMA").full_name is None

    def test_nationality_from_mrz_style_line(self) -> None:
        assert parse_passport_text("Nation<IND").nationality == "IND"

    def test_date_keyword_priority(self) -> None:
        result = parse_passport_text("DOB 01/01/1990 expiry 01/01/2030")
        assert result.date_of_birth == "01/01/1990"
        assert result.date_of_expiry is None

    def test_first_date_per_field_wins(self) -> None:
        result = parse_passport_text("DOB: 01/01/1990\nBirth 02/02/1991")
        assert result.date_of_birth == "01/01/1990"

    def test_later_lines_fill_empty_fields(self) -> None:
        result = parse_passport_text("Issued 05.06.2015\nExp 04-06-2025")
        assert result.date_of_issue == "05.06.2015"
        assert result.date_of_expiry == "04-06-2025"

    def test_date_with_spaced_separators(self) -> None:
        result = parse_passport_text("Date of Birth: 14 . 08 . 1990")
        assert result.date_of_birth == "14 . 08 . 1990"

    def test_date_without_keyword_is_ignored(self) -> None:
        result = parse_passport_text("12/12/2012")
        assert result.date_of_birth is None
        assert result.date_of_issue is None
        assert result.date_of_expiry is None

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("Date of birth 1/2/90", ("date_of_birth", "1/2/90")),
            ("Expiration: 10-10-2030", ("date_of_expiry", "10-10-2030")),
            ("Date of issue 3.4.2020", ("date_of_issue", "3.4.2020")),
            ("Printed 3.4.2020", None),
            ("Date of birth unknown", None),
        ],
    )
    def test_classify_date_line(self, line: str, expected) -> None:
        assert classify_date_line(line) == expected

    def test_parse_is_idempotent(self, passport_text: str) -> None:
        assert parse_passport_text(passport_text) == parse_passport_text(passport_text)


class TestTaxIdParser:
    def test_tax_id_card(self, tax_id_text: str) -> None:
        result = parse_tax_id_text(tax_id_text)
        assert result == TaxIdFields(
            tax_id="ABCDE1234F", full_name="Jane Doe", date_of_birth="01/02/1990"
        )

    def test_empty_text(self) -> None:
        assert parse_tax_id_text("") == TaxIdFields()

    def test_tax_id_first_match_wins(self) -> None:
        assert TAX_ID_RULE.apply("AAAAA1111A BBBBB2222B") == "AAAAA1111A"

    def test_tax_id_requires_uppercase(self) -> None:
        assert TAX_ID_RULE.apply("abcde1234f") is None

    def test_name_stops_at_line_end(self) -> None:
        assert NAME_RULE.apply("NAME JOHN SMITH\nFATHER") == "JOHN SMITH"

    def test_name_stops_at_digits(self) -> None:
        assert NAME_RULE.apply("Name: Jane 42") == "Jane"

    def test_dob_separators(self) -> None:
        assert DOB_RULE.apply("dob 1-2-90") == "1-2-90"
        assert DOB_RULE.apply("DOB:01.02.1990") == "01.02.1990"

    def test_dob_requires_label(self) -> None:
        assert DOB_RULE.apply("Birth: 01/02/1990") is None


class TestFlightTicketParser:
    def test_keyword_lines(self, flight_text: str) -> None:
        result = parse_flight_ticket_text(flight_text)
        assert result == FlightTicketFields(
            departure_date="12/03/2025", return_date="20/03/2025"
        )

    def test_both_dates_on_one_line(self) -> None:
        result = parse_flight_ticket_text("Depart 12/03/2025 Return 20/03/2025")
        assert result.departure_date == "12/03/2025"
        assert result.return_date == "20/03/2025"

    def test_falls_back_to_first_and_last_date(self) -> None:
        text = "Flight EK 501 12 Mar 2025\nFlight EK 502 20 Mar 2025"
        result = parse_flight_ticket_text(text)
        assert result.departure_date == "12 Mar 2025"
        assert result.return_date == "20 Mar 2025"

    def test_single_unlabelled_date_is_not_enough(self) -> None:
        assert parse_flight_ticket_text("Issued 01/01/2025") == FlightTicketFields()

    def test_iso_dates(self) -> None:
        result = parse_flight_ticket_text("Outbound 2025-03-12\nInbound 2025-03-20")
        assert result.departure_date == "2025-03-12"
        assert result.return_date == "2025-03-20"

    @pytest.mark.parametrize("label", ["Arrival back", "ARRIVAL BACK", "Arrivalback"])
    def test_arrival_back_is_a_return_keyword(self, label: str) -> None:
        result = parse_flight_ticket_text(
            f"Departure: 12/03/2025\n{label}: 20/03/2025"
        )
        assert result == FlightTicketFields(
            departure_date="12/03/2025", return_date="20/03/2025"
        )

    def test_find_dates_in_order(self) -> None:
        assert find_dates("from 2025-03-12 to 20/03/2025") == [
            "2025-03-12",
            "20/03/2025",
        ]


class TestFieldSerialization:
    def test_to_dict_skips_empty_fields(self) -> None:
        data = fields_to_dict(TaxIdFields(tax_id="ABCDE1234F"))
        assert data == {"document_type": "tax_id", "tax_id": "ABCDE1234F"}

    def test_from_dict_restores_variant(self) -> None:
        record = fields_from_dict(
            {"document_type": "flight_ticket", "departure_date": "12/03/2025"}
        )
        assert record == FlightTicketFields(departure_date="12/03/2025")

    def test_from_dict_ignores_unknown_keys(self) -> None:
        record = fields_from_dict({"document_type": "passport", "colour": "blue"})
        assert record == PassportFields()

    def test_from_dict_unknown_type(self) -> None:
        with pytest.raises(ValueError, match=re.escape("Unknown extracted fields type")):
            fields_from_dict({"document_type": "visa"})
