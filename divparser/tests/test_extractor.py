"""
Test suite for statement extraction over reconstructed fragments.
"""
import logging
import pytest
from datetime import date
from decimal import Decimal

from ..core.extractor import StatementExtractor
from ..core.detectors import LabelDetector
from ..models.schema import Statement


class TestStatementExtractor:
    """Test cases for label binding and the other statement facts."""

    @pytest.fixture
    def extract(self, template):
        def _extract(fragments, holders=()):
            return StatementExtractor(template, holders).extract(fragments)
        return _extract

    def test_value_in_label_sentence(self, extract):
        """A value printed straight after its label binds in place."""
        result = extract(["Franked Amount: ", "$36.00"])
        assert result.franked_amount.has_value
        assert result.franked_amount.cents == 3600

    def test_value_in_next_sentence(self, extract):
        """A label queues until a later sentence opens with a numeral."""
        result = extract(["Franked Amount", "$36.00"])
        assert result.franked_amount.amount == Decimal("36.00")

    def test_values_bind_oldest_label_first(self, extract):
        """Column layouts print every label before every value."""
        result = extract([
            "Franked Amount", "Unfranked Amount", "Franking Credit",
            "$10.00", "$20.00", "$4.29",
        ])
        assert result.franked_amount.cents == 1000
        assert result.unfranked_amount.cents == 2000
        assert result.franking_credit.cents == 429

    def test_numeral_outside_window(self, extract):
        """A numeral deep inside a sentence does not bind."""
        result = extract([
            "Withholding Tax",
            "Amount in Australian dollars is $5.00",
            "$7.00",
        ])
        assert result.withholding_tax.cents == 700

    def test_numeral_not_directly_after_label(self, extract):
        """Words between a label and a numeral in one sentence stop an inline bind."""
        result = extract(["Total Shares held at 1 March", "2,500"])
        assert result.total_shares == 2500

    def test_inline_value_must_follow_label(self, extract):
        """Only the first word after the label can be its value in the same sentence."""
        assert not extract(["Franked Amount AUD $36.00"]).franked_amount.has_value

        result = extract(["Franked Amount AUD $36.00", "$40.00"])
        assert result.franked_amount.cents == 4000

    def test_long_reference_number_binds(self, extract):
        """A numeral wider than the default Decimal precision still binds exactly."""
        result = extract(["Franked Amount", "123456789012345678901234567890"])
        assert result.franked_amount.cents == 12345678901234567890123456789000

    def test_out_of_range_exponent_is_not_a_value(self, extract):
        """A numeral-like word outside the range of a double is skipped."""
        result = extract(["Franked Amount", "1e999999999", "$36.00"])
        assert result.franked_amount.cents == 3600

    def test_no_double_binding(self, extract):
        """A field keeps the first value bound to it."""
        result = extract(["Franked Amount", "$36.00", "Franked Amount", "$99.00"])
        assert result.franked_amount.cents == 3600

    def test_other_labels_discard_values(self, extract):
        """Values of uninteresting labels are consumed without binding."""
        result = extract(["Dividend Rate", "Franked Amount", "25 cents", "$36.00"])
        assert result.franked_amount.cents == 3600

    def test_longest_label_wins(self, extract):
        """A specific phrase is not mistaken for a shorter one it starts with."""
        result = extract([
            "Total Amount Available For Reinvestment", "$50.00",
            "Total Amount", "$60.00",
        ])
        assert result.total_payment.cents == 6000

    def test_integer_fields_truncate(self, extract):
        """Share counts are whole numbers."""
        result = extract(["Number of Shares Allotted", "12.9", "Total Shares", "1,234"])
        assert result.shares_allotted == 12
        assert result.total_shares == 1234

    def test_zero_amount_is_present(self, extract):
        """A bound zero is distinct from an absent amount."""
        result = extract(["Unfranked Amount", "$0.00"])
        assert result.unfranked_amount.has_value
        assert result.unfranked_amount.cents == 0
        assert not result.franked_amount.has_value

    def test_label_split_across_sentences(self, extract):
        """A label broken by layout is recognised from the joined sentences."""
        result = extract(["Withholding", "Tax", "$3.00"])
        assert result.withholding_tax.cents == 300

    def test_half_cent_rounds_up(self, extract):
        """Amounts round half-up to whole cents."""
        result = extract(["Total Payment", "$36.005"])
        assert result.total_payment.cents == 3601

    def test_asx_code(self, extract):
        """The code follows its prefix in any case and is upper-cased."""
        assert extract(["ASX Code: XYZ"]).asx_code == "XYZ"
        assert extract(["asx code: abc"]).asx_code == "ABC"

    def test_payment_date(self, extract):
        """The sentence after a date trigger is parsed as the payment date."""
        result = extract(["Payment Date", "15 March 2020", "Franked Amount", "$36.00"])
        assert result.payment_date == date(2020, 3, 15)
        assert result.franked_amount.cents == 3600

    def test_holder_reference_triggers_date(self, extract):
        """Registries that print the date after the holder reference number."""
        result = extract(["Holder Reference Number", "1 July 2021"])
        assert result.payment_date == date(2021, 7, 1)

    def test_unparsable_payment_date(self, extract, caplog):
        """A bad date is logged and left unset."""
        with caplog.at_level(logging.WARNING):
            result = extract(["Payment Date", "not-a-date"])

        assert result.payment_date is None
        assert any("not-a-date" in record.getMessage() for record in caplog.records)

    def test_entity_before_abn(self, extract):
        """The entity name is the sentence before the ABN line."""
        result = extract(["Example Holdings Limited", "ABN 12 345 678 901", "ASX Code: EXH"])
        assert result.entity == "Example Holdings Limited"
        assert result.asx_code == "EXH"

    def test_abn_on_first_sentence(self, extract):
        """With nothing before the ABN line there is no entity."""
        result = extract(["ABN 12 345 678 901", "Franked Amount", "$1.00"])
        assert result.entity is None
        assert result.franked_amount.cents == 100

    def test_account_holders(self, extract):
        """Known holder names are matched case-insensitively."""
        holders = ["Jane Citizen", "John Smith", ""]
        result = extract(["Dear ", "JANE CITIZEN"], holders)
        assert result.account_holders == ["Jane Citizen"]
        assert holders == ["Jane Citizen", "John Smith", ""]

    def test_account_holders_found_once(self, extract):
        """Holders are collected once, from the first lookahead that names any."""
        result = extract(["Jane Citizen", "Jane Citizen", "John Smith"], ["Jane Citizen", "John Smith"])
        assert result.account_holders == ["Jane Citizen", "John Smith"]

    def test_empty_document(self, extract):
        """No fragments gives an empty statement."""
        assert extract([]) == Statement()

    def test_single_fragment_document(self, extract):
        """A document of one fragment terminates."""
        result = extract(["Franked Amount"])
        assert not result.franked_amount.has_value


class TestLabelDetector:
    """Test cases for label phrase matching."""

    @pytest.fixture
    def detector(self, template):
        return LabelDetector(template.labels)

    def test_prefix_match(self, detector):
        """Labels match at the start of the text only."""
        statement = Statement()
        assert detector.match("Franked Amount: $36.00", statement) == ("franked_amount", "franked amount")
        assert detector.match("The Franked Amount", statement) is None

    def test_bound_and_pending_fields_skipped(self, detector):
        """A field is only offered while it is neither bound nor queued."""
        statement = Statement()
        assert detector.match("Franked Amount", statement, ["franked_amount"]) is None

        statement.bind("franked_amount", Decimal("1"))
        assert detector.match("Franked Amount", statement) is None

    def test_other_recurs(self, detector):
        """The sink for uninteresting labels can be queued repeatedly."""
        assert detector.match("Net Amount", Statement(), ["other"]) == ("other", "net amount")


if __name__ == "__main__":
    pytest.main([__file__])
