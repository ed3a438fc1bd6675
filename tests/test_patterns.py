import pytest
from classifier.models import LabeledSample
from classifier.patterns import CorrelationScorer, PatternMiner


def _samples(*texts, category=1):
    return [LabeledSample(text, category) for text in texts]


class TestPatternMiner:
    def test_extracts_unigrams_and_bigrams(self):
        samples = _samples("Payment transfer done", "payment transfer done", "PAYMENT TRANSFER DONE")
        patterns = PatternMiner().extract(samples)
        assert patterns == {
            "payment", "transfer", "done", "payment transfer", "transfer done",
        }

    def test_short_tokens_are_ignored(self):
        samples = _samples("pay to bank", "pay to bank", "pay to bank")
        patterns = PatternMiner().extract(samples)
        assert patterns == {"pay", "bank"}

    def test_min_occurrences_filter(self):
        samples = _samples("credit note", "credit note", "debit")
        assert PatternMiner().extract(samples) == set()
        assert PatternMiner(min_occurrences=2).extract(samples) == {"credit", "note", "credit note"}

    def test_counts_repeats_within_one_sample(self):
        samples = _samples("swift swift swift")
        assert "swift" in PatternMiner().extract(samples)
        assert "swift swift" not in PatternMiner().extract(samples)

    def test_punctuation_splits_tokens(self):
        counts = PatternMiner().count(_samples(":20:REF/payment,transfer"))
        assert counts["ref payment"] == 1
        assert counts["payment transfer"] == 1
        assert "20" not in counts


class TestCorrelationScorer:
    @pytest.fixture
    def scorer(self):
        return CorrelationScorer()

    def test_perfect_positive_correlation(self, scorer):
        category = _samples("payment transfer", "payment now")
        other = _samples("paiement virement", "virement", category=2)
        assert scorer.score("payment", category, other) == pytest.approx(1.0)

    def test_swapping_roles_flips_sign(self, scorer):
        category = _samples("payment a", "payment b", "other c")
        other = _samples("payment d", "x", "y", "z", category=2)
        forward = scorer.score("payment", category, other)
        backward = scorer.score("payment", other, category)
        assert forward == pytest.approx(-backward)
        assert forward != 0

    def test_contingency_counts_documents_not_occurrences(self, scorer):
        category = _samples("payment payment payment", "nothing")
        other = _samples("payment", category=2)
        assert scorer.contingency("payment", category, other) == (1, 1, 1, 0)

    @pytest.mark.parametrize("table", [
        (0, 0, 3, 2),  # empty category
        (3, 2, 0, 0),  # empty other
        (0, 4, 0, 5),  # pattern never present
        (4, 0, 5, 0),  # pattern always present
    ])
    def test_zero_margin_returns_zero(self, scorer, table):
        assert scorer.phi(*table) == 0.0

    def test_phi_formula(self, scorer):
        # (3*3 - 1*1) / sqrt(4*4*4*4)
        assert scorer.phi(3, 1, 1, 3) == pytest.approx(0.5)

    def test_threshold(self, scorer):
        assert scorer.qualifies(0.1)
        assert scorer.qualifies(-0.25)
        assert not scorer.qualifies(0.099)
