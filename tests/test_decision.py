"""Tests for stock_signal_engine/decision.py"""

import pytest

from stock_signal_engine.decision import buy_probability, classify, decide, total_score
from stock_signal_engine.models import Decision, FactorScores


class TestTotalScore:

    def test_weighted_sum_minus_penalty(self):
        f = FactorScores(trend=4, momentum=4, volume=2, accumulation=3, multi_timeframe=2, relative=3, risk_penalty=1)
        # 1.0 + 0.8 + 0.3 + 0.45 + 0.3 + 0.3 - 1
        assert total_score(f) == pytest.approx(2.15)

    def test_penalty_is_unweighted(self):
        f = FactorScores(0, 0, 0, 0, 0, 0, risk_penalty=5)
        assert total_score(f) == -5.0


class TestProbability:

    def test_zero_is_even(self):
        assert buy_probability(0.0) == 0.5

    def test_known_value(self):
        # 1 / (1 + e^-1.6)
        assert buy_probability(2.0) == pytest.approx(0.8320183851)

    @pytest.mark.parametrize("score", [50.0, 1000.0, -50.0, -1000.0])
    def test_extremes_stay_inside_unit_interval(self, score):
        p = buy_probability(score)
        assert 0.0 < p < 1.0
        assert 0.0 < 1.0 - p < 1.0

    def test_extremes_saturate(self):
        assert buy_probability(1000.0) == pytest.approx(1.0)
        assert buy_probability(-1000.0) == pytest.approx(0.0)

    def test_monotonic(self):
        scores = [-5.0, -1.5, 0.0, 0.3, 3.0, 7.5]
        probs = [buy_probability(s) for s in scores]
        assert probs == sorted(probs)


class TestClassify:

    @pytest.mark.parametrize(
        "score, expected",
        [
            (3.0, Decision.STRONG_BUY),
            (4.2, Decision.STRONG_BUY),
            (1.5, Decision.BUY),
            (2.999, Decision.BUY),
            (1.499, Decision.HOLD),
            (0.0, Decision.HOLD),
            (-1.499, Decision.HOLD),
            (-1.5, Decision.SELL),
            (-2.999, Decision.SELL),
            (-3.0, Decision.STRONG_SELL),
            (-6.0, Decision.STRONG_SELL),
        ],
    )
    def test_thresholds_inclusive(self, score, expected):
        assert classify(score) == expected

    def test_labels(self):
        assert Decision.STRONG_BUY.value == "STRONG BUY"
        assert Decision.STRONG_SELL.value == "STRONG SELL"


class TestDecide:

    def test_probabilities_sum_to_one(self):
        out = decide(FactorScores(2, 1, 0, 0, 2, 1, 0))
        assert out.buy_probability + out.sell_probability == pytest.approx(1.0)
        assert out.total_score == pytest.approx(1.1)
        assert out.decision == Decision.HOLD

    def test_strong_sell(self):
        out = decide(FactorScores(0, 0, -2, 0, 0, -2, 5))
        assert out.decision == Decision.STRONG_SELL
        assert out.sell_probability > 0.9

    def test_repeatable(self):
        f = FactorScores(3, 2, 2, 3, 2, 1, 2)
        assert decide(f) == decide(f)

    @pytest.mark.parametrize("score", [-10.0, -5.9, -0.1, 0.1, 3.35, 10.0])
    def test_probability_strictly_inside_unit_interval(self, score):
        out = buy_probability(score)
        assert 0.0 < out < 1.0
