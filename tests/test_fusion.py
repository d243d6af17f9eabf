import math

import pytest

from entail.domain.errors import ScoreError
from entail.domain.features import WeightTable
from entail.services.fusion import (
    ALIGNMENT_WEIGHT,
    ScoreFusion,
    focus_discount,
    logistic,
)

pytestmark = pytest.mark.unit

FEATURES = {
    'bias': 1.0,
    'count_unaligned': 2.0,
    'count_aligned': 3.0,
    'percent_aligned_premise': 0.5,
    'percent_aligned_conclusion': 0.75,
    'percent_aligned_joint': 0.6,
}


@pytest.fixture()
def fusion():
    return ScoreFusion(
        WeightTable(
            {
                'bias': 0.5,
                'count_unaligned': -0.25,
                'count_aligned': 2.0,
                'percent_aligned_premise': 1.0,
                'percent_aligned_conclusion': 4.0,
                'percent_aligned_joint': -1.0,
            }
        )
    )


def test_base_score_excludes_alignment_features(fusion):
    assert fusion.base_score(FEATURES) == pytest.approx(0.5 * 1.0 - 0.25 * 2.0)


def test_alignment_feature_score_is_restricted_to_alignment_features(fusion):
    expected = 2.0 * 3.0 + 1.0 * 0.5 + 4.0 * 0.75 - 1.0 * 0.6
    assert fusion.alignment_feature_score(FEATURES) == pytest.approx(expected)


def test_features_missing_from_weights_count_zero(fusion):
    assert fusion.base_score({'unseen_feature': 10.0}) == 0.0


def test_fuse_adds_weighted_engine_cost(fusion):
    base = fusion.base_score(FEATURES)
    assert ALIGNMENT_WEIGHT == 0.10
    assert fusion.fuse(FEATURES, -3.0) == pytest.approx(base - 0.3)


def test_fuse_with_zero_cost_and_zero_alignment_weights_is_base_score():
    f = ScoreFusion(WeightTable({'bias': 0.7, 'count_unaligned': -0.1}))
    feats = {'bias': 1.0, 'count_unaligned': 4.0, 'count_aligned': 9.0}
    assert f.fuse(feats, 0.0) == f.base_score(feats)


def test_alternative_path_scores_local_alignment_features(fusion):
    alt = ScoreFusion(fusion.weights, use_engine_cost=False)
    expected = fusion.base_score(FEATURES) + fusion.alignment_feature_score(FEATURES)
    # engine cost ignored on this path
    assert alt.fuse(FEATURES, -100.0) == pytest.approx(expected)


def test_probability_is_logistic_of_fused_score(fusion):
    score = fusion.fuse(FEATURES, 1.0)
    expected = 1 / (1 + math.exp(-score))
    assert fusion.probability(FEATURES, 1.0) == pytest.approx(expected)


@pytest.mark.parametrize(
    'x,expected',
    [(0.0, 0.5), (-math.inf, 0.0), (math.inf, 1.0), (-1000.0, 0.0), (1000.0, 1.0)],
)
def test_logistic_is_stable(x, expected):
    assert logistic(x) == pytest.approx(expected)


def test_negative_infinite_cost_gives_zero_probability(fusion):
    assert fusion.probability(FEATURES, -math.inf) == 0.0


def test_nan_score_raises():
    f = ScoreFusion(WeightTable({'bias': 1.0}), alignment_weight=0.0)
    with pytest.raises(ScoreError):
        f.fuse({'bias': 1.0}, math.inf)  # inf * 0.0


def test_focus_discount_single_token_absent_is_quarter():
    p0 = 0.8123
    assert focus_discount(p0, 'dogs have tails', 'cats') == 0.25 * p0


def test_focus_discount_multi_token_absent_is_three_quarters():
    p0 = 0.8123
    assert focus_discount(p0, 'dogs have tails', 'black cats') == 0.75 * p0


@pytest.mark.parametrize(
    'premise,focus',
    [
        ('Black Cats have tails', 'black cats'),
        ('black   cats have tails', 'BLACK CATS'),
        ('cats have tails', 'Cats'),
    ],
)
def test_focus_present_is_not_discounted(premise, focus):
    assert focus_discount(0.6, premise, focus) == 0.6


def test_no_focus_is_not_discounted():
    assert focus_discount(0.6, 'anything', None) == 0.6


def test_premise_probability_applies_discount(fusion):
    p0 = fusion.probability(FEATURES, 0.0)
    p = fusion.premise_probability(FEATURES, 0.0, 'dogs bark', 'cats')
    assert p == 0.25 * p0
