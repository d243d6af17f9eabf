import pytest

from entail.services.featurizer import LexicalFeaturizer

pytestmark = pytest.mark.unit


@pytest.fixture()
def featurizer():
    return LexicalFeaturizer()


def test_identical_sentences_fully_aligned(featurizer):
    f = featurizer.featurize('cats have tails', 'cats have tails')
    assert f['bias'] == 1.0
    assert f['count_premise'] == 3
    assert f['count_conclusion'] == 3
    assert f['count_aligned'] == 3
    assert f['count_unaligned'] == 0
    assert f['percent_aligned_premise'] == 1.0
    assert f['percent_aligned_conclusion'] == 1.0
    assert f['percent_aligned_joint'] == 1.0
    assert f['percent_unalignable_joint'] == 0.0


def test_stem_match_is_alignable_but_not_aligned(featurizer):
    f = featurizer.featurize('the runners jumped', 'a runner jumped')
    # content tokens: {runners, jumped} vs {runner, jumped}
    assert f['count_aligned'] == 1
    assert f['count_alignable'] == 2
    assert f['count_unaligned'] == 1
    assert f['count_unalignable_conclusion'] == 0
    assert f['percent_aligned_conclusion'] == 0.5
    assert f['percent_alignable_conclusion'] == 1.0


def test_disjoint_sentences(featurizer):
    f = featurizer.featurize('dogs bark loudly', 'fish swim')
    assert f['count_aligned'] == 0
    assert f['count_unalignable_premise'] == 3
    assert f['count_unalignable_conclusion'] == 2
    assert f['count_unalignable_joint'] == 5
    assert f['percent_unaligned_joint'] == 1.0


def test_empty_text_does_not_divide_by_zero(featurizer):
    f = featurizer.featurize('', 'the')
    assert f['count_premise'] == 0
    assert f['percent_aligned_premise'] == 0.0
    assert f['percent_aligned_joint'] == 0.0


def test_optional_features(featurizer):
    plain = featurizer.featurize('cats have tails', 'cats have tails')
    assert 'relevance_score' not in plain
    assert 'focus_in_premise' not in plain

    f = featurizer.featurize(
        'Black cats have tails',
        'cats have tails',
        focus='black cats',
        relevance_score=3.5,
    )
    assert f['relevance_score'] == 3.5
    assert f['focus_in_premise'] == 1.0
    f = featurizer.featurize('cats have tails', 'cats have tails', focus='dogs')
    assert f['focus_in_premise'] == 0.0


def test_to_dict_describes_featurizer(featurizer):
    assert featurizer.to_dict() == {'name': 'lexical', 'stem_len': 5}
