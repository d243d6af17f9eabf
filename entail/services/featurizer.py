from typing import Dict, List, Optional, Set

from entail.domain import features as F
from entail.domain.features import FeatureVector
from entail.utils.text import content_tokens, normalize_focus_text

STEM_LEN = 5


def _ratio(n: float, d: float) -> float:
    return n / d if d else 0.0


class LexicalFeaturizer:
    """
    Token-overlap features for a (premise, hypothesis) pair.

    A hypothesis token is *aligned* when the premise has the same token and
    *alignable* when the premise has a token sharing its first five
    characters (aligned tokens are alignable too).
    """

    name = 'lexical'

    def __init__(self, stem_len: int = STEM_LEN):
        self.stem_len = int(stem_len)

    def to_dict(self) -> Dict[str, object]:
        return {'name': self.name, 'stem_len': self.stem_len}

    def featurize(
        self,
        premise: str,
        hypothesis: str,
        focus: Optional[str] = None,
        relevance_score: Optional[float] = None,
    ) -> FeatureVector:
        p_toks = set(content_tokens(premise))
        h_toks = set(content_tokens(hypothesis))
        n_p, n_h = len(p_toks), len(h_toks)
        n_joint = n_p + n_h

        aligned = p_toks & h_toks
        p_alignable = self._alignable(p_toks, h_toks)
        h_alignable = self._alignable(h_toks, p_toks)

        unaligned = n_h - len(aligned)
        unalignable_p = n_p - len(p_alignable)
        unalignable_h = n_h - len(h_alignable)

        feats: FeatureVector = {
            F.BIAS: 1.0,
            F.COUNT_PREMISE: float(n_p),
            F.COUNT_CONCLUSION: float(n_h),
            F.COUNT_ALIGNED: float(len(aligned)),
            F.COUNT_ALIGNABLE: float(len(h_alignable)),
            F.COUNT_UNALIGNED: float(unaligned),
            F.COUNT_UNALIGNABLE_PREMISE: float(unalignable_p),
            F.COUNT_UNALIGNABLE_CONCLUSION: float(unalignable_h),
            F.COUNT_UNALIGNABLE_JOINT: float(unalignable_p + unalignable_h),
            F.PERCENT_ALIGNED_PREMISE: _ratio(len(aligned), n_p),
            F.PERCENT_ALIGNED_CONCLUSION: _ratio(len(aligned), n_h),
            F.PERCENT_ALIGNED_JOINT: _ratio(2 * len(aligned), n_joint),
            F.PERCENT_ALIGNABLE_PREMISE: _ratio(len(p_alignable), n_p),
            F.PERCENT_ALIGNABLE_CONCLUSION: _ratio(len(h_alignable), n_h),
            F.PERCENT_ALIGNABLE_JOINT: _ratio(
                len(p_alignable) + len(h_alignable), n_joint
            ),
            F.PERCENT_UNALIGNED_PREMISE: _ratio(n_p - len(aligned), n_p),
            F.PERCENT_UNALIGNED_CONCLUSION: _ratio(unaligned, n_h),
            F.PERCENT_UNALIGNED_JOINT: _ratio(n_joint - 2 * len(aligned), n_joint),
            F.PERCENT_UNALIGNABLE_PREMISE: _ratio(unalignable_p, n_p),
            F.PERCENT_UNALIGNABLE_CONCLUSION: _ratio(unalignable_h, n_h),
            F.PERCENT_UNALIGNABLE_JOINT: _ratio(
                unalignable_p + unalignable_h, n_joint
            ),
        }
        if relevance_score is not None:
            feats[F.RELEVANCE_SCORE] = float(relevance_score)
        if focus is not None:
            present = normalize_focus_text(focus) in normalize_focus_text(premise)
            feats[F.FOCUS_IN_PREMISE] = 1.0 if present else 0.0
        return feats

    def _alignable(self, toks: Set[str], other: Set[str]) -> List[str]:
        other_stems = {t[: self.stem_len] for t in other}
        return [t for t in toks if t[: self.stem_len] in other_stems]
