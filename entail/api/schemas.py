from typing import List, Optional

from pydantic import BaseModel, Field

from entail.domain.enums import Verdict


class BestPremiseRequest(BaseModel):
    premises: List[str] = Field(min_length=1)
    hypothesis: str
    focus: Optional[str] = None
    relevance_scores: Optional[List[float]] = None


class BestPremiseResponse(BaseModel):
    premise: str
    index: int
    probability: float


class ClassifyRequest(BaseModel):
    premise: str
    hypothesis: str
    focus: Optional[str] = None
    relevance_score: Optional[float] = None


class ClassifyResponse(BaseModel):
    verdict: Verdict
    probability: float
