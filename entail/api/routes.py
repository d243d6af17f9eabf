from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from entail.api.deps import get_classifier
from entail.api.schemas import (
    BestPremiseRequest,
    BestPremiseResponse,
    ClassifyRequest,
    ClassifyResponse,
)
from entail.services.classifier import AlignmentClassifier, verdict_for

router = APIRouter(prefix='/entailment', tags=['entailment'])


@router.post('/best', response_model=BestPremiseResponse)
async def best_premise(
    body: BestPremiseRequest,
    classifier: AlignmentClassifier = Depends(get_classifier),
):
    # engine round trips block; keep them off the event loop
    result = await run_in_threadpool(
        classifier.best_score,
        body.premises,
        body.hypothesis,
        body.focus,
        body.relevance_scores,
    )
    return BestPremiseResponse(
        premise=result.premise, index=result.index, probability=result.probability
    )


@router.post('/classify', response_model=ClassifyResponse)
async def classify(
    body: ClassifyRequest,
    classifier: AlignmentClassifier = Depends(get_classifier),
):
    probability = await run_in_threadpool(
        classifier.truth_score,
        body.premise,
        body.hypothesis,
        body.focus,
        body.relevance_score,
    )
    return ClassifyResponse(verdict=verdict_for(probability), probability=probability)
