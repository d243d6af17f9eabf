from fastapi import Request

from entail.domain.errors import ClassifierUnavailable
from entail.services.classifier import AlignmentClassifier


def get_classifier(request: Request) -> AlignmentClassifier:
    classifier = getattr(request.app.state, 'classifier', None)
    if classifier is None:
        raise ClassifierUnavailable('classifier is not initialized')
    return classifier
