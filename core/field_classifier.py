"""Naive Bayes text classifiers used to label listing text fragments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from nltk.tokenize import TweetTokenizer
from sklearn.feature_extraction.text import CountVectorizer
from sklearn.naive_bayes import MultinomialNB

from core.training import TrainingSet
from core.types import Distribution
from utils.error_handling import ConfigurationError
from utils.normalizers import format_availability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    label: str
    distribution: Distribution


def pick_label(distribution: Distribution) -> Optional[str]:
    """Label with the strictly highest probability.

    Ties go to the label seen first in the distribution's iteration order,
    which is the training label order.
    """
    best_label: Optional[str] = None
    best_probability = float("-inf")
    for label, probability in distribution.items():
        if probability > best_probability:
            best_label = label
            best_probability = probability
    return best_label


class NaiveBayesTextClassifier:
    """Multinomial Naive Bayes over social-media aware tokens.

    Each label's exemplars are trained as a single document, so labels start
    with equal priors.
    """

    def __init__(self, alpha: float = 1.0):
        self._tokenizer = TweetTokenizer(preserve_case=False)
        self._vectorizer = CountVectorizer(analyzer=self.tokenize)
        self._model = MultinomialNB(alpha=alpha)
        self._labels: List[str] = []

    def tokenize(self, text: str) -> List[str]:
        return [token.lower() for token in self._tokenizer.tokenize(text)]

    @property
    def labels(self) -> List[str]:
        return list(self._labels)

    def train(self, training: TrainingSet) -> "NaiveBayesTextClassifier":
        if len(training) == 0:
            raise ConfigurationError("Cannot train a classifier without labels")

        labels = []
        documents = []
        for label, phrases in training:
            labels.append(label)
            documents.append("\n".join(phrases))

        try:
            counts = self._vectorizer.fit_transform(documents)
        except ValueError as e:
            # empty vocabulary
            raise ConfigurationError(f"Training data has no usable tokens: {e}") from e

        self._model.fit(counts, labels)
        self._labels = labels
        logger.debug("Trained classifier on labels %s", labels)
        return self

    def predict(self, text: str) -> Distribution:
        """Probability per label, in training label order."""
        if not self._labels:
            return {}

        counts = self._vectorizer.transform([text])
        probabilities = self._model.predict_proba(counts)[0]
        by_class = {
            str(label): float(probability)
            for label, probability in zip(self._model.classes_, probabilities)
        }
        return {label: by_class[label] for label in self._labels}


class FieldClassifier:
    """Assigns a text fragment to one of the extraction field labels."""

    def __init__(self, training: TrainingSet, alpha: float = 1.0):
        self._classifier = NaiveBayesTextClassifier(alpha=alpha).train(training)

    @property
    def labels(self) -> List[str]:
        return self._classifier.labels

    def classify(self, text: str) -> Optional[Classification]:
        """Winning label and full distribution, or None when unclassifiable."""
        distribution = self._classifier.predict(text)
        label = pick_label(distribution)
        if label is None:
            logger.debug("Unclassifiable fragment dropped: %r", text)
            return None
        return Classification(label, distribution)


class AvailabilityClassifier:
    """Binary in-stock classifier trained on ``positive``/``negative`` exemplars."""

    POSITIVE = "positive"

    def __init__(self, training: TrainingSet, alpha: float = 1.0):
        if self.POSITIVE not in training:
            raise ConfigurationError(
                f"Availability training must define a '{self.POSITIVE}' label"
            )
        self._classifier = NaiveBayesTextClassifier(alpha=alpha).train(training)

    def classify(self, text: str) -> Optional[Classification]:
        distribution = self._classifier.predict(format_availability(text))
        label = pick_label(distribution)
        if label is None:
            return None
        return Classification(label, distribution)

    def is_available(self, text: str) -> bool:
        result = self.classify(text)
        return result is not None and result.label == self.POSITIVE
