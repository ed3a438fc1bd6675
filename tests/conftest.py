import pytest

from classifier.models import LabeledSample, argmax_category


PAYMENT_TEXTS = [
    "Customer payment transfer to account 1001",
    "Urgent payment transfer for invoice 22",
    "payment transfer executed today",
    "Payment transfer, charges shared",
    "Incoming payment transfer from branch",
]

PAIEMENT_TEXTS = [
    "Paiement virement vers le compte 1001",
    "Paiement virement urgent pour facture 22",
    "paiement virement exécuté aujourd'hui",
    "Paiement virement, frais partagés",
    "Paiement virement reçu de l'agence",
]


class StubClassifier:
    """Returns canned distributions per text and records what it was trained on."""

    def __init__(self, distributions, language=0):
        self.distributions = distributions
        self.language = language
        self.trained_on = None

    def train(self, samples):
        self.trained_on = list(samples)

    learn = train

    @property
    def is_learned(self):
        return self.trained_on is not None

    def classify(self, text):
        probabilities = dict(self.distributions[text])
        return {
            "category": argmax_category(probabilities),
            "language": self.language,
            "probabilities": probabilities,
        }


@pytest.fixture
def payment_corpus():
    """5 English payment transfers (category 1) then 5 French ones (category 2)."""
    return (
        [LabeledSample(text, 1, 1) for text in PAYMENT_TEXTS]
        + [LabeledSample(text, 2, 2) for text in PAIEMENT_TEXTS]
    )


@pytest.fixture
def interleaved_corpus():
    """Both categories alternating, so every 80/20 split sees each category."""
    samples = []
    for english, french in zip(PAYMENT_TEXTS * 2, PAIEMENT_TEXTS * 2):
        samples.append(LabeledSample(english, 1, 1))
        samples.append(LabeledSample(french, 2, 2))
    return samples
