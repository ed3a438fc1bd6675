"""Keyword-weighted language detection for banking messages."""

from types import MappingProxyType
from typing import Mapping, Optional

from .models import UNKNOWN_LANGUAGE
from .preprocessor import count_occurrences


ENGLISH = 1
FRENCH = 2

MIN_LANGUAGE_SCORE = 1.0

# Domain terms weigh 2.0, legal/contract terms 1.5, function words 0.5.
DEFAULT_LANGUAGE_KEYWORDS: dict[int, dict[str, float]] = {
    ENGLISH: {
        'payment': 2.0, 'account': 2.0, 'transfer': 2.0, 'amount': 2.0,
        'settlement': 2.0, 'transaction': 2.0, 'balance': 2.0, 'credit': 2.0,
        'debit': 2.0, 'interest': 2.0, 'maturity': 2.0, 'currency': 2.0,
        'exchange': 2.0, 'rate': 2.0, 'fee': 2.0, 'charge': 2.0,
        'swift': 2.0, 'bank': 2.0, 'branch': 2.0, 'beneficiary': 2.0,
        'remittance': 2.0, 'overdraft': 2.0, 'deposit': 2.0,
        'agreement': 1.5, 'contract': 1.5, 'terms': 1.5, 'conditions': 1.5,
        'clause': 1.5, 'party': 1.5, 'hereby': 1.5, 'thereof': 1.5,
        'pursuant': 1.5, 'provision': 1.5,
        'the': 0.5, 'and': 0.5, 'of': 0.5, 'to': 0.5, 'in': 0.5,
        'for': 0.5, 'with': 0.5, 'by': 0.5, 'on': 0.5, 'at': 0.5,
    },
    FRENCH: {
        'paiement': 2.0, 'compte': 2.0, 'virement': 2.0, 'montant': 2.0,
        'règlement': 2.0, 'transaction': 2.0, 'solde': 2.0, 'crédit': 2.0,
        'débit': 2.0, 'intérêt': 2.0, 'échéance': 2.0, 'devise': 2.0,
        'change': 2.0, 'taux': 2.0, 'frais': 2.0, 'commission': 2.0,
        'banque': 2.0, 'agence': 2.0, 'bénéficiaire': 2.0, 'remise': 2.0,
        'découvert': 2.0, 'dépôt': 2.0, 'versement': 2.0,
        'accord': 1.5, 'contrat': 1.5, 'conditions': 1.5, 'clause': 1.5,
        'partie': 1.5, 'présent': 1.5, 'disposition': 1.5, 'conformément': 1.5,
        'stipulation': 1.5, 'convention': 1.5,
        'le': 0.5, 'la': 0.5, 'les': 0.5, 'et': 0.5, 'de': 0.5,
        'à': 0.5, 'dans': 0.5, 'pour': 0.5, 'par': 0.5, 'sur': 0.5,
    },
}


class LanguageDetector:
    """Scores text against per-language keyword tables.

    Each occurrence of a keyword adds its weight to that language's score.
    The best-scoring language wins; a best score under 1.0 means unknown.
    Equal scores resolve to the lowest language id.
    """

    def __init__(self, keywords: Optional[Mapping[int, Mapping[str, float]]] = None):
        if keywords is None:
            keywords = DEFAULT_LANGUAGE_KEYWORDS
        self.keywords = MappingProxyType({
            int(language): MappingProxyType(
                {keyword.lower(): float(weight) for keyword, weight in table.items()}
            )
            for language, table in keywords.items()
        })

    def scores(self, text: str) -> dict[int, float]:
        """Return the weighted keyword score for every configured language."""
        text = text.lower()
        return {
            language: sum(
                weight * count_occurrences(text, keyword)
                for keyword, weight in table.items()
            )
            for language, table in self.keywords.items()
        }

    def detect(self, text: str) -> int:
        """Return the detected language id, or 0 when nothing scores high enough."""
        if not text:
            return UNKNOWN_LANGUAGE

        language_scores = self.scores(text)
        if not language_scores:
            return UNKNOWN_LANGUAGE

        best_language = min(
            language_scores, key=lambda language: (-language_scores[language], language)
        )
        if language_scores[best_language] < MIN_LANGUAGE_SCORE:
            return UNKNOWN_LANGUAGE
        return best_language

    def to_dict(self) -> dict[int, dict[str, float]]:
        return {language: dict(table) for language, table in self.keywords.items()}
