"""French/English query detection and French-to-English translation."""

from dataclasses import dataclass, field
from typing import Dict, List
import re

LANG_EN = 'en'
LANG_FR = 'fr'
SUPPORTED_LANGUAGES = (LANG_EN, LANG_FR)

FRENCH_MARKERS = frozenset({
    'le', 'la', 'les', 'un', 'une', 'des', 'du', 'de', 'et', 'ou',
    'avec', 'pour', 'dans', 'sur', 'sous', 'entre',
    'blanc', 'noir', 'rouge', 'bleu', 'vert', 'jaune',
    'grande', 'petit', 'petite', 'moderne', 'ancien', 'ancienne',
    'bois', 'métal', 'verre', 'cuir', 'tissu',
    'chaise', 'table', 'lit', 'canapé', 'armoire', 'lampe', 'bureau',
    'fauteuil', 'étagère', 'meuble',
})

FR_TO_EN: Dict[str, str] = {
    # Furniture
    'chaise': 'chair', 'chaises': 'chairs',
    'table': 'table', 'tables': 'tables',
    'lit': 'bed', 'lits': 'beds',
    'canapé': 'sofa', 'canape': 'sofa', 'sofa': 'sofa',
    'fauteuil': 'armchair', 'fauteuils': 'armchairs',
    'bureau': 'desk', 'bureaux': 'desks',
    'armoire': 'wardrobe', 'armoires': 'wardrobes',
    'commode': 'dresser', 'commodes': 'dressers',
    'étagère': 'shelf', 'etagere': 'shelf', 'étagères': 'shelves',
    'lampe': 'lamp', 'lampes': 'lamps',
    'lustre': 'chandelier', 'lustres': 'chandeliers',
    'miroir': 'mirror', 'miroirs': 'mirrors',
    'tapis': 'rug',
    'rideau': 'curtain', 'rideaux': 'curtains',
    'coussin': 'pillow', 'coussins': 'pillows',
    'couverture': 'blanket',
    'matelas': 'mattress',
    'oreiller': 'pillow',
    'tabouret': 'stool', 'tabourets': 'stools',
    'banc': 'bench', 'bancs': 'benches',
    'buffet': 'sideboard',
    'vitrine': 'display case',
    'bibliothèque': 'bookshelf', 'bibliotheque': 'bookshelf',
    'placard': 'cupboard', 'placards': 'cupboards',
    'tiroir': 'drawer', 'tiroirs': 'drawers',
    'meuble': 'furniture', 'meubles': 'furniture',

    # Materials
    'bois': 'wood',
    'métal': 'metal', 'metal': 'metal',
    'verre': 'glass',
    'cuir': 'leather',
    'tissu': 'fabric',
    'plastique': 'plastic',
    'marbre': 'marble',
    'pierre': 'stone',
    'céramique': 'ceramic', 'ceramique': 'ceramic',
    'acier': 'steel',
    'fer': 'iron',
    'laiton': 'brass',
    'chrome': 'chrome',
    'rotin': 'rattan',
    'osier': 'wicker',
    'bambou': 'bamboo',

    # Colors
    'blanc': 'white', 'blanche': 'white',
    'noir': 'black', 'noire': 'black',
    'rouge': 'red',
    'bleu': 'blue', 'bleue': 'blue',
    'vert': 'green', 'verte': 'green',
    'jaune': 'yellow',
    'orange': 'orange',
    'rose': 'pink',
    'violet': 'purple', 'violette': 'purple',
    'gris': 'gray', 'grise': 'gray',
    'brun': 'brown', 'brune': 'brown', 'marron': 'brown',
    'beige': 'beige',
    'crème': 'cream', 'creme': 'cream',
    'doré': 'gold', 'dore': 'gold',
    'argenté': 'silver', 'argente': 'silver',

    # Styles
    'moderne': 'modern',
    'classique': 'classic',
    'vintage': 'vintage',
    'rustique': 'rustic',
    'industriel': 'industrial', 'industrielle': 'industrial',
    'minimaliste': 'minimalist',
    'contemporain': 'contemporary', 'contemporaine': 'contemporary',
    'ancien': 'antique', 'ancienne': 'antique',
    'luxueux': 'luxurious', 'luxueuse': 'luxurious',

    # Rooms
    'salon': 'living room',
    'chambre': 'bedroom',
    'cuisine': 'kitchen',
    'salle de bain': 'bathroom',
    'salle à manger': 'dining room', 'salle a manger': 'dining room',
    'entrée': 'entrance', 'entree': 'entrance',
    'jardin': 'garden',
    'terrasse': 'terrace',
    'balcon': 'balcony',
    'garage': 'garage',
    'grenier': 'attic',
    'cave': 'basement',

    # Sizes
    'petit': 'small', 'petite': 'small',
    'grand': 'large', 'grande': 'large',
    'moyen': 'medium', 'moyenne': 'medium',

    # Appliances
    'réfrigérateur': 'refrigerator', 'refrigerateur': 'refrigerator',
    'frigo': 'fridge',
    'four': 'oven',
    'micro-ondes': 'microwave', 'micro ondes': 'microwave',
    'lave-vaisselle': 'dishwasher', 'lave vaisselle': 'dishwasher',
    'machine à laver': 'washing machine', 'machine a laver': 'washing machine',
    'télévision': 'television', 'television': 'television',
    'télé': 'tv', 'tele': 'tv',
    'ordinateur': 'computer',
    'climatiseur': 'air conditioner',
    'ventilateur': 'fan',

    # Other
    'neuf': 'new', 'neuve': 'new',
    'occasion': 'used', 'usagé': 'used', 'usage': 'used',
    'confortable': 'comfortable',
    'élégant': 'elegant', 'elegant': 'elegant',
    'pratique': 'practical',
    'solide': 'solid',
    'léger': 'light', 'leger': 'light',
    'lourd': 'heavy', 'lourde': 'heavy',
}

_ACCENT_MAP = str.maketrans('éèêëàâäùûüôöîïç', 'eeeeaaauuuooiic')
_FRENCH_CHARS = re.compile(r'[éèêëàâäùûüôöîïç]')

# Longest first so "salle a manger" wins over any shorter overlap
_PHRASES = sorted((k for k in FR_TO_EN if ' ' in k), key=len, reverse=True)


@dataclass
class Translation:
    """Outcome of translating a query."""
    translated: str
    terms: List[str] = field(default_factory=list)
    original_lang: str = LANG_EN

    @property
    def is_translated(self) -> bool:
        return self.original_lang == LANG_FR

    def to_dict(self) -> Dict[str, object]:
        return {
            'translated': self.translated,
            'terms': list(self.terms),
            'original_lang': self.original_lang,
        }


def remove_accents(text: str) -> str:
    """Fold the French diacritics used by the dictionary to plain ASCII."""
    return text.translate(_ACCENT_MAP)


def _lookup(word: str):
    if word in FR_TO_EN:
        return FR_TO_EN[word]
    return FR_TO_EN.get(remove_accents(word))


class LanguageSupport:
    """Heuristic EN/FR detection and dictionary translation.

    Translation is gated on the caller's UI locale: under an English locale
    queries pass through untouched even if they look French.
    """

    def detect_language(self, query: str) -> str:
        """Classify a query as 'fr' or 'en'.

        Each word scores +2 if it is a French marker word, +3 if it carries a
        French diacritic and +2 if the dictionary knows it. The query is
        French when the total reaches max(2, 0.3 * word count).
        """
        words = query.strip().lower().split()
        score = 0
        for word in words:
            if word in FRENCH_MARKERS:
                score += 2
            if _FRENCH_CHARS.search(word):
                score += 3
            if word in FR_TO_EN:
                score += 2

        return LANG_FR if score >= max(2, len(words) * 0.3) else LANG_EN

    def translate_query(self, query: str, locale: str = LANG_EN) -> Translation:
        """Translate a French query to English when the locale allows it.

        Both the translation and the user's original French words are kept
        in ``terms``.
        """
        query = query.strip().lower()

        if locale != LANG_FR or self.detect_language(query) == LANG_EN:
            return Translation(translated=query, terms=[query], original_lang=LANG_EN)

        translated_words: List[str] = []
        french_terms: List[str] = []

        remaining = query
        for phrase in _PHRASES:
            folded = remove_accents(phrase)
            for candidate in {phrase, folded}:
                if re.search(rf'(?<!\S){re.escape(candidate)}(?!\S)', remaining):
                    french_terms.append(candidate)
                    remaining = re.sub(
                        rf'(?<!\S){re.escape(candidate)}(?!\S)',
                        FR_TO_EN[phrase].replace(' ', '\x00'),
                        remaining,
                    )

        for word in remaining.split():
            if '\x00' in word:
                translated_words.append(word.replace('\x00', ' '))
                continue
            english = _lookup(word)
            if english is not None:
                translated_words.append(english)
                french_terms.append(word)
            else:
                translated_words.append(word)

        translated = ' '.join(translated_words)

        terms: List[str] = []
        for term in [translated, query] + french_terms:
            if term not in terms:
                terms.append(term)

        return Translation(translated=translated, terms=terms, original_lang=LANG_FR)

    def get_french_equivalents(self, english_term: str) -> List[str]:
        """All French dictionary entries translating to an English term."""
        english_term = english_term.strip().lower()
        return [fr for fr, en in FR_TO_EN.items() if en == english_term]
