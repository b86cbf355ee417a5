"""Rule-based English stemmer for catalog search terms."""

import re

IRREGULAR_PLURALS = {
    'shelves': 'shelf',
    'knives': 'knife',
    'wives': 'wife',
    'lives': 'life',
    'leaves': 'leaf',
    'wolves': 'wolf',
    'halves': 'half',
    'calves': 'calf',
    'selves': 'self',
    'loaves': 'loaf',
    'thieves': 'thief',
    'children': 'child',
    'men': 'man',
    'women': 'woman',
    'feet': 'foot',
    'teeth': 'tooth',
    'mice': 'mouse',
}

_DOUBLED_CONSONANT = re.compile(r'([bcdfgklmnprstvz])\1$')


def stem(word: str) -> str:
    """Strip common English inflections from a word.

    Handles plurals (-ies, -ves, -es, -s), progressive (-ing) and past
    tense (-ied, -ed). Words of three characters or fewer and words that
    match no rule are returned unchanged.

    Args:
        word: Word to stem

    Returns:
        The stemmed, lower-cased word
    """
    word = word.lower()
    length = len(word)

    if length <= 3:
        return word

    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]

    if word.endswith('ies') and length > 4:
        return word[:-3] + 'y'

    if word.endswith('ves') and length > 4:
        return word[:-3] + 'f'

    if word.endswith('es') and length > 3:
        base = word[:-2]
        if base.endswith(('x', 's', 'ch', 'sh')):
            return base
        if base.endswith('o'):
            return base
        # Otherwise the plain -s rule below applies ("tables" -> "table")

    if word.endswith('s') and not word.endswith('ss') and length > 3:
        return word[:-1]

    if word.endswith('ing') and length > 5:
        base = word[:-3]
        if _DOUBLED_CONSONANT.search(base):
            base = base[:-1]
        return base

    if word.endswith('ed') and length > 4:
        if word.endswith('ied'):
            return word[:-3] + 'y'
        return word[:-2]

    return word
