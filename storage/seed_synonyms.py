"""Built-in furniture synonym vocabulary for bootstrapping a synonym store."""

from typing import Dict, List, Tuple
import logging

from .models import SynonymEntry

logger = logging.getLogger(__name__)

SEED_WEIGHT = 0.9

# canonical -> (category hint, synonyms)
DEFAULT_SYNONYMS: Dict[str, Tuple[str, List[str]]] = {
    # Seating
    'sofa': ('seating', ['couch', 'settee', 'loveseat', 'divan', 'davenport', 'sectional']),
    'chair': ('seating', ['seat', 'recliner', 'lounger']),
    'armchair': ('seating', ['lounge chair', 'club chair']),
    'stool': ('seating', ['barstool', 'bar stool', 'footstool']),
    'bench': ('seating', ['pew']),
    'ottoman': ('seating', ['pouf', 'hassock']),
    'beanbag': ('seating', ['bean bag', 'floor cushion']),
    'rocker': ('seating', ['rocking chair', 'glider']),

    # Tables
    'table': ('tables', ['counter', 'surface']),
    'desk': ('tables', ['workstation', 'writing desk']),
    'nightstand': ('tables', ['bedside table', 'night table', 'bedside']),
    'coffee table': ('tables', ['cocktail table', 'center table']),
    'dining table': ('tables', ['dinner table', 'kitchen table']),
    'end table': ('tables', ['side table', 'accent table']),
    'console': ('tables', ['console table', 'hallway table', 'entry table']),

    # Storage
    'cabinet': ('storage', ['cupboard', 'closet', 'locker']),
    'wardrobe': ('storage', ['armoire', 'clothes cabinet']),
    'dresser': ('storage', ['chest of drawers', 'bureau']),
    'shelf': ('storage', ['shelving', 'rack', 'ledge']),
    'bookcase': ('storage', ['bookshelf', 'book rack']),
    'trunk': ('storage', ['storage box', 'footlocker']),
    'safe': ('storage', ['vault', 'strongbox', 'lockbox']),
    'sideboard': ('storage', ['buffet', 'credenza', 'hutch']),

    # Beds
    'bed': ('beds', ['bunk', 'cot']),
    'mattress': ('beds', ['sleeping pad']),
    'crib': ('beds', ['baby bed', 'cradle']),
    'futon': ('beds', ['sofa bed', 'sleeper']),
    'headboard': ('beds', ['bed frame', 'bedhead']),

    # Lighting
    'lamp': ('lighting', ['lantern', 'light']),
    'chandelier': ('lighting', ['pendant', 'hanging light']),
    'sconce': ('lighting', ['wall light', 'wall lamp']),
    'candle': ('lighting', ['candlestick', 'taper']),

    # Decor
    'rug': ('decor', ['carpet', 'mat', 'runner', 'area rug']),
    'curtain': ('decor', ['drape', 'blind', 'window treatment']),
    'mirror': ('decor', ['looking glass', 'vanity mirror']),
    'plant': ('decor', ['houseplant', 'greenery', 'planter']),
    'painting': ('decor', ['artwork', 'canvas', 'picture']),
    'statue': ('decor', ['sculpture', 'figurine', 'bust']),

    # Electronics
    'tv': ('electronics', ['television', 'flatscreen', 'telly']),
    'computer': ('electronics', ['pc', 'desktop', 'laptop']),
    'speaker': ('electronics', ['stereo', 'subwoofer', 'sound system']),

    # Kitchen
    'fridge': ('kitchen', ['refrigerator', 'freezer', 'icebox']),
    'stove': ('kitchen', ['oven', 'range', 'cooker', 'cooktop']),
    'sink': ('kitchen', ['basin', 'washbasin']),
    'grill': ('outdoor', ['bbq', 'barbecue', 'smoker']),
}


def default_entries() -> List[SynonymEntry]:
    """Seed vocabulary as synonym entries."""
    entries = []
    for canonical, (category_hint, synonyms) in DEFAULT_SYNONYMS.items():
        for synonym in synonyms:
            entries.append(SynonymEntry(
                canonical=canonical,
                synonym=synonym,
                weight=SEED_WEIGHT,
                language='en',
                category_hint=category_hint,
                source='seed'
            ))
    return entries


def seed_synonyms(store) -> Dict[str, int]:
    """Load the seed vocabulary into a SynonymStore; existing pairs are skipped.

    Returns:
        Dict with 'created' and 'skipped' counts
    """
    created = skipped = 0
    for entry in default_entries():
        if store.insert_if_absent(entry) is None:
            skipped += 1
        else:
            created += 1

    logger.info(f"Seeded synonyms: {created} created, {skipped} skipped")
    return {'created': created, 'skipped': skipped}
