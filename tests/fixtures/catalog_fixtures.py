"""Shared catalog and synonym fixtures for unit tests."""

from storage.models import SynonymEntry


class FakeSynonymStore:
    """In-memory stand-in for SqliteSynonymStore."""

    def __init__(self, entries):
        self.entries = list(entries)
        self.loads = 0
        self.usage = []
        self.fail = False

    def list_active_synonyms(self, locale):
        self.loads += 1
        if self.fail:
            raise RuntimeError("database is locked")
        return [e for e in self.entries if e.active]

    def increment_usage(self, synonym):
        if self.fail:
            raise RuntimeError("database is locked")
        self.usage.append(synonym)


def sofa_entries():
    return [
        SynonymEntry('sofa', 'couch', weight=0.9, category_hint='seating'),
        SynonymEntry('sofa', 'settee', weight=0.8),
    ]


def build_sample_catalog(store):
    """
    Populate a SqliteCatalogStore with a small furniture catalog.

    "Throw Pillow" only matches "couch" through its tag, never its name.

    Returns:
        Dict of name -> id for categories, tags and items
    """
    ids = {}
    ids['seating'] = store.add_category('Seating', 'seating', sort_order=1)
    ids['tables-desks'] = store.add_category('Tables & Desks', 'tables-desks', sort_order=2)
    ids['storage'] = store.add_category('Storage', 'storage', sort_order=3)

    group = store.add_tag_group('Seating Types', 'seating-types', [ids['seating']])
    ids['tag:sofa'] = store.add_tag('Sofa', 'seating-sofa', group_id=group)
    ids['tag:cushion'] = store.add_tag('Couch Cushion', 'decor-couch-cushion')

    ids['Modern Sofa'] = store.add_item('Modern Sofa', 899.0, [ids['seating']], [ids['tag:sofa']])
    ids['Leather Couch'] = store.add_item('Leather Couch', 1299.0, [ids['seating']])
    ids['Oak Dining Table'] = store.add_item('Oak Dining Table', 450.0, [ids['tables-desks']])
    ids['Office Chair'] = store.add_item('Office Chair', 150.0, [ids['seating']])
    ids['Throw Pillow'] = store.add_item('Throw Pillow', 25.0, tag_ids=[ids['tag:cushion']])
    ids['Pine Wardrobe'] = store.add_item('Pine Wardrobe', 600.0, [ids['storage']])
    return ids
