"""Tests for category re-ranking and category suggestion."""

import unittest

from search.category_booster import (
    CategoryRelevanceBooster,
    build_category_keywords,
    add_tag_keywords,
    score_categories
)
from storage.models import CatalogItem, CategoryRecord, TagRecord


class FakeCatalog:

    def __init__(self):
        self.category_loads = 0
        self.fail = False

    def list_categories(self):
        self.category_loads += 1
        if self.fail:
            raise RuntimeError("no such table: categories")
        return [
            CategoryRecord(1, 'Seating', 'seating'),
            CategoryRecord(2, 'Tables & Desks', 'tables-desks'),
        ]

    def list_category_tags(self, category_id):
        if category_id == 1:
            return [TagRecord(1, 'Sofa', 'seating-sofa')]
        return []


def item(item_id, name, *slugs):
    return CatalogItem(id=item_id, name=name,
                       categories=[{'id': i, 'name': s, 'slug': s} for i, s in enumerate(slugs)])


class TestEnhanceResults(unittest.TestCase):

    def setUp(self):
        self.booster = CategoryRelevanceBooster()

    def test_active_then_related_then_rest(self):
        items = [
            item(1, 'Alpha Table', 'tables'),
            item(2, 'Beta Lamp', 'living-room'),
            item(3, 'Zed Chair', 'seating'),
        ]
        ranked = self.booster.enhance_results(items, 'seating')
        self.assertEqual([i.name for i in ranked], ['Zed Chair', 'Beta Lamp', 'Alpha Table'])

    def test_boost_reset_after_ranking(self):
        ranked = self.booster.enhance_results([item(1, 'Chair', 'seating')], 'seating')
        self.assertEqual(ranked[0].relevance_boost, 1.0)
        self.assertNotIn('relevance_boost', ranked[0].to_dict())

    def test_ties_sorted_by_name(self):
        items = [item(1, 'b chair', 'seating'), item(2, 'A chair', 'seating')]
        ranked = self.booster.enhance_results(items, 'seating')
        self.assertEqual([i.id for i in ranked], [2, 1])

    def test_multipliers_not_combined(self):
        items = [
            item(1, 'Both', 'office', 'seating'),
            item(2, 'Active', 'seating'),
        ]
        ranked = self.booster.enhance_results(items, 'seating')
        self.assertEqual([i.name for i in ranked], ['Active', 'Both'])

    def test_no_filter_returns_input(self):
        items = [item(1, 'Z', 'seating'), item(2, 'A', 'tables')]
        self.assertIs(self.booster.enhance_results(items, None), items)


class TestKeywords(unittest.TestCase):

    def test_slug_and_name_keywords(self):
        keywords = build_category_keywords('Tables & Desks', 'tables-desks')
        self.assertEqual(keywords['tables'].weight, 6.0)
        self.assertEqual(keywords['desks'].weight, 6.0)
        self.assertEqual(keywords['table'].weight, 4.5)
        self.assertEqual(keywords['desk'].weight, 4.5)
        self.assertNotIn('&', keywords)

    def test_tag_keywords_do_not_downgrade(self):
        keywords = build_category_keywords('Seating', 'seating')
        add_tag_keywords(keywords, 'Indoor Seating', 'seating-indoor')
        self.assertEqual(keywords['seating'].weight, 6.0)
        self.assertEqual(keywords['indoor seating'].weight, 4.5)
        self.assertEqual(keywords['indoor'].weight, 4.0)

    def test_tag_slug_prefix_stripped(self):
        keywords = {}
        add_tag_keywords(keywords, 'X', 'decor-vase')
        self.assertIn('vase', keywords)
        self.assertNotIn('decor', keywords)

    def test_score_below_threshold(self):
        table = {'seating': build_category_keywords('Seating', 'seating')}
        self.assertIsNone(score_categories('xyz', table))


class TestSuggestCategory(unittest.TestCase):

    def setUp(self):
        self.catalog = FakeCatalog()
        self.booster = CategoryRelevanceBooster(self.catalog)

    def test_tag_keyword_suggests_category(self):
        self.assertEqual(self.booster.suggest_category('sofas'), 'seating')

    def test_derived_singular(self):
        self.assertEqual(self.booster.suggest_category('desk'), 'tables-desks')

    def test_no_match(self):
        self.assertIsNone(self.booster.suggest_category('xyz'))

    def test_keyword_table_cached_until_invalidated(self):
        self.booster.suggest_category('sofa')
        self.booster.suggest_category('desk')
        self.assertEqual(self.catalog.category_loads, 1)
        self.booster.invalidate()
        self.booster.suggest_category('desk')
        self.assertEqual(self.catalog.category_loads, 2)

    def test_catalog_failure(self):
        self.catalog.fail = True
        self.assertIsNone(self.booster.suggest_category('sofa'))

    def test_no_catalog(self):
        self.assertIsNone(CategoryRelevanceBooster().suggest_category('sofa'))


if __name__ == '__main__':
    unittest.main()
