"""Tests for synonym auto-discovery."""

import os
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta
from unittest.mock import Mock

from analytics.analytics_models import SearchAnalyticsRecord, SuggestionType, SynonymSuggestion
from analytics.analytics_storage import AnalyticsStorage
from analytics.auto_discovery import SynonymAutoDiscovery
from search.fuzzy_matcher import FuzzyMatch
from storage.models import SynonymEntry
from storage.sqlite_backend import SqliteCatalogStore
from storage.synonym_store import SqliteSynonymStore


def record(query, results_count, timestamp, session_id=None):
    return SearchAnalyticsRecord(query=query, query_normalized=query, results_count=results_count,
                                 expanded_terms=[query], execution_time_ms=4,
                                 timestamp=timestamp, session_id=session_id)


class TestAnalyze(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        db_path = os.path.join(self.temp_dir, 'catalog.db')
        self.catalog = SqliteCatalogStore(db_path)
        self.synonyms = SqliteSynonymStore(self.catalog.connection_pool)
        self.synonyms.upsert_synonym(SynonymEntry('sofa', 'settee', weight=0.8))
        self.analytics = AnalyticsStorage(db_path)
        self.index = Mock()
        self.discovery = SynonymAutoDiscovery(self.analytics, self.synonyms, synonym_index=self.index)

    def tearDown(self):
        self.catalog.close()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def seed_behaviour(self):
        for _ in range(4):
            self.analytics.upsert_aggregate('solfa', 0)
        for _ in range(2):
            self.analytics.upsert_aggregate('sofa', 6)

        start = datetime.now() - timedelta(hours=2)
        for i in range(10):
            self.analytics.record_search(record('couch', 0, start, f"s{i}"))
            self.analytics.record_search(record('sofa', 6, start + timedelta(seconds=20), f"s{i}"))

    def test_analyze_collects_all_patterns(self):
        self.seed_behaviour()
        suggestions = self.discovery.analyze()

        by_type = {s.type: s for s in suggestions}
        self.assertEqual(
            [s.type for s in suggestions],
            [SuggestionType.ZERO_RESULT, SuggestionType.ZERO_RESULT,
             SuggestionType.SESSION_PATTERN, SuggestionType.FUZZY_MATCH]
        )

        zero = [s for s in suggestions if s.type == SuggestionType.ZERO_RESULT]
        self.assertEqual({s.term for s in zero}, {'solfa', 'couch'})
        solfa = next(s for s in zero if s.term == 'solfa')
        self.assertEqual(solfa.suggestion, 'sofa')
        self.assertEqual(solfa.searches, 4)

        session = by_type[SuggestionType.SESSION_PATTERN]
        self.assertEqual((session.term, session.related_term), ('couch', 'sofa'))
        self.assertEqual(session.confidence, 1.0)

        fuzzy = by_type[SuggestionType.FUZZY_MATCH]
        self.assertEqual(fuzzy.term, 'solfa')
        self.assertEqual(fuzzy.matches[0].term, 'sofa')

    def test_auto_create_commits_confident_suggestions(self):
        self.seed_behaviour()
        result = self.discovery.auto_create(self.discovery.analyze())

        self.assertEqual(result, {'created': 2, 'skipped': 0})
        active = {(e.canonical, e.synonym): e for e in self.synonyms.list_active_synonyms()}
        self.assertEqual(active[('sofa', 'couch')].weight, 1.0)
        self.assertEqual(active[('sofa', 'solfa')].weight, 0.8)
        self.assertEqual(active[('sofa', 'couch')].source, 'analytics')
        self.index.invalidate.assert_called_once()

    def test_second_run_skips_existing(self):
        self.seed_behaviour()
        self.discovery.auto_create(self.discovery.analyze())
        self.index.reset_mock()

        result = self.discovery.auto_create(self.discovery.analyze())
        self.assertEqual(result, {'created': 0, 'skipped': 2})
        self.index.invalidate.assert_not_called()

    def test_weak_session_patterns_ignored(self):
        start = datetime.now() - timedelta(hours=2)
        for i in range(3):
            self.analytics.record_search(record('lamp', 4, start, f"s{i}"))
            self.analytics.record_search(record('light', 4, start + timedelta(seconds=20), f"s{i}"))
        self.assertEqual(self.discovery.analyze(), [])

    def test_empty_analytics(self):
        self.assertEqual(self.discovery.analyze(), [])
        self.assertEqual(self.discovery.auto_create([]), {'created': 0, 'skipped': 0})


class TestAutoCreate(unittest.TestCase):

    def setUp(self):
        self.store = Mock()
        self.store.insert_if_absent.return_value = 11
        self.discovery = SynonymAutoDiscovery(Mock(), self.store)

    def test_fuzzy_below_threshold_is_skipped(self):
        suggestion = SynonymSuggestion(SuggestionType.FUZZY_MATCH, 'bookcsae', searches=5,
                                       matches=[FuzzyMatch('bookcase', 2, 0.75)])
        self.assertEqual(self.discovery.auto_create([suggestion], min_confidence=0.8),
                         {'created': 0, 'skipped': 1})
        self.store.insert_if_absent.assert_not_called()

    def test_session_below_threshold_is_ignored(self):
        suggestion = SynonymSuggestion(SuggestionType.SESSION_PATTERN, 'couch',
                                       related_term='sofa', confidence=0.6, occurrences=6)
        self.assertEqual(self.discovery.auto_create([suggestion]), {'created': 0, 'skipped': 0})

    def test_zero_result_never_committed(self):
        suggestion = SynonymSuggestion(SuggestionType.ZERO_RESULT, 'solfa', searches=4, suggestion='sofa')
        self.assertEqual(self.discovery.auto_create([suggestion]), {'created': 0, 'skipped': 0})

    def test_entry_built_from_session_pattern(self):
        suggestion = SynonymSuggestion(SuggestionType.SESSION_PATTERN, 'couch',
                                       related_term='sofa', confidence=0.876, occurrences=9)
        self.assertEqual(self.discovery.auto_create([suggestion]), {'created': 1, 'skipped': 0})
        entry = self.store.insert_if_absent.call_args[0][0]
        self.assertEqual((entry.canonical, entry.synonym, entry.weight, entry.source),
                         ('sofa', 'couch', 0.88, 'analytics'))

    def test_store_failure_counts_as_skipped(self):
        self.store.insert_if_absent.side_effect = RuntimeError("database is locked")
        suggestion = SynonymSuggestion(SuggestionType.SESSION_PATTERN, 'couch',
                                       related_term='sofa', confidence=0.9, occurrences=9)
        self.assertEqual(self.discovery.auto_create([suggestion]), {'created': 0, 'skipped': 1})

    def test_vocabulary_failure_still_analyzes(self):
        storage = Mock()
        storage.get_zero_result_patterns.return_value = [Mock(term='solfa', search_count=3)]
        storage.get_session_patterns.return_value = []
        storage.get_successful_vocabulary.return_value = []
        self.store.vocabulary.side_effect = RuntimeError("no such table: synonyms")

        suggestions = SynonymAutoDiscovery(storage, self.store).analyze()
        self.assertEqual(len(suggestions), 1)
        self.assertIsNone(suggestions[0].suggestion)


if __name__ == '__main__':
    unittest.main()
