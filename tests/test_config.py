"""Tests for configuration management module."""

import json
import os
import shutil
import tempfile
import unittest

from config.config_storage import ConfigStorage
from config.config_validator import ConfigValidator
from config.engine_config import CONFIG_VERSION, EngineConfig, apply_env_overrides
from fixtures.test_configs import INVALID_CONFIGS, VALID_CONFIGS


class TestEngineConfig(unittest.TestCase):
    """Test the configuration model."""

    def test_defaults(self):
        config = EngineConfig()
        self.assertEqual(config.locale, 'en')
        self.assertEqual(config.max_terms, 20)
        self.assertEqual(config.default_per_page, 50)
        self.assertEqual(config.max_per_page, 100)
        self.assertEqual(config.synonym_cache_ttl_seconds, 300)
        self.assertTrue(config.search_logging_enabled)

    def test_dict_round_trip(self):
        config = EngineConfig(locale='fr', max_terms=30, auto_discovery_min_confidence=0.8)
        data = config.to_dict()

        self.assertEqual(data['version'], CONFIG_VERSION)
        self.assertEqual(EngineConfig.from_dict(data), config)

    def test_from_dict_ignores_unknown_keys(self):
        config = EngineConfig.from_dict({'locale': 'fr', 'dataset_name': 'legacy'})
        self.assertEqual(config.locale, 'fr')

    def test_search_config(self):
        search_config = EngineConfig(max_terms=12, query_timeout_ms=750,
                                     search_logging_enabled=False).search_config()
        self.assertEqual(search_config.max_terms, 12)
        self.assertEqual(search_config.query_timeout_ms, 750)
        self.assertFalse(search_config.log_search)


class TestEnvOverrides(unittest.TestCase):

    def test_overrides_are_typed(self):
        environ = {
            'FURNITURE_SEARCH_LOCALE': 'fr',
            'FURNITURE_SEARCH_MAX_TERMS': '8',
            'FURNITURE_SEARCH_ANALYTICS_FLUSH_INTERVAL': '2.5',
            'FURNITURE_SEARCH_SEARCH_LOGGING_ENABLED': 'off',
        }
        config = apply_env_overrides(EngineConfig(), environ)

        self.assertEqual(config.locale, 'fr')
        self.assertEqual(config.max_terms, 8)
        self.assertEqual(config.analytics_flush_interval, 2.5)
        self.assertFalse(config.search_logging_enabled)

    def test_empty_values_ignored(self):
        config = apply_env_overrides(EngineConfig(locale='fr'), {'FURNITURE_SEARCH_LOCALE': ''})
        self.assertEqual(config.locale, 'fr')

    def test_invalid_values_raise(self):
        with self.assertRaises(ValueError) as cm:
            apply_env_overrides(EngineConfig(), {'FURNITURE_SEARCH_MAX_TERMS': 'many'})
        self.assertIn('FURNITURE_SEARCH_MAX_TERMS', str(cm.exception))

        with self.assertRaises(ValueError):
            apply_env_overrides(EngineConfig(), {'FURNITURE_SEARCH_SEARCH_LOGGING_ENABLED': 'maybe'})


class TestConfigStorage(unittest.TestCase):
    """Test configuration storage."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.storage = ConfigStorage(self.test_dir)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_missing_file_gives_defaults(self):
        self.assertEqual(self.storage.load_config(), EngineConfig())

    def test_save_and_load_config(self):
        config = EngineConfig(locale='fr', db_path='catalog/fr.db')
        self.storage.save_config(config)

        self.assertTrue(self.storage.get_config_path().exists())
        self.assertEqual(self.storage.load_config(), config)

    def test_save_keeps_previous_as_backup(self):
        self.storage.save_config(EngineConfig(max_terms=10))
        self.storage.save_config(EngineConfig(max_terms=11))

        backup = self.storage.get_config_path().with_suffix('.backup')
        with open(backup) as f:
            self.assertEqual(json.load(f)['max_terms'], 10)
        self.assertFalse(self.storage.get_config_path().with_suffix('.tmp').exists())

    def test_corrupt_file_gives_defaults(self):
        os.makedirs(self.storage.config_dir)
        with open(self.storage.config_file, 'w') as f:
            f.write('{not json')
        self.assertEqual(self.storage.load_config(), EngineConfig())

    def test_effective_config_applies_environment(self):
        self.storage.save_config(EngineConfig(locale='en', max_terms=10))
        config = self.storage.load_effective_config({'FURNITURE_SEARCH_LOCALE': 'fr'})
        self.assertEqual((config.locale, config.max_terms), ('fr', 10))

    def test_backup_operations(self):
        self.assertIsNone(self.storage.backup_config())
        self.assertEqual(self.storage.list_backups(), [])

        self.storage.save_config(EngineConfig())
        backup_path = self.storage.backup_config()

        self.assertTrue(backup_path.exists())
        backups = self.storage.list_backups()
        self.assertEqual(len(backups), 1)
        self.assertEqual(backups[0]['path'], str(backup_path))


class TestConfigValidator(unittest.TestCase):
    """Test configuration validation."""

    def setUp(self):
        self.validator = ConfigValidator()

    def test_valid_configs(self):
        for name, overrides in VALID_CONFIGS.items():
            with self.subTest(config=name):
                is_valid, errors = self.validator.validate_config(EngineConfig.from_dict(overrides))
                self.assertTrue(is_valid, errors)
                self.assertEqual(errors, [])

    def test_invalid_configs(self):
        for name, (overrides, fragment) in INVALID_CONFIGS.items():
            with self.subTest(config=name):
                is_valid, errors = self.validator.validate_config(EngineConfig.from_dict(overrides))
                self.assertFalse(is_valid)
                self.assertTrue(any(fragment in e for e in errors), errors)

    def test_errors_accumulate(self):
        is_valid, errors = self.validator.validate_config(
            EngineConfig(locale='de', max_terms=0, query_timeout_ms=-1)
        )
        self.assertFalse(is_valid)
        self.assertEqual(len(errors), 3)


if __name__ == '__main__':
    unittest.main()
