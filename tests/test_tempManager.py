import os
import sys
import shutil
import tempfile
import unittest
import logging
from unittest.mock import patch

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from fsutils import helpers
from fsutils.helpers import UNIQUE_SUFFIX_LENGTH
from scratchdir.temp_manager import TempDirManager

logging.basicConfig(level=logging.ERROR)

UNSET_VAR = 'SCRATCHDIR_TEST_UNSET'


class TestTempDirManager(unittest.TestCase):
    def setUp(self):
        self.base = tempfile.mkdtemp()
        self.other_base = tempfile.mkdtemp()
        self.missing = os.path.join(self.base, 'does-not-exist')
        env = patch.dict(os.environ)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop(UNSET_VAR, None)

    def tearDown(self):
        shutil.rmtree(self.base, ignore_errors=True)
        shutil.rmtree(self.other_base, ignore_errors=True)

    def _parent_of(self, temp_dir):
        return os.path.dirname(temp_dir.rstrip(os.sep))

    def test_created_lazily(self):
        manager = TempDirManager({'candidate_dirs': [self.base]})
        self.assertFalse(manager.is_active)
        self.assertEqual(os.listdir(self.base), [])

        temp_dir = manager.get_temp_dir()
        self.assertTrue(manager.is_active)
        self.assertTrue(temp_dir.endswith(os.sep))
        self.assertTrue(os.path.isabs(temp_dir))
        self.assertTrue(os.path.isdir(temp_dir))
        self.assertTrue(os.path.basename(temp_dir.rstrip(os.sep)).startswith('scratch'))
        manager.delete_temp_dir()

    def test_path_is_cached(self):
        manager = TempDirManager({'candidate_dirs': [self.base]})
        first = manager.get_temp_dir()
        self.assertEqual(manager.get_temp_dir(), first)
        self.assertEqual(len(os.listdir(self.base)), 1)
        manager.delete_temp_dir()

    def test_fallback_order(self):
        manager = TempDirManager({'candidate_dirs': ['$' + UNSET_VAR, self.missing, self.base, self.other_base]})
        temp_dir = manager.get_temp_dir()

        self.assertEqual(self._parent_of(temp_dir), os.path.realpath(self.base))
        self.assertEqual(os.listdir(self.other_base), [])
        manager.delete_temp_dir()

    def test_expanded_variable_candidate(self):
        os.environ['SCRATCHDIR_TEST_BASE'] = self.other_base
        manager = TempDirManager({'candidate_dirs': ['$SCRATCHDIR_TEST_BASE', self.base]})
        temp_dir = manager.get_temp_dir()
        self.assertEqual(self._parent_of(temp_dir), os.path.realpath(self.other_base))
        manager.delete_temp_dir()

    def test_all_candidates_fail(self):
        manager = TempDirManager({'candidate_dirs': ['$' + UNSET_VAR, self.missing, '']})
        self.assertIsNone(manager.get_temp_dir())
        self.assertFalse(manager.is_active)

    def test_creation_failure_moves_on(self):
        real_make = helpers.make_unique_directory

        def make_unique_directory(template):
            if os.path.dirname(template) == self.base:
                return None
            return real_make(template)

        with patch('scratchdir.temp_manager.make_unique_directory', side_effect=make_unique_directory):
            manager = TempDirManager({'candidate_dirs': [self.base, self.other_base]})
            temp_dir = manager.get_temp_dir()

        self.assertEqual(self._parent_of(temp_dir), os.path.realpath(self.other_base))
        self.assertEqual(os.listdir(self.base), [])
        manager.delete_temp_dir()

    def test_resolution_failure_removes_created_directory(self):
        with patch('scratchdir.temp_manager.resolve_full_path',
                   side_effect=[None, os.path.realpath(self.other_base) + os.sep + 'resolved']):
            manager = TempDirManager({'candidate_dirs': [self.base, self.other_base]})
            temp_dir = manager.get_temp_dir()

        self.assertEqual(os.listdir(self.base), [])
        self.assertEqual(temp_dir, os.path.realpath(self.other_base) + os.sep + 'resolved' + os.sep)

    def test_path_length_reserve(self):
        manager = TempDirManager({'candidate_dirs': [self.base], 'max_path_length': len(self.base) + 10})
        self.assertIsNone(manager.get_temp_dir())
        self.assertEqual(os.listdir(self.base), [])

    def test_path_length_reserve_boundary(self):
        # sep + 'scratch' + random suffix + sep + 22 reserved for names
        reserved = len(os.sep) + len('scratch') + UNIQUE_SUFFIX_LENGTH + len(os.sep) + 22

        too_short = TempDirManager({'candidate_dirs': [self.base], 'max_path_length': len(self.base) + reserved - 1})
        self.assertIsNone(too_short.get_temp_dir())

        just_enough = TempDirManager({'candidate_dirs': [self.base], 'max_path_length': len(self.base) + reserved})
        temp_dir = just_enough.get_temp_dir()
        self.assertIsNotNone(temp_dir)
        just_enough.delete_temp_dir()

    def test_partial_teardown_logs_unlisted(self):
        manager = TempDirManager({'candidate_dirs': [self.base]})
        manager.get_temp_dir()

        with patch('scratchdir.recursive_delete.list_matching', return_value=None):
            with self.assertLogs('scratchdir.temp_manager', level='WARNING') as logs:
                result = manager.delete_temp_dir()

        self.assertFalse(result)
        self.assertIn('1 directories could not be listed', logs.output[0])
        self.assertIsNone(manager.temp_dir)

    def test_delete_temp_dir(self):
        manager = TempDirManager({'candidate_dirs': [self.base]})
        temp_dir = manager.get_temp_dir()
        os.mkdir(os.path.join(temp_dir, 'sub'))
        with open(os.path.join(temp_dir, 'sub', '0'), 'w', encoding='utf-8') as f:
            f.write('data')

        result = manager.delete_temp_dir()

        self.assertTrue(result)
        self.assertFalse(os.path.exists(temp_dir))
        self.assertIsNone(manager.temp_dir)
        self.assertEqual(os.listdir(self.base), [])

    def test_delete_twice(self):
        manager = TempDirManager({'candidate_dirs': [self.base]})
        manager.get_temp_dir()
        self.assertTrue(manager.delete_temp_dir())
        self.assertIsNone(manager.temp_dir)
        self.assertIsNone(manager.delete_temp_dir())
        self.assertIsNone(manager.temp_dir)

    def test_delete_before_use(self):
        manager = TempDirManager({'candidate_dirs': [self.base]})
        self.assertIsNone(manager.delete_temp_dir())

    def test_context_manager(self):
        with TempDirManager({'candidate_dirs': [self.base]}) as manager:
            temp_dir = manager.get_temp_dir()
            self.assertTrue(os.path.isdir(temp_dir))
        self.assertFalse(os.path.exists(temp_dir))


if __name__ == '__main__':
    unittest.main()
