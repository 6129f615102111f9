import os
import sys
import glob
import logging
import tempfile
import unittest

def leftover_scratch_dirs():
    """Scratch directories in the system temp dir, to spot tests that forget teardown."""
    return set(glob.glob(os.path.join(tempfile.gettempdir(), 'scratch*')))

def run_tests(names=None):
    project_root = os.path.abspath(os.path.dirname(__file__))
    sys.path.insert(0, project_root)
    tests_dir = os.path.join(project_root, 'tests')

    # SCRATCHDIR_LOG_LEVEL=DEBUG shows why temp candidates were skipped
    level = os.environ.get('SCRATCHDIR_LOG_LEVEL', 'ERROR').upper()
    logging.basicConfig(level=getattr(logging, level, logging.ERROR))

    # run-tests.py tempManager recursiveDelete -> only those modules
    patterns = [f'test_{name}.py' for name in names] if names else ['test_*.py']

    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    for pattern in patterns:
        suite.addTests(loader.discover(start_dir=tests_dir, pattern=pattern))

    num_tests = suite.countTestCases()
    print("Discovered tests count:", num_tests)
    if num_tests == 0:
        print(f"No tests found for {', '.join(patterns)} in {tests_dir}")
        sys.exit(1)

    before = leftover_scratch_dirs()
    result = unittest.TextTestRunner(verbosity=2).run(suite)

    leaked = leftover_scratch_dirs() - before
    if leaked:
        print("Scratch directories left behind:", ", ".join(sorted(leaked)))

    sys.exit(not result.wasSuccessful())

if __name__ == '__main__':
    run_tests(sys.argv[1:])
