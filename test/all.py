import unittest

from . import test_geo, test_patterns, test_direction
from . import test_topology, test_rows, test_columns, test_engine, test_gtfs, test_utils


modules = [ test_geo, test_patterns, test_direction,
	test_topology, test_rows, test_columns, test_engine, test_gtfs, test_utils ]

def load_tests(loader=None, tests=None, pattern=None):
	if not loader: loader = unittest.defaultTestLoader
	if not tests: tests = unittest.TestSuite()
	for mod in modules: tests.addTests(loader.loadTestsFromModule(mod))
	return tests

def iter_cases(suite):
	for test in suite:
		if isinstance(test, unittest.TestSuite): yield from iter_cases(test)
		else: yield test

class SpecificTestCasePicker:
	def __init__(self): self.suite = load_tests()
	def __getattr__(self, k):
		for test in iter_cases(self.suite):
			if test._testMethodName == k: return lambda: test
		raise AttributeError('No such test case: {}'.format(k))
case = SpecificTestCasePicker()
