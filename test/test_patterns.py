import itertools as it, operator as op, functools as ft
import unittest

from . import _common as c

pt = c.topo.patterns


class SequenceTests(unittest.TestCase):

	def test_stop_sequence(self):
		sts = c.parse_trip_stops('t1', 'A B C', seqs=[30, 10, 20])
		self.assertEqual(pt.stop_sequence(sts), ('B', 'C', 'A'))
		self.assertEqual(pt.stop_sequence([]), ())
		self.assertEqual(pt.stop_sequence(None), ())

	def test_circular(self):
		self.assertTrue(pt.is_circular(('A', 'B', 'A')))
		self.assertTrue(pt.is_circular(('A', 'A')))
		self.assertFalse(pt.is_circular(('A', 'B')))
		self.assertFalse(pt.is_circular(('A',)))
		self.assertFalse(pt.is_circular(()))

	def test_lcs(self):
		self.assertEqual(pt.lcs_length('ABCBDAB', 'BDCABA'), 4)
		self.assertEqual(pt.lcs_length('ABC', ''), 0)
		self.assertEqual(pt.lcs_length('ABC', 'ABC'), 3)

	def test_pattern_counts(self):
		counts = pt.pattern_counts([('B', 'A'), ('A', 'B'), (), ('A', 'B'), ('B', 'A')])
		self.assertEqual(counts.most_common(), [(('B', 'A'), 2), (('A', 'B'), 2)])


class ScoreTests(unittest.TestCase):

	ref = tuple('ABCD')

	def test_reflexive(self):
		for seq in ['A', 'AB', 'ABCD', 'XYZXY', 'DCBAD']:
			self.assertEqual(pt.sequence_score(tuple(seq), tuple(seq)), 1.0)

	def test_branch_stops_ignored(self):
		self.assertEqual(pt.sequence_score(tuple('ABXD'), self.ref), 1.0)
		self.assertEqual(pt.sequence_score(tuple('ABXCDYZ'), self.ref), 1.0)

	def test_reversed(self):
		self.assertAlmostEqual(pt.sequence_score(tuple('ABD'), tuple(reversed(self.ref))), 1/3)
		self.assertEqual(pt.sequence_score(tuple('DCBA'), self.ref), 0.25)

	def test_out_of_order(self):
		self.assertAlmostEqual(pt.sequence_score(tuple('CAB'), self.ref), 2/3)

	def test_no_overlap(self):
		self.assertEqual(pt.sequence_score(tuple('XYZ'), self.ref), 0.0)
		self.assertEqual(pt.sequence_score((), self.ref), 0.0)
		self.assertEqual(pt.sequence_score(self.ref, ()), 0.0)

	def test_range(self):
		for cand in it.permutations('ABCX', 3):
			score = pt.sequence_score(cand, self.ref)
			self.assertTrue(0 <= score <= 1, (cand, score))


class StopSequencesTests(unittest.TestCase):

	def test_memo_and_duplicates(self):
		stop_times = dict(
			t1=c.parse_trip_stops('t1', 'A B C', seqs=[1, 2, 2]),
			t2=c.parse_trip_stops('t2', 'A B C') )
		seqs = pt.StopSequences(stop_times)
		self.assertEqual(seqs.get('t1', 'r1'), ('A', 'B', 'C'))
		self.assertEqual(seqs.get('t2', 'r1'), ('A', 'B', 'C'))
		self.assertEqual(seqs.get('t3', 'r1'), ())
		self.assertIn('t1', seqs)
		self.assertEqual(len(seqs), 3)

		diags = seqs.diagnostics.for_route('r1')
		self.assertEqual(len(diags), 1)
		self.assertIs(diags[0].kind, c.topo.t.public.DiagnosticKind.duplicate_sequence)
		self.assertIn("'t1'", diags[0].message)

		seqs.get('t1', 'r1') # memoized, not reported again
		self.assertEqual(len(seqs.diagnostics), 1)
		seqs.invalidate()
		self.assertNotIn('t1', seqs)
		seqs.get('t1', 'r1')
		self.assertEqual(len(seqs.diagnostics), 2)
