### Pattern extractor: per-trip stop sequences and their similarity

import itertools as it, operator as op, functools as ft
from collections import Counter

from . import utils as u, types as t


def stop_sequence(stop_times):
	'Ordered tuple of stop ids from StopTimes, empty tuple if there are none.'
	return tuple(st.stop_id for st in sorted(stop_times or (), key=op.attrgetter('seq')))

def duplicate_seqs(stop_times):
	counts = Counter(st.seq for st in stop_times or ())
	return sorted(seq for seq, n in counts.items() if n > 1)

def is_circular(seq):
	return len(seq) >= 2 and seq[0] == seq[-1]

def lcs_length(seq_a, seq_b):
	'Longest common subsequence length, O(len(a) * len(b)) time and O(len(b)) memory.'
	if not (seq_a and seq_b): return 0
	row = [0] * (len(seq_b) + 1)
	for a in seq_a:
		diag = 0
		for n, b in enumerate(seq_b, 1):
			diag, row[n] = row[n], (diag + 1) if a == b else max(row[n], row[n-1])
	return row[-1]

def sequence_score(candidate, reference):
	'''Fraction of candidate stops found in reference in the same relative order, [0, 1].
		Candidate stops absent from reference entirely (e.g. branch-specific ones)
			are left out of both sides, favoring trunk-match recall.'''
	ref_set = set(reference)
	candidate = list(stop_id for stop_id in candidate if stop_id in ref_set)
	if not candidate: return 0.0
	return lcs_length(candidate, reference) / len(candidate)

def pattern_counts(sequences):
	'''Counter of distinct non-empty sequences.
		Iteration/most_common() order for equal counts is first-seen order.'''
	return Counter(seq for seq in sequences if seq)


class StopSequences:
	'''Memoized stop sequences for trips, built on first access.
		Must be invalidated (or re-created) when feed is reloaded.'''

	def __init__(self, stop_times_by_trip, diagnostics=None):
		self.stop_times_by_trip = stop_times_by_trip
		self.diagnostics = diagnostics if diagnostics is not None else t.public.Diagnostics()
		self.set_idx = dict()

	def get(self, trip_id, route_id=None):
		try: return self.set_idx[trip_id]
		except KeyError: pass
		stop_times = self.stop_times_by_trip.get(trip_id)
		dups = duplicate_seqs(stop_times)
		if dups:
			self.diagnostics.add( route_id, 'duplicate-sequence',
				'Trip {!r} has non-unique stop_sequence value(s): {}', trip_id, dups )
		seq = self.set_idx[trip_id] = stop_sequence(stop_times)
		return seq

	def for_trip(self, trip): return self.get(trip.id, trip.route_id)

	def invalidate(self): self.set_idx.clear()

	def __contains__(self, trip_id): return trip_id in self.set_idx
	def __len__(self): return len(self.set_idx)
