"""Tests for edit distance implementations.

Checks the metric properties the clustering relies on and that the edlib
backend agrees with the dynamic-programming reference.
"""

import random
import unittest

from aptacluster.distance import (
    edit_distance,
    levenshtein_distance,
    get_distance_function,
)


def generate_dna_sequence(seed_str: str, length: int) -> str:
    """Generate a deterministic DNA sequence from a seed string."""
    rng = random.Random(seed_str)
    return ''.join(rng.choice('ACGT') for _ in range(length))


def mutate(seq: str, seed_str: str, count: int) -> str:
    """Apply random substitutions, insertions and deletions."""
    rng = random.Random(seed_str)
    seq = list(seq)
    for _ in range(count):
        op = rng.choice(['sub', 'ins', 'del'])
        pos = rng.randrange(len(seq)) if seq else 0
        if op == 'sub' and seq:
            seq[pos] = rng.choice('ACGT')
        elif op == 'ins':
            seq.insert(pos, rng.choice('ACGT'))
        elif seq:
            del seq[pos]
    return ''.join(seq)


class TestEditDistance(unittest.TestCase):

    def test_known_distances(self):
        for func in (edit_distance, levenshtein_distance):
            self.assertEqual(func("kitten", "sitting"), 3)
            self.assertEqual(func("AAAA", "AAAT"), 1)
            self.assertEqual(func("AAAA", "TTTT"), 4)
            self.assertEqual(func("ACGT", "CGT"), 1)
            self.assertEqual(func("GATTACA", "GCATGCU"), 4)

    def test_identical_is_zero(self):
        seq = generate_dna_sequence("identical", 80)
        self.assertEqual(edit_distance(seq, seq), 0)
        self.assertEqual(levenshtein_distance(seq, seq), 0)

    def test_empty_sequence_distance_is_length(self):
        for func in (edit_distance, levenshtein_distance):
            self.assertEqual(func("", "ACGTAC"), 6)
            self.assertEqual(func("ACGTAC", ""), 6)
            self.assertEqual(func("", ""), 0)

    def test_symmetry(self):
        for i in range(20):
            a = generate_dna_sequence(f"sym-a{i}", 40)
            b = mutate(a, f"sym-b{i}", 6)
            self.assertEqual(edit_distance(a, b), edit_distance(b, a))
            self.assertEqual(levenshtein_distance(a, b), levenshtein_distance(b, a))

    def test_nonzero_for_different_sequences(self):
        self.assertGreater(edit_distance("ACGT", "ACGA"), 0)
        self.assertGreater(levenshtein_distance("ACGT", "ACG"), 0)

    def test_triangle_inequality(self):
        for i in range(15):
            a = generate_dna_sequence(f"tri{i}", 30)
            b = mutate(a, f"tri-b{i}", 4)
            c = mutate(b, f"tri-c{i}", 4)
            self.assertLessEqual(edit_distance(a, c), edit_distance(a, b) + edit_distance(b, c))

    def test_edlib_matches_reference(self):
        """edlib and the numpy DP must agree exactly, including length differences."""
        for i in range(40):
            a = generate_dna_sequence(f"ref-a{i}", 10 + i)
            b = mutate(a, f"ref-b{i}", i % 9)
            self.assertEqual(edit_distance(a, b), levenshtein_distance(a, b),
                             f"Mismatch for {a} vs {b}")


class TestBoundedDistance(unittest.TestCase):

    def test_within_bound_is_exact(self):
        self.assertEqual(edit_distance("AAAA", "AAAT", max_distance=1), 1)
        self.assertEqual(levenshtein_distance("AAAA", "AAAT", max_distance=1), 1)
        self.assertEqual(edit_distance("AAAA", "AATT", max_distance=2), 2)

    def test_above_bound_reports_bound_plus_one(self):
        self.assertEqual(edit_distance("AAAA", "TTTT", max_distance=1), 2)
        self.assertEqual(levenshtein_distance("AAAA", "TTTT", max_distance=1), 2)
        self.assertEqual(edit_distance("A", "AAAAAA", max_distance=0), 1)
        self.assertEqual(levenshtein_distance("", "AAA", max_distance=2), 3)

    def test_zero_bound(self):
        self.assertEqual(edit_distance("ACGT", "ACGT", max_distance=0), 0)
        self.assertEqual(edit_distance("ACGT", "ACGA", max_distance=0), 1)


class TestGetDistanceFunction(unittest.TestCase):

    def test_unbounded_returns_implementation(self):
        self.assertIs(get_distance_function("edlib"), edit_distance)
        self.assertIs(get_distance_function("dp"), levenshtein_distance)

    def test_bounded_function_takes_two_arguments(self):
        func = get_distance_function("dp", max_distance=2)
        self.assertEqual(func("AAAAAA", "TTTTTT"), 3)
        self.assertEqual(func("AAAAAA", "AAAAAT"), 1)

    def test_unknown_method(self):
        with self.assertRaises(ValueError):
            get_distance_function("hamming")


if __name__ == '__main__':
    unittest.main()
