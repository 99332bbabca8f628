"""Unit tests for name similarity scoring and identifier normalization."""

import unittest

from app.deduplication.normalization import is_masked, normalize_email, normalize_name, normalize_tax_id
from app.deduplication.similarity import name_similarity


class NameSimilarityTests(unittest.TestCase):
    def test_identical_strings_are_fully_similar(self) -> None:
        for value in ("", "a", "Canalizações Ferreira", "  spaced  ", "12345"):
            with self.subTest(value=value):
                self.assertEqual(name_similarity(value, value), 100)

    def test_similarity_is_symmetric(self) -> None:
        pairs = [
            ("kitten", "sitting"),
            ("abc", ""),
            ("Joao Silva", "Joana Silva"),
            ("abcdefgh", "abcdefgX"),
            ("Eletro Sousa", "Sousa Electricidade Lda"),
        ]
        for left, right in pairs:
            with self.subTest(left=left, right=right):
                self.assertEqual(name_similarity(left, right), name_similarity(right, left))

    def test_empty_string_edge_cases(self) -> None:
        self.assertEqual(name_similarity("", ""), 100)
        self.assertEqual(name_similarity("abc", ""), 0)
        self.assertEqual(name_similarity("   ", ""), 100)

    def test_case_and_surrounding_whitespace_are_ignored(self) -> None:
        self.assertEqual(name_similarity("  ABC ", "abc"), 100)

    def test_levenshtein_ratio_is_rounded_to_integer_percent(self) -> None:
        # distance 3 over length 7
        self.assertEqual(name_similarity("kitten", "sitting"), 57)
        # distance 1 over length 8 is exactly 87.5 and rounds up
        self.assertEqual(name_similarity("abcdefgh", "abcdefgX"), 88)
        self.assertEqual(name_similarity("abcdefghij", "abcdefghiX"), 90)

    def test_score_stays_within_bounds(self) -> None:
        self.assertEqual(name_similarity("abc", "xyz"), 0)
        self.assertEqual(name_similarity("a", "ab"), 50)


class NormalizationTests(unittest.TestCase):
    def test_normalize_name_strips_accents_case_and_whitespace(self) -> None:
        self.assertEqual(normalize_name("  JOÃO Silva "), "joao silva")
        self.assertEqual(normalize_name("Canalizações Conceição"), "canalizacoes conceicao")
        self.assertEqual(normalize_name(None), "")

    def test_is_masked_requires_only_mask_characters(self) -> None:
        self.assertTrue(is_masked("*****"))
        self.assertTrue(is_masked("  ***  "))
        self.assertTrue(is_masked("*"))
        self.assertFalse(is_masked(""))
        self.assertFalse(is_masked("   "))
        self.assertFalse(is_masked(None))
        self.assertFalse(is_masked("a***"))
        self.assertFalse(is_masked("* *"))

    def test_is_masked_honours_custom_mask_character(self) -> None:
        self.assertTrue(is_masked("####", mask_character="#"))
        self.assertFalse(is_masked("****", mask_character="#"))

    def test_email_and_tax_id_keys(self) -> None:
        self.assertEqual(normalize_email(" X@Y.com "), "x@y.com")
        self.assertIsNone(normalize_email("*****"))
        self.assertIsNone(normalize_email("   "))
        self.assertIsNone(normalize_email(None))
        self.assertEqual(normalize_tax_id(" 123456789 "), "123456789")
        self.assertIsNone(normalize_tax_id("*********"))
        self.assertIsNone(normalize_tax_id(None))


if __name__ == "__main__":
    unittest.main()
