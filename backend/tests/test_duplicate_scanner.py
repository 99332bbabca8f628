"""Unit tests for multi-pass duplicate detection."""

from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from app.deduplication.scanner import DuplicateScanner
from app.schemas.provider import ProviderRead

_BASE_TIME = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
_DISTINCT_NAMES = (
    "Alpha Plumbing",
    "Northwind Electric",
    "Quercus Gardens",
    "Zenith Roofing",
    "Mar Azul Limpezas",
    "Bravo Transportes",
    "Kappa Pinturas",
    "Olival Serralharia",
)


def _provider(provider_id: int, **overrides) -> ProviderRead:
    payload = {
        "id": provider_id,
        "name": _DISTINCT_NAMES[provider_id % len(_DISTINCT_NAMES)],
        "entity_type": "individual",
        "email": f"provider{provider_id}@example.com",
        "tax_id": None,
        "status": "new",
        "application_count": 1,
        "created_at": _BASE_TIME + timedelta(days=provider_id),
    }
    payload.update(overrides)
    return ProviderRead(**payload)


class DuplicateScannerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.scanner = DuplicateScanner()

    def test_email_variants_form_one_group(self) -> None:
        providers = [
            _provider(1, email="x@y.com"),
            _provider(2, email="X@Y.com"),
            _provider(3, email=" x@y.com "),
            _provider(4),
        ]

        result = self.scanner.scan(providers)

        self.assertEqual(len(result.groups), 1)
        group = result.groups[0]
        self.assertEqual(group.match_type, "email")
        self.assertEqual(group.match_value, "x@y.com")
        self.assertIsNone(group.similarity)
        self.assertEqual([provider.id for provider in group.providers], [1, 2, 3])
        self.assertEqual(result.total_duplicates, 2)
        self.assertEqual(result.scanned_count, 4)

    def test_tax_id_pass_groups_trimmed_values(self) -> None:
        providers = [
            _provider(1, tax_id=" 501234567 "),
            _provider(2, tax_id="501234567"),
            _provider(3, tax_id="509876543"),
        ]

        result = self.scanner.scan(providers)

        self.assertEqual(len(result.groups), 1)
        self.assertEqual(result.groups[0].match_type, "tax_id")
        self.assertEqual(result.groups[0].match_value, "501234567")
        self.assertTrue(result.groups[0].is_exact)

    def test_records_claimed_by_email_are_skipped_by_tax_id_pass(self) -> None:
        providers = [
            _provider(1, email="shared@example.com", tax_id="501234567"),
            _provider(2, email="shared@example.com"),
            _provider(3, tax_id="501234567"),
        ]

        result = self.scanner.scan(providers)

        self.assertEqual([group.match_type for group in result.groups], ["email"])
        self.assertEqual([provider.id for provider in result.groups[0].providers], [1, 2])
        self.assertEqual(result.total_duplicates, 1)

    def test_every_provider_lands_in_at_most_one_group(self) -> None:
        providers = [
            _provider(1, name="Joao Silva", email="a@example.com", tax_id="111"),
            _provider(2, name="Joao Silva", email="a@example.com"),
            _provider(3, name="Joao Silva", tax_id="111"),
            _provider(4, name="Joao Silva", tax_id="111"),
            _provider(5, name="João Silva"),
        ]

        result = self.scanner.scan(providers)

        seen: list[int] = []
        for group in result.groups:
            seen.extend(provider.id for provider in group.providers)
        self.assertEqual(len(seen), len(set(seen)))
        self.assertEqual([group.match_type for group in result.groups], ["email", "tax_id"])
        self.assertEqual(sorted(seen), [1, 2, 3, 4])

    def test_masked_values_are_never_grouped(self) -> None:
        providers = [
            _provider(1, name="*****", email="*****", tax_id="*********"),
            _provider(2, name="*****", email="*****", tax_id="*********"),
            _provider(3, name="  ***  ", email=" *** ", tax_id="***"),
        ]

        result = self.scanner.scan(providers)

        self.assertEqual(result.groups, [])
        self.assertEqual(result.total_duplicates, 0)
        self.assertEqual(result.scanned_count, 3)

    def test_custom_mask_character(self) -> None:
        scanner = DuplicateScanner(mask_character="#")
        providers = [
            _provider(1, email="####"),
            _provider(2, email="####"),
            _provider(3, email="****"),
            _provider(4, email="****"),
        ]

        result = scanner.scan(providers)

        self.assertEqual(len(result.groups), 1)
        self.assertEqual(result.groups[0].match_value, "****")

    def test_accented_names_group_with_full_similarity(self) -> None:
        providers = [_provider(1, name="João Silva"), _provider(2, name="Joao Silva")]

        result = self.scanner.scan(providers)

        self.assertEqual(len(result.groups), 1)
        group = result.groups[0]
        self.assertEqual(group.match_type, "name")
        self.assertEqual(group.match_value, "João Silva")
        self.assertEqual(group.similarity, 100)
        self.assertFalse(group.is_exact)

    def test_name_threshold_is_configurable(self) -> None:
        providers = [_provider(1, name="Joao Silva"), _provider(2, name="Joao Silvo")]

        self.assertEqual(len(DuplicateScanner(name_similarity_threshold=85).scan(providers).groups), 1)
        self.assertEqual(DuplicateScanner(name_similarity_threshold=95).scan(providers).groups, [])

    def test_name_matches_chain_into_one_group(self) -> None:
        # first and last are only 80% alike; the middle name links them
        providers = [
            _provider(1, name="abcdefghijklmnopqrst"),
            _provider(2, name="zwcdefghijklmnopqrxy"),
            _provider(3, name="abcdefghijklmnopqrxy"),
        ]

        result = self.scanner.scan(providers)

        self.assertEqual(len(result.groups), 1)
        group = result.groups[0]
        self.assertEqual(sorted(provider.id for provider in group.providers), [1, 2, 3])
        self.assertEqual(group.similarity, 90)
        self.assertEqual(result.total_duplicates, 2)

    def test_name_pass_can_be_disabled(self) -> None:
        providers = [_provider(1, name="Joao Silva"), _provider(2, name="Joao Silva")]

        result = self.scanner.scan(providers, include_name_pass=False)

        self.assertEqual(result.groups, [])

    def test_empty_registry(self) -> None:
        result = self.scanner.scan([])

        self.assertEqual(result.groups, [])
        self.assertEqual(result.total_duplicates, 0)
        self.assertEqual(result.scanned_count, 0)


if __name__ == "__main__":
    unittest.main()
