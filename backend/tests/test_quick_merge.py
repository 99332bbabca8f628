"""Integration-style tests for the automatic exact-duplicate merge pass."""

from __future__ import annotations

import tempfile
import unittest
from datetime import datetime, timedelta
from pathlib import Path

from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from app.deduplication.errors import MergePolicyError, StoreWriteError
from app.deduplication.scanner import DuplicateGroup
from app.models.base import Base
from app.models.history_log import HistoryLogEntry
from app.models.merge_intent import MergeIntent
from app.models.note import Note
from app.models.provider import Provider
from app.models.provider_price import ProviderPrice
from app.models.user import User
from app.services.duplicates import merge_duplicate_groups, quick_merge_exact_duplicates
from app.services.registry import RegistryStore

_BASE_TIME = datetime(2026, 4, 1, 9, 0)
_GROUP_EMAILS = ("dup@example.com", "DUP@example.com", " dup@example.com ", "Dup@Example.com", "dup@EXAMPLE.com")


class _FailingSourceStore(RegistryStore):
    """Fails the price re-point for one source provider."""

    def __init__(self, session_factory, *, failing_source_id: int) -> None:
        super().__init__(session_factory)
        self.failing_source_id = failing_source_id

    def repoint_provider_rows(self, model, *, from_provider_id: int, to_provider_id: int) -> int:
        if model is ProviderPrice and from_provider_id == self.failing_source_id:
            raise StoreWriteError(f"re-point provider_prices from provider {from_provider_id} failed")
        return super().repoint_provider_rows(
            model, from_provider_id=from_provider_id, to_provider_id=to_provider_id
        )


class QuickMergeTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self._engines = []
        self.SessionLocal = self._create_registry("registry.db")
        self.actor_id = self._add_user(self.SessionLocal)

    def tearDown(self) -> None:
        for engine in self._engines:
            engine.dispose()
        self._tmpdir.cleanup()

    def _create_registry(self, file_name: str) -> sessionmaker:
        engine = create_engine(
            f"sqlite+pysqlite:///{Path(self._tmpdir.name) / file_name}",
            future=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(engine)
        self._engines.append(engine)
        return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)

    def _add_user(self, session_factory: sessionmaker) -> int:
        with session_factory() as db:
            user = User(name="Ana Gestora", email="ana@backoffice.example")
            db.add(user)
            db.commit()
            return user.id

    def _seed(self, session_factory: sessionmaker, rows: list[dict]) -> list[int]:
        with session_factory() as db:
            providers = []
            for index, row in enumerate(rows):
                provider = Provider(
                    name=row.get("name", f"Provider {index}"),
                    email=row.get("email", f"unique{index}@example.com"),
                    tax_id=row.get("tax_id"),
                    entity_type="individual",
                    status="new",
                    services=row.get("services"),
                    application_count=1,
                    created_at=_BASE_TIME + timedelta(days=index),
                )
                db.add(provider)
                providers.append(provider)
            db.flush()
            for provider in providers:
                db.add(Note(provider_id=provider.id, content=f"Note for {provider.name}"))
                db.add(
                    ProviderPrice(
                        provider_id=provider.id,
                        service_key="cleaning.hourly",
                        price_without_vat=12.5,
                        valid_from=_BASE_TIME,
                    )
                )
            db.commit()
            return [provider.id for provider in providers]

    def _five_record_group(self) -> list[dict]:
        return [
            {"name": f"Limpezas Mar Azul {index}", "email": email, "services": [f"service-{index}"]}
            for index, email in enumerate(_GROUP_EMAILS)
        ]

    def test_five_record_group_merges_into_oldest(self) -> None:
        ids = self._seed(self.SessionLocal, self._five_record_group())
        store = RegistryStore(self.SessionLocal)

        result = quick_merge_exact_duplicates(store, actor_id=self.actor_id)

        self.assertTrue(result.success)
        self.assertEqual(result.merged_count, 4)
        self.assertEqual(result.failed_count, 0)
        with self.SessionLocal() as db:
            remaining = db.scalars(select(Provider)).all()
            self.assertEqual([provider.id for provider in remaining], [ids[0]])
            survivor = remaining[0]
            self.assertEqual(survivor.application_count, 5)
            self.assertEqual(survivor.name, "Limpezas Mar Azul 0")
            self.assertEqual(sorted(survivor.services), [f"service-{index}" for index in range(5)])
            notes = db.scalars(select(Note)).all()
            self.assertEqual({note.provider_id for note in notes}, {ids[0]})
            self.assertEqual(len(notes), 5)
            audits = db.scalars(select(HistoryLogEntry).where(HistoryLogEntry.event_type == "merge")).all()
            self.assertEqual(len(audits), 4)
            for audit in audits:
                self.assertEqual(audit.provider_id, ids[0])
                self.assertEqual(audit.created_by, self.actor_id)
                self.assertTrue(audit.description.startswith("Quick merge: merged duplicate provider (email: "))
                self.assertEqual(audit.new_value, {"match_type": "email"})
            statuses = {intent.status for intent in db.scalars(select(MergeIntent))}
            self.assertEqual(statuses, {"completed"})

    def test_one_failed_operation_does_not_stop_the_others(self) -> None:
        ids = self._seed(self.SessionLocal, self._five_record_group())
        failing_source = ids[2]
        store = _FailingSourceStore(self.SessionLocal, failing_source_id=failing_source)

        result = quick_merge_exact_duplicates(store, actor_id=self.actor_id)

        self.assertTrue(result.success)
        self.assertEqual(result.merged_count, 3)
        self.assertEqual(result.failed_count, 1)
        with self.SessionLocal() as db:
            remaining = sorted(db.scalars(select(Provider.id)).all())
            self.assertEqual(remaining, [ids[0], failing_source])
            survivor = db.get(Provider, ids[0])
            # the failed source contributes nothing to the survivor's counters
            self.assertEqual(survivor.application_count, 4)
            self.assertNotIn("service-2", survivor.services)
            failed_prices = db.scalars(select(ProviderPrice).where(ProviderPrice.provider_id == failing_source)).all()
            self.assertEqual(len(failed_prices), 1)
            # notes were seeded one per provider, in provider order
            note_owners = db.scalars(select(Note.provider_id).order_by(Note.id)).all()
            for index in (1, 3, 4):
                self.assertEqual(note_owners[index], ids[0])
            failed = db.scalars(select(MergeIntent).where(MergeIntent.status == "failed")).all()
            self.assertEqual([intent.source_provider_id for intent in failed], [failing_source])

    def test_multiple_groups_and_fuzzy_matches(self) -> None:
        rows = [
            {"email": "one@example.com"},
            {"email": "ONE@example.com"},
            {"email": "two@example.com"},
            {"email": "two@example.com"},
            {"email": "two@example.com"},
            {"tax_id": "501234567"},
            {"tax_id": " 501234567"},
            {"name": "Joao Silva Pinturas"},
            {"name": "João Silva Pinturas"},
            {"email": "*****"},
            {"email": "*****"},
        ]
        ids = self._seed(self.SessionLocal, rows)
        store = RegistryStore(self.SessionLocal)

        result = quick_merge_exact_duplicates(store, actor_id=self.actor_id, chunk_size=2, relation_workers=2)

        self.assertEqual(result.merged_count, 4)
        self.assertEqual(result.failed_count, 0)
        with self.SessionLocal() as db:
            remaining = sorted(db.scalars(select(Provider.id)).all())
        self.assertEqual(remaining, [ids[0], ids[2], ids[5], ids[7], ids[8], ids[9], ids[10]])

    def test_results_do_not_depend_on_concurrency_settings(self) -> None:
        rows = self._five_record_group() + [{"tax_id": "509876543"}, {"tax_id": "509876543"}]
        outcomes = []
        for file_name, chunk_size, relation_workers in (("serial.db", 1, 1), ("parallel.db", 5, 4)):
            session_factory = self._create_registry(file_name)
            actor_id = self._add_user(session_factory)
            self._seed(session_factory, rows)
            result = quick_merge_exact_duplicates(
                RegistryStore(session_factory),
                actor_id=actor_id,
                chunk_size=chunk_size,
                relation_workers=relation_workers,
            )
            with session_factory() as db:
                providers = [
                    (provider.id, provider.application_count, sorted(provider.services or []))
                    for provider in db.scalars(select(Provider).order_by(Provider.id))
                ]
                notes = sorted(db.execute(select(Note.id, Note.provider_id)).all())
            outcomes.append((result.merged_count, result.failed_count, providers, notes))

        self.assertEqual(outcomes[0], outcomes[1])

    def test_empty_registry_is_a_successful_noop(self) -> None:
        result = quick_merge_exact_duplicates(RegistryStore(self.SessionLocal), actor_id=self.actor_id)

        self.assertTrue(result.success)
        self.assertEqual(result.merged_count, 0)
        self.assertEqual(result.failed_count, 0)

    def test_quick_merge_requires_an_acting_user(self) -> None:
        self._seed(self.SessionLocal, self._five_record_group())

        result = quick_merge_exact_duplicates(RegistryStore(self.SessionLocal), actor_id=None)

        self.assertFalse(result.success)
        self.assertEqual(result.error_code, "not_authenticated")
        with self.SessionLocal() as db:
            self.assertEqual(len(db.scalars(select(Provider)).all()), 5)

    def test_name_groups_are_rejected_before_any_write(self) -> None:
        ids = self._seed(self.SessionLocal, [{"email": "a@example.com"}, {"email": "a@example.com"}])
        store = RegistryStore(self.SessionLocal)
        providers = store.list_providers(limit=10)
        groups = [
            DuplicateGroup(match_type="email", match_value="a@example.com", providers=providers),
            DuplicateGroup(match_type="name", match_value="Provider 0", providers=providers, similarity=90),
        ]

        with self.assertRaises(MergePolicyError):
            merge_duplicate_groups(store, groups, actor_id=self.actor_id, chunk_size=2, relation_workers=2)

        with self.SessionLocal() as db:
            self.assertEqual(sorted(db.scalars(select(Provider.id)).all()), ids)
            self.assertEqual(db.scalars(select(MergeIntent)).all(), [])


if __name__ == "__main__":
    unittest.main()
