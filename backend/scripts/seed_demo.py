"""Seed a demo provider registry containing duplicates and run a scan.

Usage (from repository root):
    python backend/scripts/seed_demo.py

Usage (from backend directory):
    python scripts/seed_demo.py
    # or
    python -m scripts.seed_demo
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

from sqlalchemy import delete

# Make `app` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.db.session import SessionLocal
from app.models.note import Note
from app.models.provider import Provider
from app.services.duplicates import scan_for_duplicates
from app.services.registry import RegistryStore


DEMO_WEBSITE = "https://seed-demo.invalid"


def build_demo_providers() -> list[Provider]:
    """Return a deterministic registry with email, tax-id and name duplicates."""

    base = datetime(2026, 10, 1, 9, 0, 0, tzinfo=timezone.utc)
    payloads = [
        ("Canalizações Ferreira", "geral@ferreira.pt", "501234567", ["plumbing"], ["Lisboa"]),
        ("Ferreira Canalizacoes", " GERAL@ferreira.pt ", None, ["boilers"], ["Setubal"]),
        ("Eletro Sousa", "sousa@eletro.pt", "509876543", ["electrical"], ["Porto"]),
        ("Sousa Electricidade Lda", "contacto@sousa.pt", "509876543", [], ["Braga"]),
        ("João Silva", "joao.silva@mail.pt", None, ["painting"], ["Faro"]),
        ("Joao Silva", "jsilva@mail.pt", None, ["painting", "plastering"], ["Faro"]),
        ("*****", "*****", "*****", [], []),
        ("*****", "*****", "*****", [], []),
    ]
    return [
        Provider(
            name=name,
            email=email,
            tax_id=tax_id,
            entity_type="individual",
            status="new",
            services=services,
            districts=districts,
            application_count=1,
            first_application_at=base + timedelta(days=idx),
            created_at=base + timedelta(days=idx),
            website=DEMO_WEBSITE,
        )
        for idx, (name, email, tax_id, services, districts) in enumerate(payloads)
    ]


def reset_demo_registry(db) -> None:
    """Remove providers created by a previous run of this script."""

    demo_ids = [row.id for row in db.query(Provider.id).filter(Provider.website == DEMO_WEBSITE)]
    if demo_ids:
        db.execute(delete(Note).where(Note.provider_id.in_(demo_ids)))
        db.execute(delete(Provider).where(Provider.id.in_(demo_ids)))
    db.commit()


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed demo duplicate providers and run a duplicate scan.")
    parser.add_argument(
        "--no-reset",
        action="store_true",
        help="Do not delete providers from a previous demo seed before seeding.",
    )
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print the scan summary."""

    args = parse_args()

    with SessionLocal() as db:
        if not args.no_reset:
            reset_demo_registry(db)
        providers = build_demo_providers()
        db.add_all(providers)
        db.flush()
        db.add_all(Note(provider_id=provider.id, content=f"Seeded note for {provider.name}") for provider in providers)
        db.commit()

    result = scan_for_duplicates(RegistryStore(SessionLocal))

    print("Seed complete")
    print(f"providers_scanned={result.scanned_count}")
    print(f"duplicate_groups={len(result.groups)}")
    print(f"records_removable={result.total_duplicates}")
    for group in result.groups:
        names = ", ".join(provider.name for provider in group.providers)
        similarity = f" similarity={group.similarity}" if group.similarity is not None else ""
        print(f"  [{group.match_type}] {group.match_value}{similarity}: {names}")
    print()
    print("Inspect:")
    print("  GET /providers/duplicates")
    print("  POST /providers/duplicates/quick-merge  (X-User-Id header required)")


if __name__ == "__main__":
    main()
