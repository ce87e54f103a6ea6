#!/usr/bin/env python3
"""
Reset the service catalog with the sample services (prices in INR).

Usage:
  python scripts/seed_services.py [--keep]
"""
from __future__ import annotations

import argparse
import sys

from homeservice.db.create_tables import create_all
from homeservice.repositories.sql_repository import SQLRepository

SAMPLE_SERVICES = [
    ("Plumbing", "Fix leaks, unclog drains, and install pipes", 1500),
    ("Cleaning", "Deep house cleaning, dusting, and vacuuming", 2500),
    ("Electrical", "Wiring repairs, outlet installations, and lighting setup", 2000),
    ("Painting", "Interior/exterior painting, wall touch-ups, and color consultations", 4500),
    ("Gardening", "Lawn mowing, planting, weeding, and garden maintenance", 2200),
    ("HVAC Repair", "AC/heating system fixes, filter changes, and thermostat installation", 2500),
    ("Handyman", "General repairs, furniture assembly, and small home fixes", 3500),
    ("Carpentry", "Woodwork repairs, furniture making, and cabinet installation", 3800),
    ("Pest Control", "Safe pest elimination for home and kitchen areas", 1800),
    ("Appliance Repair", "Fixing refrigerators, washing machines, and other appliances", 4200),
    ("Interior Design", "Home decor consultation, layout planning, and styling advice", 3000),
]


def seed(repo: SQLRepository, *, keep_existing: bool = False) -> list:
    if not keep_existing:
        removed = repo.delete_all_services()
        print(f"Cleared {removed} old services")
    return [repo.create_service(name, float(price), description) for name, description, price in SAMPLE_SERVICES]


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed the service catalog")
    ap.add_argument("--keep", action="store_true", help="append instead of replacing the current catalog")
    args = ap.parse_args()

    create_all()
    services = seed(SQLRepository(), keep_existing=args.keep)
    print(f"Added {len(services)} services:")
    for svc in services:
        print(f"  - {svc.name}: Rs {svc.price:.0f} ({svc.description})")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI entry point
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
