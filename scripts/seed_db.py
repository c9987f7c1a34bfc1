"""
Seed script for the request repository and risk registry collections.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to Firestore: python scripts/seed_db.py --apply
  - Use another seed file: python scripts/seed_db.py --seed ./other_seed.json --apply

Behavior:
  - Loads the seed file (default: MOCK_DB_PATH, the same file mock mode reads).
  - Validates every document against the engine models before writing.
  - Writes each document with .collection(name).document(id).set(data).

NOTE: Requires FIREBASE_CREDENTIALS_PATH (or Application Default Credentials).
Mock mode (USE_MOCK_DB=true) reads the seed file directly and needs no seeding.
"""

import argparse
import json
import os
from typing import Any, Dict, Tuple

from pydantic import ValidationError

from app.config.firebase import get_db
from app.core.settings import settings
from app.models.service_request import NeighborhoodRiskRecord, ServiceRequest

TIMESTAMP_FIELDS = ("created_at", "resolved_at", "sla_deadline")


def load_seed(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def build_documents(seed: dict) -> Tuple[Dict[str, Dict[str, dict]], int]:
    """
    Validate the seed and convert it to Firestore documents.

    Timestamps are stored as datetimes so range queries on resolved_at work.
    Returns the documents per collection and the number of invalid entries.
    """
    documents: Dict[str, Dict[str, dict]] = {settings.REQUESTS_COLLECTION: {}, settings.RISK_COLLECTION: {}}
    invalid = 0

    for doc_id, data in seed.get(settings.REQUESTS_COLLECTION, {}).items():
        try:
            request = ServiceRequest.model_validate({**data, "id": doc_id})
        except ValidationError as e:
            invalid += 1
            print(f"Invalid request {doc_id}: {e}")
            continue
        doc = request.model_dump(mode="json", exclude={"id"}, exclude_none=True)
        for field in TIMESTAMP_FIELDS:
            if getattr(request, field) is not None:
                doc[field] = getattr(request, field)
        documents[settings.REQUESTS_COLLECTION][doc_id] = doc

    for doc_id, data in seed.get(settings.RISK_COLLECTION, {}).items():
        try:
            record = NeighborhoodRiskRecord.model_validate({"neighborhood": doc_id, **data})
        except ValidationError as e:
            invalid += 1
            print(f"Invalid risk record {doc_id}: {e}")
            continue
        doc = record.model_dump(mode="json")
        doc["recurring_issue_tags"] = sorted(record.recurring_issue_tags)
        documents[settings.RISK_COLLECTION][doc_id] = doc

    return documents, invalid


def write_to_db(db: Any, documents: Dict[str, Dict[str, dict]], apply: bool = False):
    for collection, docs in documents.items():
        for doc_id, data in docs.items():
            print(f"Preparing: {collection}/{doc_id}")
            if not apply:
                continue
            try:
                db.collection(collection).document(doc_id).set(data)
                print(f"Wrote: {collection}/{doc_id}")
            except Exception as e:
                print(f"Failed to write {collection}/{doc_id}: {e}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to Firestore instead of dry-run")
    parser.add_argument("--seed", default=settings.MOCK_DB_PATH, help="Seed file path")
    args = parser.parse_args()

    if not os.path.exists(args.seed):
        print(f"Seed file not found: {args.seed}")
        return

    seed = load_seed(args.seed)

    documents, invalid = build_documents(seed)
    if invalid:
        print(f"{invalid} invalid document(s); fix the seed file before applying.")
        return

    db = get_db() if args.apply else None
    write_to_db(db, documents, apply=args.apply)

    if args.apply:
        print("Seeding completed.")
    else:
        print("Dry run complete. Re-run with --apply to write to Firestore.")


if __name__ == "__main__":
    main()
