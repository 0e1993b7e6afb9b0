#!/usr/bin/env python
"""Seed the development database with a demo user, report and document.

Constraints:
- Refuses to run in staging or prod (RESEARCHHUB_ENV check)
- Idempotent: re-running finds the existing rows instead of duplicating them
- Never runs automatically (manual invocation only)

Usage:
    cd python && DATABASE_URL=... python ../scripts/seed_dev.py
"""

import os
import sys
from uuid import UUID

DEV_USER_ID = UUID("00000000-0000-4000-8000-000000000001")
DEV_USER_EMAIL = "dev@researchhub.local"
DEV_REPORT_NAME = "Getting started"
DEV_REPORT_CONTENT = "# Getting started\n\nUpload documents to collect sources for this report.\n"
DEV_DOCUMENT_NAME = "welcome.md"
DEV_DOCUMENT_BODY = b"# Welcome\n\nThis document was created by seed_dev.py.\n"


def main():
    # 1. Environment check (hard fail in staging/prod)
    env = os.getenv("RESEARCHHUB_ENV", "local")
    if env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in RESEARCHHUB_ENV={env}")
        sys.exit(1)

    if not os.getenv("DATABASE_URL"):
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    from researchhub.db.session import get_session_factory
    from researchhub.errors import DuplicateDocumentError
    from researchhub.services import documents, reports
    from researchhub.services.users import ensure_user

    db = get_session_factory()()
    try:
        # 2. Dev user
        ensure_user(db, DEV_USER_ID, DEV_USER_EMAIL, name="Dev User", provider="email")

        # 3. Demo report (reuse by name)
        existing = [r for r in reports.list_reports(db, DEV_USER_ID) if r.name == DEV_REPORT_NAME]
        if existing:
            report = existing[0]
            print(f"Report exists: {report.id}")
        else:
            report = reports.create_report(db, DEV_USER_ID, DEV_REPORT_NAME)
            reports.update_report(db, DEV_USER_ID, report.id, content=DEV_REPORT_CONTENT)
            print(f"Report created: {report.id}")

        # 4. Demo document (dedup makes this idempotent)
        try:
            document = documents.upload_document(
                db,
                DEV_USER_ID,
                report.id,
                DEV_DOCUMENT_BODY,
                DEV_DOCUMENT_NAME,
                content_type="text/markdown",
                tags=["welcome"],
            )
            print(f"Document created: {document.id}")
        except DuplicateDocumentError:
            print("Document exists")
    finally:
        db.close()

    print("Seed complete.")


if __name__ == "__main__":
    main()
