"""
Repair derived state the employee lifecycle maintains best-effort.

- Recompute every department's employee_count.
- Set the privileged position's status from its actual active holder.

Run after a logged "Side effect failed" entry, or any time; safe to run
multiple times (idempotent).

Usage (from the repository root, with .env loaded):

    python scripts/repair_counters.py
"""
from pathlib import Path

import sys


# Ensure app package is importable when script is run directly
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.core.config import settings
from app.db.session import SessionLocal
from app.services.department_service import recount_all
from app.services.position_service import reconcile_privileged_position


def main() -> None:
    db = SessionLocal()
    try:
        repaired = recount_all(db)
        print(f"Departments repaired: {repaired}")

        status = reconcile_privileged_position(db)
        if status is None:
            print(f"Position '{settings.PRIVILEGED_POSITION}' not found; run the app once to seed positions")
        else:
            print(f"Position '{settings.PRIVILEGED_POSITION}' status: {status}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
