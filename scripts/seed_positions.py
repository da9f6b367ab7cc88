"""
Seed the default positions (DEFAULT_POSITIONS plus PRIVILEGED_POSITION).
Existing positions are left unchanged. Run from the repository root with .env loaded.

Usage:
  python scripts/seed_positions.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.init_db import seed_default_positions
from app.db.session import SessionLocal


def main():
    db = SessionLocal()
    try:
        created = seed_default_positions(db)
        print(f"Positions created: {created}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
