#!/usr/bin/env python3
"""
Promo code administration.

  python scripts/promo_codes.py create WELCOME5 --tokens 5 --max-uses 100
  python scripts/promo_codes.py create NEWYEAR --tokens 10 --max-uses 500 --expires 2027-01-31
  python scripts/promo_codes.py list
  python scripts/promo_codes.py deactivate-spent

deactivate-spent flips active=false on codes that are used up or expired; it is
safe to run on a schedule.

Requires: DATABASE_URL in environment (.env or export).
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

# Run from project root; ensure studio is importable
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv(project_root / ".env")

from studio.db.session import SessionLocal
from studio.models.promo_code import PromoCode
from studio.services.promo_redemption import create_promo_code, deactivate_spent_codes


def _parse_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not an ISO date/datetime: {value}")


def cmd_create(db, args) -> int:
    try:
        promo = create_promo_code(db, args.code, args.tokens, args.max_uses, expires_at=args.expires)
    except ValueError as e:
        print(f"❌ {e}")
        return 1
    print(f"✅ Created {promo.code}: {promo.tokens} tokens, {promo.max_uses} uses, expires {promo.expires_at or 'never'}")
    return 0


def cmd_list(db, args) -> int:
    query = db.query(PromoCode)
    if not args.all:
        query = query.filter(PromoCode.active.is_(True))
    for promo in query.order_by(PromoCode.created_at.desc()).all():
        state = "active" if promo.active else "inactive"
        print(f"{promo.code:<20} {promo.tokens:>5} tokens  {promo.current_uses}/{promo.max_uses} used  "
              f"expires {promo.expires_at or 'never'}  [{state}]")
    return 0


def cmd_deactivate_spent(db, args) -> int:
    count = deactivate_spent_codes(db)
    print(f"✅ Deactivated {count} promo code(s)")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Manage promo codes")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a promo code")
    create.add_argument("code")
    create.add_argument("--tokens", type=int, required=True, help="Tokens credited per redemption")
    create.add_argument("--max-uses", type=int, required=True, help="Total redemptions allowed")
    create.add_argument("--expires", type=_parse_date, default=None, help="UTC expiry, ISO format")
    create.set_defaults(func=cmd_create)

    list_cmd = sub.add_parser("list", help="List promo codes")
    list_cmd.add_argument("--all", action="store_true", help="Include inactive codes")
    list_cmd.set_defaults(func=cmd_list)

    deactivate = sub.add_parser("deactivate-spent", help="Deactivate used-up and expired codes")
    deactivate.set_defaults(func=cmd_deactivate_spent)

    args = parser.parse_args()
    db = SessionLocal()
    try:
        return args.func(db, args)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
