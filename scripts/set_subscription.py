#!/usr/bin/env python3
"""
Set a profile's subscription tier and expiry (manual upgrades until checkout is wired up).

  python scripts/set_subscription.py --email you@example.com --tier monthly
  python scripts/set_subscription.py --profile-id 5cff2718-... --tier yearly --expires 2027-10-19
  python scripts/set_subscription.py --email you@example.com --tier free

Without --expires, monthly runs 30 days and yearly 365 days from now.

Requires: DATABASE_URL in environment (.env or export).
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timedelta
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv(project_root / ".env")

from studio.core.token_rules import SUBSCRIPTION_TIERS
from studio.db.session import SessionLocal
from studio.models.profile import Profile
from studio.services.ledger import set_subscription
from studio.utils.clock import utc_now

TIER_DURATION = {
    "monthly": timedelta(days=30),
    "yearly": timedelta(days=365),
}


def main() -> int:
    parser = argparse.ArgumentParser(description="Set subscription tier for a profile")
    who = parser.add_mutually_exclusive_group(required=True)
    who.add_argument("--email")
    who.add_argument("--profile-id")
    parser.add_argument("--tier", choices=SUBSCRIPTION_TIERS, required=True)
    parser.add_argument("--expires", type=datetime.fromisoformat, default=None, help="UTC expiry, ISO format")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        query = db.query(Profile)
        if args.email:
            profile = query.filter(Profile.email == args.email.lower()).first()
        else:
            profile = query.filter(Profile.id == args.profile_id).first()
        if not profile:
            print("❌ Profile not found")
            return 1

        expires_at = args.expires
        if expires_at is None and args.tier in TIER_DURATION:
            expires_at = utc_now() + TIER_DURATION[args.tier]

        set_subscription(db, profile.id, args.tier, expires_at)
        print(f"✅ {profile.email}: {args.tier} (expires {expires_at or 'never'})")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
