import os
from datetime import timedelta

# Token economy
# Every generation costs 1 token; free users top up with the daily grant or promo codes.
GENERATION_COST = 1
DAILY_GRANT_TOKENS = 5
DAILY_CLAIM_INTERVAL = timedelta(hours=24)  # Rolling window, not calendar day
STARTING_TOKENS = int(os.getenv("STARTING_TOKENS", "5"))

# Subscriptions are display-only; they never bypass the token checks
SUBSCRIPTION_TIERS = ("free", "monthly", "yearly")

MAX_KEYWORDS = 5
