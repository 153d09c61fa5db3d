"""System account ids and amount limits."""

# Holds every staked gross amount until it is paid out; fees and
# floor-division remainders stay here for external sweeping.
CUSTODY_ACCOUNT_ID = "PREDICTION_POOL"

# Balances, stakes and prices are stored as BIGINT
MAX_AMOUNT = 2**63 - 1
