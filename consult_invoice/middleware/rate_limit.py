"""Per-endpoint request limits, keyed by client address."""
from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

CONSULTATIONS_RATE_LIMIT = "60/minute"
SUMMARY_RATE_LIMIT = "120/minute"
RATES_RATE_LIMIT = "200/minute"
HEALTH_RATE_LIMIT = "200/minute"
