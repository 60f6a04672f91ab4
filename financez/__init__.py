"""
FinanceZ - Source Package

A personal-finance client: savings goals, a wallet of cards and
transactions, an investment overview and an onboarding flow, all
rendered over rows stored in a hosted backend.

DESIGN PRINCIPLES:
1. The backend owns the data; the client only fetches, sums and submits
2. Every query is scoped to the signed-in user
3. Validate forms before any backend call
4. Failures become messages, never crashes
5. Money is fixed-point, never float
"""

__version__ = "1.0.0"
__author__ = "FinanceZ Team"
