"""Command-line entry points.

- demo.py:    ``nexhealth-demo``, practice data (patients, scheduling)
- billing.py: ``nexhealth-billing``, charges, payments, balances
"""
