"""Resource accessors for the NexHealth API.

Each module wraps the NexHealthClient for one family of endpoints and turns
the raw envelope into typed records from ``nexhealth.models``:

- patients.py:  List, fetch, create patients; per-patient balances
- scheduling.py: Appointments, providers, appointment slots
- locations.py: Practice locations
- billing.py:   Charges, payments, procedures

Read accessors never raise on API failures: they log a warning and return an
empty result. Write accessors (and ``get_balance``) let NexHealthError
propagate to the caller.
"""
