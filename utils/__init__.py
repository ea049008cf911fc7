"""
utils/ - Shared Helpers
=======================
Logging setup, the error taxonomy, the clock and money helpers.
Nothing here imports from the other layers except `config`.
"""
