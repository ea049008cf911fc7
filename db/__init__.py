"""
db/ - Database Layer
====================
Handles the PostgreSQL connection pool, schema initialization, the
in-memory store used for tests and throwaway runs, and seed data.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
