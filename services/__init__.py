"""
services/ - Business Logic Layer
================================
Services validate input, apply the domain rules and call repositories.
They never touch SQL or HTTP directly; remote services are reached through
`integrations/`.
"""
