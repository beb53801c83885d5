"""
Repository layer for data access.

Repositories isolate SQL from business logic and hand back flat
row dictionaries that the services reshape.
"""
