"""
Local persistence.

Components:
- manager.py: SQLite key-value store namespaced by app id + schema version,
  with JSON snapshot export/import
"""
