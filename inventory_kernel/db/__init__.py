"""Database layer for the SQL document store."""
