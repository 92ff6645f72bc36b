"""Repository layer: DB access helpers (SQLite).

Keep functions thin and focused, so the store avoids SQL strings.
"""
