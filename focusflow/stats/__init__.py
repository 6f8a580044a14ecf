"""
Statistics and streak module.

Per-day focus aggregates, the consecutive-day streak, and the weekly series
derived from them.
"""
