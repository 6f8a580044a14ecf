"""
Task module.

The task collection and the single active-task pointer that completed work
sessions are credited to.
"""
