"""
Persistence module.

JSON-per-key durable storage and the sequenced write-behind writer.
"""
