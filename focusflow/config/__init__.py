"""
Configuration module.

Timer settings, their validation, and YAML application configuration.
"""
