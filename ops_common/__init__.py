"""
Shared helpers for command execution, filesystem changes and logging.
"""
