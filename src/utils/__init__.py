"""Utility module for Remote Transfer.

This module provides cross-cutting utilities:
- Logging: Configured logging with credential redaction
- Validators: Input validation for hosts, ports, timeouts and paths
- Deadline: Per-call wall-clock budget for socket operations
"""
