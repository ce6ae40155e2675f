"""Utility module for ftpfacade.

This module provides cross-cutting utilities:
- Logging: Configured logging with credential redaction
- Validators: Input validation for addresses, timeouts, paths
- Cancellation: Cancellable copy loops and readers
- Paths: Remote file name and folder helpers
"""
