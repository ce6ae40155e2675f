"""FTP operations module for ftpfacade.

This module handles all FTP-related functionality:
- FTPClient: Transfer, directory and listing operations
- FTPSessionManager: Transient or persistent (TTL-bound) sessions
- Dialer / ServerConnection: ftplib-backed transport
- Exceptions: FTP-specific error types
"""
