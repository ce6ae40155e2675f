"""Configuration module for ftpfacade.

- FTPClientConfig: Connection settings dataclass
"""
