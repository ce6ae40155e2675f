"""ftpfacade: a thin FTP client with transient or persistent sessions."""

__version__ = "1.0.0"
