"""Remote path helpers for ftpfacade.

FTP paths are always "/"-delimited regardless of the local platform,
so these work on plain strings rather than pathlib objects.
"""


def file_name_without_extension(name: str) -> str:
    """
    Strip the last extension from a file name.

    "archive.tar.gz" -> "archive.tar", "README" -> "README"
    """
    parts = name.split(".")
    if len(parts) == 1:
        return name
    return ".".join(parts[:-1])


def file_extension(name: str) -> str:
    """
    Lowercased text after the last "." of a name.

    A name without any "." is its own extension.
    """
    return name.split(".")[-1].lower()


def parent_folder(path: str) -> str:
    """Everything before the last "/" ("" when there is none)."""
    return "/".join(path.split("/")[:-1])


def join_remote(folder: str, name: str) -> str:
    """Join a remote folder and an entry name."""
    if not folder:
        return name
    return f"{folder.rstrip('/')}/{name}"
