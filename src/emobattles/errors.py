from __future__ import annotations
from pathlib import Path
from typing import Optional, Union


class DatasetError(Exception):
    """Base error for anything that goes wrong reading a dataset."""


class DatasetFormatError(DatasetError, ValueError):
    """
    Input decoded but does not have the expected shape.

    `location` is a free-form pointer into the file (e.g. "pair 12", "row 40").
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None,
                 location: Optional[str] = None):
        self.path = Path(path) if path is not None else None
        self.location = location
        where = ", ".join(str(p) for p in (self.path, location) if p is not None)
        super().__init__(f"{message} ({where})" if where else message)


class ConfigError(ValueError):
    pass
