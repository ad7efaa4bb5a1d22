"""Built-in probe adapters."""

from .database_probe import DatabaseProbe
from .disk_space_probe import DiskSpaceProbe
from .function_probe import FunctionProbe
from .http_probe import HttpProbe
from .memory_probe import MemoryProbe

__all__ = ["DatabaseProbe", "DiskSpaceProbe", "FunctionProbe", "HttpProbe", "MemoryProbe"]
