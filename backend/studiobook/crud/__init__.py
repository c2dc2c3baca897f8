from .crud_booking import booking
from .crud_directory import directory

__all__ = ["booking", "directory"]
