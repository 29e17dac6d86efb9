from .handler import global_exception_handler

__all__ = ["global_exception_handler"]
