"""Memory hierarchy, paging, cache, JSON assembler and scheduling metrics for a von Neumann machine simulator."""

__version__ = "0.1.0"
__all__ = ["storage", "cache", "process", "memory_manager", "assembler", "metrics"]