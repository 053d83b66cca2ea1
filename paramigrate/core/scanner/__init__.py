"""Project scanning -- turns a project root into a ProjectState."""

from .scanner import FileSystemScanner

__all__ = ["FileSystemScanner"]
