"""Data models for documentation search results."""

from dataclasses import dataclass


@dataclass
class DocChunk:
    """
    A contiguous excerpt of a documentation file.

    Line numbers are 1-based and inclusive.
    """
    file: str
    start_line: int
    end_line: int
    content: str

    @property
    def header(self) -> str:
        return f"--- {self.file} (lines {self.start_line}-{self.end_line}) ---"
