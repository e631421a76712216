"""Dataclasses for site generation."""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Literal, Optional

FileType = Literal["component", "page", "config", "style", "data"]


@dataclass(frozen=True)
class Block:
    """One fenced ```language:path block extracted from model output."""
    file_path: str
    content: str
    language: str


@dataclass
class VirtualFile:
    """A generated file owned by one generation version."""
    path: str  # Relative to the generated project root
    content: str
    type: FileType = "component"
    section_type: Optional[str] = None


@dataclass
class VirtualFileTree:
    """Ordered path -> file map. Adding an existing path replaces it."""
    files: Dict[str, VirtualFile] = field(default_factory=dict)

    def add(self, file: VirtualFile) -> None:
        self.files[file.path] = file

    def get(self, path: str) -> Optional[VirtualFile]:
        return self.files.get(path)

    def paths(self) -> List[str]:
        return list(self.files)

    def __iter__(self) -> Iterator[VirtualFile]:
        return iter(self.files.values())

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: str) -> bool:
        return path in self.files
