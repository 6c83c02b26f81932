from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from workerforge.base.config import BuildMode


class BuildState(str, Enum):
    DISCOVERING = "discovering"
    SANITIZING_PAGES = "sanitizing_pages"
    READING_ICON = "reading_icon"
    BUNDLING = "bundling"
    MINIFYING = "minifying"
    OBFUSCATING = "obfuscating"
    PASSING_THROUGH = "passing_through"
    PACKAGING = "packaging"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (BuildState.DONE, BuildState.FAILED)


class BuildArtifact(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: BuildMode
    worker_path: str = Field(description="Plain module file written to the output directory")
    archive_path: str = Field(description="Zip archive holding the same module")
    archive_entry: str = Field(description="Name of the single entry inside the archive")
    size_bytes: int
    sha256: str
    pages: List[str] = Field(default_factory=list, description="Page keys embedded in the module")
    states: List[BuildState] = Field(default_factory=list, description="Pipeline states visited, in order")
