from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, Field

BAKE_FILE_PREFIX = "docker-meta-bake"


class BakeTargetDefinition(BaseModel):
    """Represents the metadata of a target in a Docker Bake file."""

    tags: Annotated[list[str] | None, Field(default=None, description="Tags to apply to the image.")]
    labels: Annotated[dict[str, str] | None, Field(default=None, description="Labels to apply to the image.")]
    annotations: Annotated[
        list[str] | None, Field(default=None, description="Leveled annotations to apply to the image.")
    ]
    args: Annotated[dict[str, str] | None, Field(default=None, description="Build arguments for the target.")]


class BakeFile(BaseModel):
    """Represents a JSON Docker Bake file defining one target."""

    target: Annotated[dict[str, BakeTargetDefinition], Field(description="Targets in the bake file.")]

    def to_json(self) -> str:
        """Serialize the bake file, omitting unset sections."""
        return self.model_dump_json(indent=2, exclude_none=True)

    @staticmethod
    def filename(name: str | None = None) -> str:
        """Return the file name of a bake file.

        :param name: The kind of bake file, e.g. 'tags'. The combined bake file has no name.
        """
        if name:
            return f"{BAKE_FILE_PREFIX}-{name}.json"
        return f"{BAKE_FILE_PREFIX}.json"

    def write(self, directory: Path, name: str | None = None) -> Path:
        """Write the bake file to a directory.

        :param directory: The directory to write to.
        :param name: The kind of bake file, used in the file name.

        :return: The path of the written file.
        """
        bake_file = (directory / self.filename(name)).resolve()
        with open(bake_file, "w") as f:
            f.write(self.to_json())
        return bake_file
