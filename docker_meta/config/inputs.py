from typing import Annotated

from pydantic import Field

from docker_meta.config.shared import DockerMetaModel, parse_input_list
from docker_meta.const import DEFAULT_BAKE_TARGET


class Inputs(DockerMetaModel):
    """Raw user inputs, one entry per definition."""

    images: Annotated[list[str], Field(default_factory=list, description="Image definitions.")]
    tags: Annotated[list[str], Field(default_factory=list, description="Tag rule definitions.")]
    flavor: Annotated[list[str], Field(default_factory=list, description="Flavor entries.")]
    labels: Annotated[list[str], Field(default_factory=list, description="Extra 'key=value' labels.")]
    annotations: Annotated[list[str], Field(default_factory=list, description="Extra 'key=value' annotations.")]
    sep_tags: Annotated[str, Field(default="\n", description="Separator of the tags output.")]
    sep_labels: Annotated[str, Field(default="\n", description="Separator of the labels output.")]
    sep_annotations: Annotated[str, Field(default="\n", description="Separator of the annotations output.")]
    bake_target: Annotated[str, Field(default=DEFAULT_BAKE_TARGET, description="Bake target name.")]

    @classmethod
    def from_text(
        cls,
        images: str | None = None,
        tags: str | None = None,
        flavor: str | None = None,
        labels: str | None = None,
        annotations: str | None = None,
        sep_tags: str | None = None,
        sep_labels: str | None = None,
        sep_annotations: str | None = None,
        bake_target: str | None = None,
    ) -> "Inputs":
        """Create Inputs from multi-line text inputs.

        Each input is split on new lines, ignoring empty lines and lines starting with '#'. Unset or empty
        separators and bake target fall back to their defaults.
        """
        values = {
            "images": parse_input_list(images),
            "tags": parse_input_list(tags),
            "flavor": parse_input_list(flavor),
            "labels": parse_input_list(labels),
            "annotations": parse_input_list(annotations),
        }
        for key, value in [
            ("sep_tags", sep_tags),
            ("sep_labels", sep_labels),
            ("sep_annotations", sep_annotations),
            ("bake_target", bake_target),
        ]:
            if value:
                values[key] = value
        return cls(**values)
