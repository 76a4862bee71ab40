from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from docker_meta.util import sanitize_tag


class Version(BaseModel):
    """Resolved image version.

    A Version is immutable. Accepting a value returns a new Version, so each tag rule only ever observes the values
    accepted by the rules resolved before it.
    """

    model_config = ConfigDict(frozen=True)

    main: Annotated[str | None, Field(default=None, description="First accepted value.")]
    partial: Annotated[
        tuple[str, ...], Field(default=(), description="Later distinct accepted values, in order of appearance.")
    ]
    latest: Annotated[
        bool | None, Field(default=None, description="Whether to tag latest. Decided by the first accepted value.")
    ]

    def accept(self, value: str, latest: bool) -> "Version":
        """Accumulate a rendered value.

        Empty values are ignored. The value is sanitized, becomes the main version if there is none yet, and is
        otherwise appended to the partial versions unless already present. The latest flag is only set if no
        previous value decided it.

        :param value: The rendered value.
        :param latest: Whether this value asks for a latest tag.

        :return: The updated version.
        """
        if not value:
            return self

        value = sanitize_tag(value)
        update = {}
        if self.main is None:
            update["main"] = value
        elif value != self.main and value not in self.partial:
            update["partial"] = (*self.partial, value)
        if self.latest is None:
            update["latest"] = latest

        return self.model_copy(update=update)

    def finalize(self) -> "Version":
        """Return the version with an undecided latest flag defaulted to False."""
        if self.latest is None:
            return self.model_copy(update={"latest": False})
        return self
