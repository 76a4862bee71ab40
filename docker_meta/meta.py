import logging
from typing import Any

from docker_meta.bake import BakeFile, BakeTargetDefinition
from docker_meta.config import Flavor, Image, Inputs, TagRuleTypes, parse_flavor, parse_images, parse_tags
from docker_meta.const import BAKE_ARG_IMAGES, BAKE_ARG_VERSION, DEFAULT_BAKE_TARGET, OCI_LABEL_PREFIX
from docker_meta.context import ResolutionContext
from docker_meta.error import ConfigError
from docker_meta.resolve import Version, resolve_version
from docker_meta.templating import format_datetime, render_global
from docker_meta.util import sanitize_image_name, sanitize_tag, split_key_value

log = logging.getLogger(__name__)

CREATED_DATE_FORMAT = "YYYY-MM-DDTHH:mm:ss.SSS[Z]"


def sort_key(key: str) -> tuple[str, str]:
    """Collation key ordering keys case-insensitively, ties broken by the raw key.

    Punctuation sorts in code point order ('-' before '.' before '_'), which can differ from locale-aware
    collation for keys that differ only in punctuation.
    """
    return key.casefold(), key


def merge_key_values(entries: list[str]) -> dict[str, str]:
    """Merge 'key=value' entries into a mapping sorted by key.

    Later entries override earlier ones with the same key. Entries without '=' are dropped.

    :param entries: The entries to merge.

    :return: The merged mapping, in key order.
    """
    merged: dict[str, str] = {}
    for entry in entries:
        pair = split_key_value(entry)
        if pair is None:
            log.debug(f"Ignoring entry without value: {entry}")
            continue
        key, value = pair
        merged[key] = value
    return {key: merged[key] for key in sorted(merged, key=sort_key)}


class Meta:
    """Image metadata resolved from tag rules and projected into tags, labels, annotations and bake files."""

    def __init__(
        self,
        ctx: ResolutionContext,
        rules: list[TagRuleTypes],
        images: list[Image] | None = None,
        flavor: Flavor | None = None,
        labels: list[str] | None = None,
        annotations: list[str] | None = None,
        bake_target: str = DEFAULT_BAKE_TARGET,
    ):
        self.ctx = ctx
        self.rules = rules
        self.images = images or []
        self.flavor = flavor or Flavor()
        self.labels = labels or []
        self.annotations = annotations or []
        self.bake_target = bake_target
        self.version: Version = resolve_version(self.rules, self.ctx, self.flavor)

    @classmethod
    def from_inputs(cls, inputs: Inputs, ctx: ResolutionContext) -> "Meta":
        """Create Meta by parsing raw inputs.

        :param inputs: The raw inputs.
        :param ctx: The resolution context.
        """
        return cls(
            ctx=ctx,
            rules=parse_tags(inputs.tags),
            images=parse_images(inputs.images),
            flavor=parse_flavor(inputs.flavor),
            labels=inputs.labels,
            annotations=inputs.annotations,
            bake_target=inputs.bake_target,
        )

    @property
    def image_names(self) -> list[str]:
        """Return the lower-cased names of enabled images."""
        return [sanitize_image_name(image.name) for image in self.images if image.enable]

    def _latest_tag(self) -> str:
        tag = "latest"
        if self.flavor.prefix_latest:
            tag = render_global(self.flavor.prefix, self.ctx) + tag
        if self.flavor.suffix_latest:
            tag = tag + render_global(self.flavor.suffix, self.ctx)
        return sanitize_tag(tag)

    def get_tags(self) -> list[str]:
        """Return the image tags.

        Each enabled image is tagged with the main version, every partial version, then 'latest' if requested. Tags
        have no image name if no image is enabled. No tags are returned if no version was resolved.
        """
        if not self.version.main:
            return []

        versions = [self.version.main, *self.version.partial]
        if self.version.latest:
            versions.append(self._latest_tag())

        tags = []
        for image_name in self.image_names or [""]:
            prefix = f"{image_name}:" if image_name else ""
            tags.extend(f"{prefix}{v}" for v in versions)
        return tags

    def _oci_annotations_with_customs(self, extra: list[str]) -> list[str]:
        entries = [
            f"{OCI_LABEL_PREFIX}.title={self.ctx.repo.name}",
            f"{OCI_LABEL_PREFIX}.description={self.ctx.repo.description}",
            f"{OCI_LABEL_PREFIX}.url={self.ctx.repo.url}",
            f"{OCI_LABEL_PREFIX}.source={self.ctx.repo.url}",
            f"{OCI_LABEL_PREFIX}.version={self.version.main or ''}",
            f"{OCI_LABEL_PREFIX}.created={format_datetime(self.ctx.now, CREATED_DATE_FORMAT)}",
            f"{OCI_LABEL_PREFIX}.revision={self.ctx.sha}",
            f"{OCI_LABEL_PREFIX}.licenses={self.ctx.repo.license}",
        ]
        entries.extend(render_global(entry, self.ctx) for entry in extra)
        return [f"{key}={value}" for key, value in merge_key_values(entries).items()]

    def get_labels(self) -> list[str]:
        """Return the OCI labels merged with the extra labels, sorted by key."""
        return self._oci_annotations_with_customs(self.labels)

    def get_annotations(self) -> list[str]:
        """Return the OCI annotations merged with the extra annotations, sorted by key."""
        return self._oci_annotations_with_customs(self.annotations)

    def get_leveled_annotations(self, levels: list[str]) -> list[str]:
        """Return the annotations prefixed by each level, e.g. 'manifest:key=value'.

        :param levels: The annotation levels, in output order.
        """
        annotations = self.get_annotations()
        return [f"{level}:{annotation}" for level in levels for annotation in annotations]

    def get_labels_map(self) -> dict[str, str]:
        return dict(split_key_value(label) for label in self.get_labels())

    def get_json(self, levels: list[str]) -> dict[str, Any]:
        """Return the JSON projection of the metadata.

        :param levels: The annotation levels.
        """
        return {
            "tags": self.get_tags(),
            "labels": self.get_labels_map(),
            "annotations": self.get_leveled_annotations(levels),
        }

    def _bake_args(self) -> dict[str, str]:
        args = {BAKE_ARG_IMAGES: ",".join(self.image_names)}
        if self.version.main is not None:
            args[BAKE_ARG_VERSION] = self.version.main
        return args

    def _bake_file(self, definition: BakeTargetDefinition) -> BakeFile:
        return BakeFile(target={self.bake_target: definition})

    def get_bake_file(self, kind: str) -> BakeFile:
        """Return the bake file of a kind.

        :param kind: 'tags', 'labels', or 'annotations:<levels>' with comma separated levels.

        :return: The bake file.

        :raises ConfigError: If the kind is unknown.
        """
        if kind == "tags":
            return self._bake_file(BakeTargetDefinition(tags=self.get_tags(), args=self._bake_args()))
        elif kind == "labels":
            return self._bake_file(BakeTargetDefinition(labels=self.get_labels_map()))
        elif kind.startswith("annotations:"):
            levels = [level for level in kind.split(":", 1)[1].split(",") if level]
            return self._bake_file(BakeTargetDefinition(annotations=self.get_leveled_annotations(levels)))
        raise ConfigError(f"Unknown bake file type: {kind}", value=kind)

    def get_bake_file_tags_labels(self) -> BakeFile:
        """Return the bake file combining tags, labels and build arguments."""
        return self._bake_file(
            BakeTargetDefinition(tags=self.get_tags(), labels=self.get_labels_map(), args=self._bake_args())
        )
