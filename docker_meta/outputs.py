import json
import logging
import uuid
from pathlib import Path

from docker_meta.config import Inputs
from docker_meta.log import log_group
from docker_meta.meta import Meta

log = logging.getLogger(__name__)


def generate_outputs(meta: Meta, inputs: Inputs, levels: list[str], bake_dir: Path) -> dict[str, str]:
    """Compute every output of a run, logging each group and writing the bake files.

    :param meta: The resolved metadata.
    :param inputs: The raw inputs, used for separators.
    :param levels: The annotation levels.
    :param bake_dir: The directory bake files are written to.

    :return: A mapping of output names to values.
    """
    outputs: dict[str, str] = {}

    if not meta.version.main:
        log.warning("No Docker image version has been generated. Check tags input.")
    else:
        log_group(log, "Docker image version", [meta.version.main])
    outputs["version"] = meta.version.main or ""

    tags = meta.get_tags()
    if not tags:
        log.warning("No Docker tag has been generated. Check tags input.")
    else:
        log_group(log, "Docker tags", tags)
    outputs["tags"] = inputs.sep_tags.join(tags)

    labels = meta.get_labels()
    log_group(log, "Docker labels", labels)
    outputs["labels"] = inputs.sep_labels.join(labels)

    annotations = meta.get_leveled_annotations(levels)
    log_group(log, "Annotations", annotations)
    outputs["annotations"] = inputs.sep_annotations.join(annotations)

    json_output = meta.get_json(levels)
    log_group(log, "JSON output", json.dumps(json_output, indent=2).splitlines())
    outputs["json"] = json.dumps(json_output, separators=(",", ":"))

    for kind in ["tags", "labels", f"annotations:{','.join(levels)}"]:
        name = kind.split(":")[0]
        bake_file = meta.get_bake_file(kind)
        log_group(log, f"Bake file definition ({name})", bake_file.to_json().splitlines())
        outputs[f"bake-file-{name}"] = str(bake_file.write(bake_dir, name))

    outputs["bake-file"] = str(meta.get_bake_file_tags_labels().write(bake_dir))

    return outputs


def write_github_output(path: Path, outputs: dict[str, str]) -> None:
    """Append outputs to a GitHub Actions output file.

    Multi-line values use the heredoc syntax with a random delimiter.

    :param path: The output file, usually the value of $GITHUB_OUTPUT.
    :param outputs: A mapping of output names to values.
    """
    with open(path, "a") as f:
        for name, value in outputs.items():
            if "\n" in value:
                delimiter = f"ghadelimiter_{uuid.uuid4()}"
                f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
            else:
                f.write(f"{name}={value}\n")
