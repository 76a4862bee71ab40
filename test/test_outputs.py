import json
import re

import pytest

from docker_meta.config import Inputs
from docker_meta.outputs import generate_outputs, write_github_output

pytestmark = [pytest.mark.unit]


class TestGenerateOutputs:
    def test_outputs(self, make_meta, tmp_path):
        meta = make_meta(["type=ref,event=branch", "type=sha"], images=["myorg/app"])
        inputs = Inputs.from_text(sep_tags=",")
        outputs = generate_outputs(meta, inputs, ["manifest"], tmp_path)

        assert outputs["version"] == "dev"
        assert outputs["tags"] == "myorg/app:dev,myorg/app:sha-860c190"
        assert outputs["labels"] == "\n".join(meta.get_labels())
        assert outputs["annotations"] == "\n".join(meta.get_leveled_annotations(["manifest"]))
        assert json.loads(outputs["json"]) == meta.get_json(["manifest"])
        assert "\n" not in outputs["json"]

        for name in ["tags", "labels", "annotations"]:
            path = tmp_path / f"docker-meta-bake-{name}.json"
            assert outputs[f"bake-file-{name}"] == str(path.resolve())
            assert path.is_file()
        assert outputs["bake-file"] == str((tmp_path / "docker-meta-bake.json").resolve())

        annotations_bake = json.loads((tmp_path / "docker-meta-bake-annotations.json").read_text())
        assert annotations_bake["target"]["docker-metadata-action"]["annotations"][0].startswith("manifest:")

    def test_no_version(self, make_meta, tmp_path, caplog):
        meta = make_meta(["type=semver,pattern={{version}}"], images=["myorg/app"])
        outputs = generate_outputs(meta, Inputs(), ["manifest"], tmp_path)

        assert outputs["version"] == ""
        assert outputs["tags"] == ""
        assert "No Docker image version has been generated" in caplog.text
        assert "No Docker tag has been generated" in caplog.text


class TestWriteGithubOutput:
    def test_single_line(self, tmp_path):
        path = tmp_path / "github_output"
        write_github_output(path, {"version": "dev", "tags": "myorg/app:dev"})
        assert path.read_text() == "version=dev\ntags=myorg/app:dev\n"

    def test_multi_line(self, tmp_path):
        path = tmp_path / "github_output"
        write_github_output(path, {"tags": "myorg/app:dev\nmyorg/app:latest"})
        m = re.fullmatch(r"tags<<(ghadelimiter_[0-9a-f-]+)\nmyorg/app:dev\nmyorg/app:latest\n\1\n", path.read_text())
        assert m is not None

    def test_appends(self, tmp_path):
        path = tmp_path / "github_output"
        path.write_text("previous=value\n")
        write_github_output(path, {"version": ""})
        assert path.read_text() == "previous=value\nversion=\n"
