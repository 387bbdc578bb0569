from pathlib import Path

import pytest

from bridge.errors import UploadError
from tools.artifacts import ArtifactStore


def test_upload_directory(tmp_path: Path) -> None:
    diag = tmp_path / "work" / ".bridge"
    (diag / "logs").mkdir(parents=True)
    (diag / "bridge.log").write_text("hello", encoding="utf-8")
    (diag / "logs" / "detect.log").write_text("x", encoding="utf-8")

    ref = ArtifactStore(tmp_path / "artifacts").upload_artifact("bridge_diagnostics", diag)

    assert ref.path == tmp_path / "artifacts" / "bridge_diagnostics"
    assert ref.files == ["bridge.log", str(Path("logs") / "detect.log")]
    assert ref.size == 6


def test_upload_single_file(tmp_path: Path) -> None:
    sarif = tmp_path / "report.sarif.json"
    sarif.write_text("{}", encoding="utf-8")
    ref = ArtifactStore(tmp_path / "artifacts").upload_artifact("polaris_sarif_report", sarif)
    assert ref.files == ["report.sarif.json"]


@pytest.mark.parametrize("name", ["", "..", "a/b"])
def test_invalid_names(tmp_path: Path, name: str) -> None:
    with pytest.raises(UploadError):
        ArtifactStore(tmp_path).upload_artifact(name, tmp_path)


def test_missing_source(tmp_path: Path) -> None:
    with pytest.raises(UploadError):
        ArtifactStore(tmp_path / "a").upload_artifact("x", tmp_path / "nope")
