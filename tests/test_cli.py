import json

from dotglobe.cli import main


def test_cli_locates_and_exports(tmp_path, half_land_image, capsys):
    image_path = tmp_path / "earth-dark.png"
    half_land_image.save(image_path)
    json_path = tmp_path / "dots.json"
    preview_path = tmp_path / "preview" / "dots.png"

    code = main(
        [
            "--dots", "2000",
            "--image", str(image_path),
            "--lat", "40.7128",
            "--lon", "-74.0060",
            "--json", str(json_path),
            "--preview", str(preview_path),
        ]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "Nearest dot #" in out
    assert "Land dots:" in out
    data = json.loads(json_path.read_text(encoding="utf-8"))
    assert data["dot_count"] == 2000
    assert data["highlight"] is not None
    assert preview_path.exists()


def test_cli_without_image_only_locates(capsys):
    assert main(["--dots", "500", "--lat", "0", "--lon", "0"]) == 0
    assert "Nearest dot #" in capsys.readouterr().out


def test_cli_reports_bad_arguments():
    assert main(["--dots", "1"]) == 2
    assert main(["--dots", "100", "--lat", "10"]) == 2
    assert main(["--dots", "100", "--lat", "95", "--lon", "0"]) == 2
    assert main(["--dots", "100", "--json", "out.json"]) == 2


def test_cli_reports_unreadable_image(tmp_path):
    bogus = tmp_path / "not-an-image.png"
    bogus.write_text("nope", encoding="utf-8")
    assert main(["--dots", "100", "--image", str(bogus)]) == 2
