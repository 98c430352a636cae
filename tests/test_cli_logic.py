from pathlib import Path

import pytest

from alienshot.cli import build_parser, default_enhanced_path, load_config, main


class TestCLILogic:
    def test_default_enhanced_path(self):
        assert default_enhanced_path(Path("shots/DSC0001.JPG")) == Path(
            "shots/DSC0001_enhanced.JPG"
        )
        assert default_enhanced_path(Path("raw")) == Path("raw_enhanced.jpg")

    def test_directory_options_after_command(self, tmp_path):
        args = build_parser().parse_args(
            ["process", "a.jpg", "b.jpg", "--edited-dir", str(tmp_path), "--parallel"]
        )

        assert args.command == "process"
        assert args.inputs == ["a.jpg", "b.jpg"]
        assert args.edited_dir == str(tmp_path)
        assert args.parallel is True

    def test_load_config_applies_overrides(self, tmp_path):
        args = build_parser().parse_args(
            ["watch", "--watch-dir", str(tmp_path), "--min-size", "10", "--workers", "2"]
        )
        config = load_config(args)

        assert config.watch_dir == tmp_path
        assert config.min_file_size == 10
        assert config.max_workers == 2

    def test_list_filters(self, capsys):
        assert main(["--list-filters"]) == 0

        out = capsys.readouterr().out
        assert "Ollie" in out
        assert "Eiffel" in out
        assert "Reel" in out

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])

    def test_invalid_configuration(self):
        assert main(["process", "a.jpg", "--min-size", "-5"]) == 2

    def test_process_command(self, capture, dirs, capsys):
        code = main(
            [
                "process",
                str(capture),
                "--edited-dir",
                str(dirs["edited"]),
                "--archive-dir",
                str(dirs["archive"]),
            ]
        )

        assert code == 0
        assert "3/3 filters applied" in capsys.readouterr().out
        assert (dirs["archive"] / capture.name).is_file()

    def test_process_missing_file(self, dirs, capsys):
        code = main(
            [
                "process",
                str(dirs["watch"] / "missing.jpg"),
                "--edited-dir",
                str(dirs["edited"]),
                "--archive-dir",
                str(dirs["archive"]),
            ]
        )

        assert code == 1
        assert "not found" in capsys.readouterr().err

    def test_enhance_command(self, capture, tmp_path):
        output = tmp_path / "clean.jpg"

        assert main(["enhance", str(capture), "-o", str(output)]) == 0
        assert output.is_file()
        # The enhance command leaves the original alone.
        assert capture.is_file()

    def test_enhance_missing_input(self, tmp_path):
        assert main(["enhance", str(tmp_path / "nope.jpg")]) == 1
