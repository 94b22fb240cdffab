"""Tests for the command-line interface."""

import os
from unittest.mock import patch

import pytest

from hackscene.cli import SCENE_OPTIONS, build_parser, main
from hackscene.config import SceneConfig


@pytest.fixture(autouse=True)
def clean_environ():
    """Keep exported HACKSCENE_* variables from leaking between tests."""
    with patch.dict(os.environ, clear=False):
        for env in SCENE_OPTIONS.values():
            os.environ.pop(env, None)
        yield


class TestMain:
    """Tests for cli.main()."""

    def test_runs_uvicorn_with_app(self):
        with patch("hackscene.cli.uvicorn.run") as run, patch("hackscene.cli.configure_logging"):
            assert main(["--host", "0.0.0.0", "--port", "9001"]) == 0

        run.assert_called_once()
        args, kwargs = run.call_args
        assert args == ("hackscene.server.app:app",)
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9001
        assert kwargs["reload"] is False

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])

        assert exc.value.code == 0
        assert "0.1.0" in capsys.readouterr().out

    def test_bad_port(self):
        with pytest.raises(SystemExit):
            main(["--port", "http"])

    def test_scene_options_reach_config(self, tmp_path):
        skull = tmp_path / "skull.png"
        argv = ["--width", "800", "--fps", "30", "--skull", str(skull), "--seed", "42"]

        with patch("hackscene.cli.uvicorn.run"), patch("hackscene.cli.configure_logging"):
            main(argv)

        assert os.environ["HACKSCENE_WIDTH"] == "800"
        config = SceneConfig(_env_file=None)
        assert config.width == 800
        assert config.fps == 30.0
        assert config.skull_image == skull
        assert config.seed == 42
        assert config.height == 768

    def test_unset_scene_options_are_not_exported(self):
        with patch("hackscene.cli.uvicorn.run"), patch("hackscene.cli.configure_logging"):
            main([])

        assert not any(env in os.environ for env in SCENE_OPTIONS.values())

    def test_help_lists_scene_options(self):
        text = build_parser().format_help()

        for option in ("--background", "--skull", "--seed", "--fps"):
            assert option in text
