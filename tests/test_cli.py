"""
Tests for the campus command line
"""

from unittest.mock import patch

from click.testing import CliRunner
from fastapi import FastAPI

from campus import __version__
from campus.cli import cli


def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_serve_in_memory():
    with patch("campus.cli.uvicorn.run") as mock_run:
        result = CliRunner().invoke(cli, ["serve", "--in-memory", "--port", "4100"])

    assert result.exit_code == 0
    app = mock_run.call_args.args[0]
    assert isinstance(app, FastAPI)
    assert app.state.dispatcher is not None
    assert mock_run.call_args.kwargs["port"] == 4100
