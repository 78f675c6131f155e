"""Tests for sqlserver_connect.__main__ -- CLI output and exit codes."""

from __future__ import annotations

import json
import os
import sys
from unittest.mock import patch

import pytest

from sqlserver_connect.__main__ import main
from sqlserver_connect.errors import ConnectionCheckError


RESULT = {
    "server": "localhost,1433",
    "database": "master",
    "user": "sa",
    "test_value": 1,
    "product_name": "Microsoft SQL Server",
    "product_version": "16.00.4135",
    "driver_name": "libmsodbcsql-18.3.so.2.1",
    "driver_version": "18.03.0002",
    "catalog": "master",
    "duration_seconds": 0.05,
}


def _run(*argv):
    with patch.object(sys, "argv", ["sqlserver_connect", *argv]):
        main()


class TestConfigurationErrors:
    def test_missing_username_exits(self, clean_env, capsys):
        os.environ["PASSWORD"] = "pw"
        with patch("sqlserver_connect.__main__.run_check") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                _run()
        assert exc_info.value.code == 1
        mock_run.assert_not_called()
        assert "USERNAME environment variable is required" in capsys.readouterr().err

    def test_empty_password_exits_before_connecting(self, clean_env, mock_pyodbc, capsys):
        os.environ.update({"USERNAME": "sa", "PASSWORD": ""})
        with pytest.raises(SystemExit) as exc_info:
            _run()
        assert exc_info.value.code == 1
        mock_pyodbc.connect.assert_not_called()
        assert "PASSWORD environment variable is required" in capsys.readouterr().err


class TestSuccess:
    @patch("sqlserver_connect.__main__.run_check", return_value=RESULT)
    def test_prints_report(self, mock_run, clean_env, capsys):
        os.environ.update({"USERNAME": "sa", "PASSWORD": "Pw1!"})
        _run()

        out = capsys.readouterr().out
        assert "  Host: localhost" in out
        assert "  Port: 1433" in out
        assert "  Database: master" in out
        assert "  User: sa" in out
        assert "  Domain: (not set)" in out
        assert "Pwd=***;" in out
        assert "Pw1!" not in out
        assert "Result: TestValue = 1" in out
        assert "  Product Name: Microsoft SQL Server" in out
        assert "  Catalog: master" in out
        assert "=== Connection Demo Completed Successfully ===" in out

    @patch("sqlserver_connect.__main__.run_check", return_value=RESULT)
    def test_domain_shown(self, mock_run, clean_env, capsys):
        os.environ.update({"USERNAME": "alice", "PASSWORD": "pw;=x", "DOMAIN": "CORP"})
        _run()

        out = capsys.readouterr().out
        assert "  Domain: CORP" in out
        assert "Uid=CORP\\alice;" in out
        assert "pw;=x" not in out
        descriptor = mock_run.call_args[0][0]
        assert descriptor.effective_user == "CORP\\alice"

    @patch("sqlserver_connect.__main__.run_check", return_value=RESULT)
    def test_flags_override_transport(self, mock_run, clean_env, capsys):
        os.environ.update({"USERNAME": "sa", "PASSWORD": "pw"})
        _run("--encrypt", "--validate-certificate", "--driver", "ODBC Driver 17 for SQL Server")

        descriptor = mock_run.call_args[0][0]
        assert descriptor.encrypt is True
        assert descriptor.trust_server_certificate is False
        assert descriptor.driver == "ODBC Driver 17 for SQL Server"

    @patch("sqlserver_connect.__main__.run_check", return_value=RESULT)
    def test_env_file_flag(self, mock_run, clean_env, capsys):
        env_file = clean_env / "alt.env"
        env_file.write_text("USERNAME=fromfile\nPASSWORD=pw\nHOST=filehost\n")
        _run("--env-file", str(env_file))

        descriptor = mock_run.call_args[0][0]
        assert descriptor.host == "filehost"
        assert descriptor.user == "fromfile"

    @patch("sqlserver_connect.__main__.run_check", return_value=RESULT)
    def test_json_output(self, mock_run, clean_env, capsys):
        os.environ.update({"USERNAME": "sa", "PASSWORD": "pw"})
        _run("--json")

        out = capsys.readouterr().out
        payload = json.loads(out[out.index("{\n"):])
        assert payload["test_value"] == 1
        assert payload["catalog"] == "master"


class TestFailure:
    def test_connect_failure_reports_and_exits(
        self, clean_env, mock_pyodbc, login_failed, capsys,
    ):
        os.environ.update({"USERNAME": "sa", "PASSWORD": "Pw1!"})
        mock_pyodbc.connect.side_effect = login_failed

        with pytest.raises(SystemExit) as exc_info:
            _run()

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Failed to connect to SQL Server!" in err
        assert "Login failed for user 'sa'" in err
        assert "  SQL State: 28000" in err
        assert "  Error Code: 18456" in err
        assert "  Cause: FakeDriverError" in err
        assert "Stack Trace:" in err
        assert "Traceback" in err
        assert "Pw1!" not in err

    @patch("sqlserver_connect.__main__.run_check")
    def test_password_masked_in_failure(self, mock_run, clean_env, capsys):
        os.environ.update({"USERNAME": "sa", "PASSWORD": "hunter2"})
        mock_run.side_effect = ConnectionCheckError("bad pwd hunter2", "28000", 18456)

        with pytest.raises(SystemExit):
            _run()

        err = capsys.readouterr().err
        assert "hunter2" not in err
