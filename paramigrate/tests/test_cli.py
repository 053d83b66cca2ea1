"""Tests for the command-line entry point."""

import json

from paramigrate.__main__ import build_parser, main


def _make_project(root):
    (root / "package.json").write_text(json.dumps({
        "dependencies": {"@web3modal/wagmi": "^4.0.0", "wagmi": "^2.0.0"},
    }))
    (root / "src").mkdir()
    (root / "src" / "main.tsx").write_text(
        "import { createWeb3Modal } from '@web3modal/wagmi/react';\n"
        "createWeb3Modal({ projectId: 'pid', wagmiConfig: config });\n"
    )
    return str(root)


class TestCli:

    def test_parser_requires_command(self):
        parser = build_parser()
        args = parser.parse_args(["plan", "/tmp/x", "--strategy", "reown-to-para"])
        assert args.command == "plan"
        assert args.strategy == "reown-to-para"

    def test_analyze(self, tmp_path, capsys):
        assert main(["analyze", _make_project(tmp_path)]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["strategy"] == "web3modal-to-para"

    def test_plan(self, tmp_path, capsys):
        assert main(["plan", _make_project(tmp_path)]) == 0
        plan = json.loads(capsys.readouterr().out)
        assert plan["strategy_name"] == "web3modal-to-para"
        assert plan["estimated_duration_seconds"] == 120

    def test_migrate(self, tmp_path, capsys):
        assert main(["migrate", _make_project(tmp_path)]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["status"] == "succeeded"

    def test_validate_unmigrated_project_fails(self, tmp_path, capsys):
        assert main(["validate", _make_project(tmp_path)]) == 1
        payload = json.loads(capsys.readouterr().out)
        assert payload["completion"]["valid"] is False

    def test_scan_error_exits_2(self, tmp_path, capsys):
        assert main(["plan", str(tmp_path / "missing")]) == 2
        assert "error:" in capsys.readouterr().err

    def test_compatibility(self, tmp_path, capsys):
        assert main(["compatibility", _make_project(tmp_path)]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["compatibility_score"] == 100
        assert report["imports"]["reown_imports"] == 1
        assert "Update ReOwn/Web3Modal imports to Para SDK imports" in report["recommendations"]
