import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from license_tool.cli import app
from license_tool.exceptions import MissingOrigin
from license_tool.models import PackageIdentity, ResolutionReport, ResolvedRecord

runner = CliRunner()

EXPECTED_REPORT = (
    "Component,Origin,License,Copyright\n"
    "left-pad,https://github.com/left-pad/left-pad,MIT,Copyright (c) 2020 Jane Doe\n"
    "Zlib-Wrapper,https://example.org/zlib-wrapper,Zlib,\n"
)


@pytest.fixture
def project(tmp_path: Path, graph_file: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run commands from the directory holding deps.json."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_write_command(project: Path) -> None:
    """Test that write produces the canonical report."""
    result = runner.invoke(app, ["write", "-m", "deps.json"])

    assert result.exit_code == 0
    assert "Wrote 2 records" in result.stdout
    assert (project / "LICENSE-3rdparty.csv").read_text() == EXPECTED_REPORT


def test_write_warns_about_missing_copyright(project: Path) -> None:
    result = runner.invoke(app, ["write", "-m", "deps.json"])

    assert result.exit_code == 0
    assert "No copyright found for Zlib-Wrapper 0.2.0" in result.output


def test_write_custom_output(project: Path) -> None:
    result = runner.invoke(app, ["write", "-m", "deps.json", "-o", "third-party.csv"])

    assert result.exit_code == 0
    assert (project / "third-party.csv").read_text() == EXPECTED_REPORT


def test_check_up_to_date(project: Path) -> None:
    """Test that check passes right after write."""
    runner.invoke(app, ["write", "-m", "deps.json"])

    result = runner.invoke(app, ["check", "-m", "deps.json"])

    assert result.exit_code == 0
    assert "is up to date" in result.stdout


def test_check_reports_changed_license(project: Path) -> None:
    """Test that an override changing one license is the only difference."""
    runner.invoke(app, ["write", "-m", "deps.json"])
    (project / "license-tool.toml").write_text(
        '[overrides]\n"left-pad" = { license = "ISC" }\n'
    )

    result = runner.invoke(app, ["check", "-m", "deps.json"])

    assert result.exit_code == 1
    assert "is not up to date" in result.stdout
    assert "left-pad:" in result.stdout
    assert "License: 'MIT' -> 'ISC'" in result.stdout
    assert result.stdout.count(" -> ") == 1


def test_check_reports_new_component(project: Path, graph_file: Path) -> None:
    runner.invoke(app, ["write", "-m", "deps.json"])
    data = json.loads(graph_file.read_text())
    data["packages"].append(
        {"name": "itoa", "version": "1.0.0", "license": "MIT", "repository": "https://x/itoa"}
    )
    graph_file.write_text(json.dumps(data))

    result = runner.invoke(app, ["check", "-m", "deps.json"])

    assert result.exit_code == 1
    assert "itoa:" in result.stdout
    assert "+ origin='https://x/itoa'" in result.stdout


def test_check_missing_report(project: Path) -> None:
    result = runner.invoke(app, ["check", "-m", "deps.json"])

    assert result.exit_code == 1
    assert "Report not found" in result.output


def test_check_unparseable_report(project: Path) -> None:
    (project / "LICENSE-3rdparty.csv").write_text("Name,Version\nfoo,1.0\n")

    result = runner.invoke(app, ["check", "-m", "deps.json"])

    assert result.exit_code == 1
    assert "Could not parse" in result.output


def test_check_non_canonical_order(project: Path) -> None:
    """Test that a report with the right rows in the wrong order fails."""
    header, first, second = EXPECTED_REPORT.splitlines(keepends=True)
    (project / "LICENSE-3rdparty.csv").write_text(header + second + first)

    result = runner.invoke(app, ["check", "-m", "deps.json"])

    assert result.exit_code == 1
    assert "canonical" in result.stdout


def test_dump_csv(project: Path) -> None:
    """Test that dump prints the report without writing it."""
    result = runner.invoke(app, ["dump", "-m", "deps.json"])

    assert result.exit_code == 0
    assert EXPECTED_REPORT in result.stdout
    assert not (project / "LICENSE-3rdparty.csv").exists()


def test_dump_markdown(project: Path) -> None:
    result = runner.invoke(app, ["dump", "-m", "deps.json", "--format", "markdown"])

    assert result.exit_code == 0
    assert "| left-pad | https://github.com/left-pad/left-pad | MIT |" in result.stdout


def test_unresolvable_package_blocks_write(project: Path, graph_file: Path) -> None:
    """Test that nothing is written when a package has no license."""
    data = json.loads(graph_file.read_text())
    data["packages"].append({"name": "mystery", "version": "0.0.1", "homepage": "https://m"})
    graph_file.write_text(json.dumps(data))

    result = runner.invoke(app, ["write", "-m", "deps.json"])

    assert result.exit_code == 1
    assert "mystery-0.0.1 is missing a license" in result.output
    assert not (project / "LICENSE-3rdparty.csv").exists()


def test_fail_fast(project: Path, graph_file: Path) -> None:
    data = json.loads(graph_file.read_text())
    data["packages"].append({"name": "mystery", "version": "0.0.1", "license": "MIT"})
    graph_file.write_text(json.dumps(data))

    result = runner.invoke(app, ["write", "-m", "deps.json", "--fail-fast"])

    assert result.exit_code == 1
    assert "is missing a repository" in result.output


def test_invalid_config(project: Path) -> None:
    (project / "license-tool.toml").write_text('[overrides]\nfoo = { licence = "MIT" }\n')

    result = runner.invoke(app, ["write", "-m", "deps.json"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_verbose_lists_overrides(project: Path) -> None:
    """Test that verbose output names the loaded overrides."""
    (project / "license-tool.toml").write_text(
        "[overrides]\n"
        '"left-pad" = { origin = "https://example.org/left-pad" }\n'
        '"left-pad-1.3.0" = { license = "ISC" }\n'
    )

    result = runner.invoke(app, ["write", "-m", "deps.json", "-v"])

    assert result.exit_code == 0
    assert "Loaded 2 override(s)" in result.output
    assert "left-pad, left-pad-1.3.0" in result.output


def test_unsupported_manifest(project: Path) -> None:
    result = runner.invoke(app, ["write", "-m", "Cargo.lock"])

    assert result.exit_code == 1
    assert "No scanner available" in result.output


@pytest.fixture
def mock_scan_and_resolve(mocker):
    """Mock the _scan_and_resolve function."""
    report = ResolutionReport(
        records=[
            ResolvedRecord(
                name="serde",
                version="1.0.0",
                license="MIT OR Apache-2.0",
                origin="https://github.com/serde-rs/serde",
            ),
            ResolvedRecord(
                name="serde_derive",
                version="1.0.0",
                license="MIT OR Apache-2.0",
                origin="https://github.com/serde-rs/serde",
            ),
        ]
    )
    return mocker.patch("license_tool.cli._scan_and_resolve", return_value=report)


def test_merge_aliases(tmp_path, monkeypatch, mock_scan_and_resolve) -> None:
    """Test that --merge-aliases collapses components sharing a repository."""
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["write", "--merge-aliases"])

    assert result.exit_code == 0
    assert (tmp_path / "LICENSE-3rdparty.csv").read_text() == (
        "Component,Origin,License,Copyright\n"
        "serde,https://github.com/serde-rs/serde,MIT OR Apache-2.0,\n"
    )


def test_features_are_passed_through(tmp_path, monkeypatch, mock_scan_and_resolve) -> None:
    monkeypatch.chdir(tmp_path)

    runner.invoke(app, ["dump", "--features", "cli, socks", "--all-features"])

    kwargs = mock_scan_and_resolve.call_args.kwargs
    assert kwargs["features"] == ["cli", "socks"]
    assert kwargs["all_features"] is True


def test_errors_listed(tmp_path, monkeypatch, mocker) -> None:
    """Test that every resolution error is printed."""
    monkeypatch.chdir(tmp_path)
    report = ResolutionReport(
        errors=[
            MissingOrigin(PackageIdentity("a", "1.0.0")),
            MissingOrigin(PackageIdentity("b", "2.0.0")),
        ]
    )
    mocker.patch("license_tool.cli._scan_and_resolve", return_value=report)

    result = runner.invoke(app, ["check"])

    assert result.exit_code == 1
    assert "Could not resolve 2 package problem(s)" in result.output
    assert "Package a-1.0.0 is missing a repository" in result.output
    assert "Package b-2.0.0 is missing a repository" in result.output
