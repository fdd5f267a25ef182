"""Tests for groundwork.packages module."""

import subprocess

import pytest

from groundwork.packages import (
    build_command,
    detect_package_manager,
    install_packages,
    remove_packages,
)


class TestDetectPackageManager:
    """Tests for detect_package_manager."""

    def test_defaults_to_npm(self, temp_dir):
        """Test that npm is used when there is no lock file."""
        assert detect_package_manager(temp_dir) == "npm"

    @pytest.mark.parametrize(
        "lock_file,expected",
        [
            ("pnpm-lock.yaml", "pnpm"),
            ("yarn.lock", "yarn"),
            ("bun.lockb", "bun"),
            ("bun.lock", "bun"),
            ("package-lock.json", "npm"),
        ],
    )
    def test_detects_from_lock_file(self, temp_dir, lock_file, expected):
        """Test that each lock file selects its manager."""
        (temp_dir / lock_file).write_text("")
        assert detect_package_manager(temp_dir) == expected

    def test_first_lock_file_wins(self, temp_dir):
        """Test precedence when several lock files exist."""
        (temp_dir / "package-lock.json").write_text("{}")
        (temp_dir / "pnpm-lock.yaml").write_text("")
        assert detect_package_manager(temp_dir) == "pnpm"

    def test_preference_overrides_detection(self, temp_dir):
        """Test that a configured manager is used as is."""
        (temp_dir / "yarn.lock").write_text("")
        assert detect_package_manager(temp_dir, "bun") == "bun"

    def test_auto_preference_detects(self, temp_dir):
        """Test that "auto" falls back to lock-file detection."""
        (temp_dir / "yarn.lock").write_text("")
        assert detect_package_manager(temp_dir, "auto") == "yarn"


class TestBuildCommand:
    """Tests for build_command."""

    @pytest.mark.parametrize(
        "manager,expected",
        [
            ("npm", ["npm", "install", "--save-dev", "eslint", "knip"]),
            ("pnpm", ["pnpm", "add", "--save-dev", "eslint", "knip"]),
            ("yarn", ["yarn", "add", "--dev", "eslint", "knip"]),
            ("bun", ["bun", "add", "--dev", "eslint", "knip"]),
        ],
    )
    def test_install(self, manager, expected):
        """Test install commands for every manager."""
        assert build_command(manager, ["eslint", "knip"]) == expected

    def test_remove(self):
        """Test remove commands."""
        assert build_command("npm", ["knip"], remove=True) == ["npm", "uninstall", "knip"]
        assert build_command("pnpm", ["knip"], remove=True) == ["pnpm", "remove", "knip"]


class TestRunPackageManager:
    """Tests for install_packages and remove_packages."""

    def test_install_success(self, temp_dir, mocker):
        """Test a successful install."""
        mock_run = mocker.patch("groundwork.packages.manager.subprocess.run")

        result = install_packages(temp_dir, ["eslint"], manager="pnpm")

        assert result.ok
        assert result.command == "pnpm add --save-dev eslint"
        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args[0] == ["pnpm", "add", "--save-dev", "eslint"]
        assert kwargs["cwd"] == temp_dir
        assert kwargs["check"] is True

    def test_install_failure_reports_last_error_line(self, temp_dir, mocker):
        """Test that a failing command comes back as a result, not an exception."""
        error = subprocess.CalledProcessError(
            1, ["npm"], stderr="npm ERR! one\nnpm ERR! 404 Not Found\n"
        )
        mocker.patch("groundwork.packages.manager.subprocess.run", side_effect=error)

        result = install_packages(temp_dir, ["nope"], manager="npm")

        assert not result.ok
        assert result.message == "npm ERR! 404 Not Found"
        assert result.command == "npm install --save-dev nope"

    def test_failure_without_output(self, temp_dir, mocker):
        """Test the message when the command printed nothing."""
        error = subprocess.CalledProcessError(2, ["yarn"], output="", stderr="")
        mocker.patch("groundwork.packages.manager.subprocess.run", side_effect=error)

        result = remove_packages(temp_dir, ["knip"], manager="yarn")

        assert result.message == "exited with status 2"

    def test_missing_executable(self, temp_dir, mocker):
        """Test that a missing package manager is reported."""
        mocker.patch("groundwork.packages.manager.subprocess.run", side_effect=FileNotFoundError())

        result = install_packages(temp_dir, ["eslint"], manager="bun")

        assert not result.ok
        assert "bun is not installed" in result.message

    def test_empty_package_list_skips_run(self, temp_dir, mocker):
        """Test that nothing is run when there are no packages."""
        mock_run = mocker.patch("groundwork.packages.manager.subprocess.run")

        assert install_packages(temp_dir, []).ok
        assert remove_packages(temp_dir, []).ok
        mock_run.assert_not_called()

    def test_detects_manager_when_not_given(self, temp_dir, mocker):
        """Test that the manager is detected from the project."""
        (temp_dir / "pnpm-lock.yaml").write_text("")
        mock_run = mocker.patch("groundwork.packages.manager.subprocess.run")

        result = remove_packages(temp_dir, ["knip"])

        assert result.command == "pnpm remove knip"
        assert mock_run.call_args[0][0] == ["pnpm", "remove", "knip"]
