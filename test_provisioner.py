#!/usr/bin/env python3
"""
End-to-end tests for RepositoryProvisioner.after_mint.

The GitHub API is replaced by a mock session; local repositories are real.
Verifies that local git is only touched after GitHub confirmed the
repository and that a declined prompt has no side effects at all.
"""

import json
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

import requests

# Add the project root to the path so we can import ghprovision modules
sys.path.insert(0, str(Path(__file__).parent))

from git import GitCommandError, Repo

from ghprovision.chrome import TerminalChrome
from ghprovision.config import Config
from ghprovision.models import Credentials, Distribution, ScaffoldContext
from ghprovision.provisioner import RepositoryProvisioner

SSH_URL = "git@github.com:alice/my-dist.git"


def make_response(status_code, body):
    response = Mock()
    response.status_code = status_code
    response.reason = "Created" if status_code == 201 else "Error"
    response.json.return_value = body
    return response


class TestRepositoryProvisioner(unittest.TestCase):

    def setUp(self):
        """Set up test environment before each test."""
        print(f"\nSetting up test: {self._testMethodName}")
        self.temp_dir = Path(tempfile.mkdtemp())
        self.root = self.temp_dir / "My-Dist"
        self.root.mkdir()

        self.session = Mock()
        self.session.post.return_value = make_response(
            201, {"ssh_url": SSH_URL, "full_name": "alice/my-dist"}
        )
        self.chrome = Mock()
        self.dist = Distribution(name="My-Dist")

    def tearDown(self):
        """Clean up test environment after each test."""
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def _provisioner(self, config=None, resolvers=None):
        return RepositoryProvisioner(
            config or Config(),
            self.dist,
            chrome=self.chrome,
            resolvers=resolvers if resolvers is not None else [],
            session=self.session,
        )

    def _init_repo(self) -> Repo:
        repo = Repo.init(self.root, initial_branch="main")
        self.addCleanup(repo.close)
        return repo

    def _sent_payload(self):
        return json.loads(self.session.post.call_args.kwargs["data"])

    def test_declined_prompt_has_no_side_effects(self):
        repo = self._init_repo()
        self.chrome.prompt_yn.return_value = False
        resolver = Mock(return_value=Credentials("alice", "s3cret"))

        outcome = self._provisioner(Config(prompt=True), [resolver]).after_mint(
            ScaffoldContext(mint_root=self.root)
        )

        self.assertTrue(outcome.success)
        self.assertEqual(outcome.operation, "declined")
        self.session.post.assert_not_called()
        resolver.assert_not_called()
        self.assertEqual(repo.remotes, [])
        prompt = self.chrome.prompt_yn.call_args.args[0]
        self.assertEqual(prompt, "Shall I create a GitHub repository for My-Dist?")
        self.assertTrue(self.chrome.prompt_yn.call_args.kwargs["default"])
        print("  ✓ Declined prompt: no request, no git changes")

    def test_accepted_prompt_creates_repository(self):
        self.chrome.prompt_yn.return_value = True

        outcome = self._provisioner(Config(prompt=True)).after_mint(ScaffoldContext(mint_root=self.root))

        self.assertTrue(outcome.success)
        self.session.post.assert_called_once()

    def test_terminal_chrome_from_host_integration(self):
        answers = Mock(return_value="n")
        provisioner = RepositoryProvisioner(
            Config(prompt=True),
            self.dist,
            chrome=TerminalChrome(input_func=answers, getpass_func=Mock()),
            resolvers=[],
            session=self.session,
        )

        outcome = provisioner.after_mint(ScaffoldContext(mint_root=self.root))

        self.assertEqual(outcome.operation, "declined")
        answers.assert_called_once_with("Shall I create a GitHub repository for My-Dist? [Y/n] ")
        self.session.post.assert_not_called()

    def test_no_prompt_by_default(self):
        self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))
        self.chrome.prompt_yn.assert_not_called()

    def test_success_wires_local_repository(self):
        repo = self._init_repo()

        outcome = self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))

        self.assertTrue(outcome.success)
        self.assertEqual(outcome.ssh_url, SSH_URL)
        self.assertTrue(outcome.local_wiring.remote_added)
        self.assertTrue(outcome.local_wiring.tracking_configured)
        self.assertEqual(repo.remote("origin").url, SSH_URL)
        print("  ✓ Remote 'origin' points at the new repository")

    def test_success_without_local_repository(self):
        outcome = self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))

        self.assertTrue(outcome.success)
        self.assertFalse(outcome.local_wiring.remote_added)
        self.assertFalse((self.root / ".git").exists())

    def test_api_failure_leaves_local_repository_untouched(self):
        repo = self._init_repo()
        self.session.post.return_value = make_response(
            422, {"message": "Repository creation failed."}
        )

        outcome = self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.message, "Repository creation failed.")
        self.assertEqual(outcome.error.error_code, "REMOTE_VALIDATION_FAILED")
        self.assertIsNone(outcome.local_wiring)
        self.assertEqual(repo.remotes, [])
        self.assertFalse(repo.config_reader("repository").has_section('branch "main"'))
        self.assertEqual(self.session.post.call_count, 1)
        print("  ✓ Failed creation: no remote, no tracking, no retry")

    def test_transport_failure_leaves_local_repository_untouched(self):
        repo = self._init_repo()
        self.session.post.side_effect = requests.ConnectionError("unreachable")

        outcome = self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.error_code, "TRANSPORT_ERROR")
        self.assertEqual(repo.remotes, [])

    def test_existing_remote_skipped(self):
        repo = self._init_repo()
        repo.create_remote("origin", "git@example.com:old/place.git")

        outcome = self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))

        self.assertTrue(outcome.success)
        self.assertFalse(outcome.local_wiring.remote_added)
        self.assertEqual(repo.remote("origin").url, "git@example.com:old/place.git")

    def test_configured_remote_name(self):
        repo = self._init_repo()

        self._provisioner(Config(remote="github")).after_mint(ScaffoldContext(mint_root=self.root))

        self.assertEqual(repo.remote("github").url, SSH_URL)

    def test_local_git_failure_is_reported(self):
        with patch("ghprovision.provisioner.wire_local_repository",
                   side_effect=GitCommandError(["git", "remote", "add"], 128, "fatal: permission")):
            outcome = self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.operation, "wire_local_repository")
        self.assertEqual(outcome.ssh_url, SSH_URL)
        self.assertEqual(outcome.to_dict()["ssh_url"], SSH_URL)

    def test_config_write_failure_is_reported(self):
        repo = self._init_repo()

        with patch("ghprovision.local_git.configure_tracking", side_effect=PermissionError("config.lock")):
            outcome = self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.operation, "wire_local_repository")
        self.assertEqual(outcome.error_code, "LOCAL_GIT_ERROR")
        self.assertEqual(outcome.ssh_url, SSH_URL)
        self.assertEqual(outcome.to_dict()["error_code"], "LOCAL_GIT_ERROR")
        self.assertEqual(repo.remote("origin").url, SSH_URL)
        print("  ✓ Locked git config reported as a failed outcome")

    def test_request_built_from_configuration(self):
        config = Config(public=False, has_issues=False, has_downloads=False)

        with self.assertLogs("ghprovision.provisioner", level="DEBUG") as logs:
            self._provisioner(config).after_mint(
                ScaffoldContext(mint_root=self.root, descr="Does things")
            )

        self.assertEqual(self._sent_payload(), {
            "name": "My-Dist",
            "public": False,
            "description": "Does things",
            "has_issues": False,
            "has_wiki": True,
            "has_downloads": False,
        })
        messages = [record.getMessage() for record in logs.records]
        self.assertIn("Issues disabled", messages)
        self.assertIn("Wiki enabled", messages)
        self.assertIn("Downloads disabled", messages)

    def test_name_precedence(self):
        cases = [
            ("explicit", "{{ dist.name | lower }}", "explicit"),
            ("explicit", None, "explicit"),
            (None, "{{ dist.name | lower }}", "my-dist"),
            (None, None, "My-Dist"),
        ]
        for explicit, template, expected in cases:
            with self.subTest(explicit=explicit, template=template):
                self.session.post.reset_mock()
                self._provisioner(Config(repo=template)).after_mint(
                    ScaffoldContext(mint_root=self.root, repo=explicit)
                )
                self.assertEqual(self._sent_payload()["name"], expected)

    def test_invalid_template_fails_before_request(self):
        outcome = self._provisioner(Config(repo="{{ nope.name }}")).after_mint(
            ScaffoldContext(mint_root=self.root)
        )

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.error_code, "CONFIGURATION_ERROR")
        self.session.post.assert_not_called()

    def test_credentials_sent_as_basic_auth(self):
        resolvers = [lambda: Credentials("alice", "s3cret")]

        self._provisioner(resolvers=resolvers).after_mint(ScaffoldContext(mint_root=self.root))

        headers = self.session.post.call_args.kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Basic YWxpY2U6czNjcmV0")

    def test_unauthenticated_when_no_credentials(self):
        self._provisioner(resolvers=[lambda: None]).after_mint(ScaffoldContext(mint_root=self.root))

        self.assertNotIn("Authorization", self.session.post.call_args.kwargs["headers"])

    def test_host_mapping_context(self):
        outcome = self._provisioner().after_mint({"mint_root": str(self.root), "repo": "from-host", "descr": None})

        self.assertTrue(outcome.success)
        self.assertEqual(self._sent_payload()["name"], "from-host")
        self.assertNotIn("description", self._sent_payload())

    def test_outcome_to_dict(self):
        self._init_repo()
        outcome = self._provisioner().after_mint(ScaffoldContext(mint_root=self.root))

        result = outcome.to_dict()
        self.assertTrue(result["success"])
        self.assertEqual(result["data"]["repository"], "My-Dist")
        self.assertEqual(result["data"]["local_wiring"]["branch"], "main")


if __name__ == "__main__":
    unittest.main(verbosity=2)
