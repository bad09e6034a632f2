#!/usr/bin/env python3
"""Test runner for the ghprovision test suite."""

import sys
import subprocess
from pathlib import Path


def run_test(test_file: str, description: str) -> bool:
    """Run a single test file and return success status."""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"File: {test_file}")
    print('='*60)

    result = subprocess.run(
        [sys.executable, test_file],
        cwd=Path(__file__).parent,
        text=True
    )

    success = result.returncode == 0
    print(f"\n{'✅ PASSED' if success else '❌ FAILED'}: {description}")
    return success


def main():
    """Run all test modules and print a summary."""
    print("ghprovision Test Suite")
    print("="*60)

    tests = [
        ("test_configuration.py", "Configuration Loading and Validation"),
        ("test_models.py", "Request and Result Structures"),
        ("test_chrome.py", "Prompt Surfaces"),
        ("test_repo_naming.py", "Repository Name Resolution"),
        ("test_credentials.py", "Credential Resolution"),
        ("test_github_api.py", "GitHub API Call"),
        ("test_local_git_wiring.py", "Local Remote and Tracking Setup"),
        ("test_provisioner.py", "End-to-End Provisioning"),
        ("test_mcp_server.py", "MCP Tool Surface"),
    ]

    results = []
    for test_file, description in tests:
        results.append((description, run_test(test_file, description)))

    print(f"\n{'='*60}")
    print("TEST SUMMARY")
    print('='*60)

    passed = sum(1 for _, success in results if success)
    for description, success in results:
        print(f"{'✅' if success else '❌'} {description}")

    print(f"\nResults: {passed}/{len(results)} test modules passed")
    return passed == len(results)


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
