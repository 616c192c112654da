"""Directory denylist applied at every level of a scan.

Matching is by exact directory basename. The lists are part of the scanner
contract: security-sensitive stores are never read, and dependency/build
trees are never walked. User configuration can only add names.
"""

from __future__ import annotations

from typing import Iterable

# Key, credential and secret stores, browser profiles, keychains, VPN configs
SECURITY_EXCLUSIONS = frozenset({
    ".ssh", ".gnupg", ".gpg", ".pki",
    ".aws", ".azure", ".gcp", ".kube", ".docker",
    "credentials", "secrets",
    ".mozilla", ".chrome", ".chromium", "Chrome", "Firefox",
    "Keychains", ".password-store", ".pass",
    ".certificates", "cert", "certs",
    ".openvpn", ".wireguard",
})

# Dependency caches, VCS metadata, build output, IDE state
DEVELOPMENT_EXCLUSIONS = frozenset({
    "node_modules", "vendor", "bower_components", "jspm_packages", ".pnpm", ".yarn",
    "dist", "build", "out", "target", ".next", ".nuxt", ".vuepress", ".docusaurus",
    ".cache", ".tmp", "tmp", "temp",
    ".git", ".svn", ".hg", ".bzr",
    ".vscode", ".idea", ".vs", ".eclipse", ".netbeans",
    "__pycache__", ".pytest_cache", ".mypy_cache", ".ruff_cache", ".tox", ".eggs",
    "venv", ".venv", "env", ".env", "site-packages",
    ".bundle", "gems",
    "gradle", ".gradle",
    "bin", "obj", "packages",
    "coverage", ".nyc_output", ".coverage", "htmlcov",
    "_site", "public",
})

DEFAULT_EXCLUSIONS = SECURITY_EXCLUSIONS | DEVELOPMENT_EXCLUSIONS


def build_exclusions(extra: Iterable[str] = ()) -> frozenset[str]:
    """Return the denylist extended with user-configured names."""
    extra_names = {name.strip().strip("/") for name in extra if name and name.strip()}
    return DEFAULT_EXCLUSIONS | extra_names


def is_excluded(dir_name: str, exclusions: frozenset[str] = DEFAULT_EXCLUSIONS) -> bool:
    """Check whether a directory basename is on the denylist."""
    return dir_name in exclusions
