"""
Git repository adapter for project mining.

This module wraps the git commands used to fingerprint a local checkout of a
project: its root commits, the current head, the main branch and the date of
the last commit. It only reads the local repository and never fetches.
"""

from pathlib import Path
import subprocess
from typing import Generator

from core.exceptions import GitCommandError


class GitClient:
    """
    Client for reading facts out of a local git checkout.

    Attributes:
        root: The root path of the checkout this client operates on.
    """

    def __init__(self, root: Path):
        """
        Initialize a GitClient for the specified checkout.

        Args:
            root: The root directory path of the git checkout.
        """
        self.root = root
        self.cmd = ["git", "ls-files", "--cached", "--others", "--exclude-standard"]

    def is_repo(self) -> bool:
        """
        Check if the root path is inside a git working tree.

        Returns:
            bool: True if the root is a valid git repository, False otherwise.
        """
        try:
            subprocess.run(
                ["git", "rev-parse", "--is-inside-work-tree"],
                cwd=self.root,
                text=True,
                check=True,  # This triggers except block
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            return True
        except (subprocess.CalledProcessError, OSError):
            return False

    def stream_file_paths(self) -> Generator[Path, None, None]:
        """
        Lazily yield the tracked and untracked-but-not-ignored files of the checkout.

        Yields:
            Path: A path relative to the checkout root.
        """
        with self._create_subprocess(self.cmd) as process:
            if process.stdout:
                for p in process.stdout:
                    yield Path(p.strip())

            process.wait()

    def get_root_hashes(self) -> list[str]:
        """
        Return the hashes of the commits without parents, in the order git lists them.

        A history can have several roots, e.g. after merging unrelated projects.
        """
        output = self._run(["git", "rev-list", "--max-parents=0", "HEAD"])
        return [line.strip() for line in output.splitlines() if line.strip()]

    def get_head_commit(self) -> str:
        return self._run(["git", "rev-parse", "HEAD"]).strip()

    def get_current_branch(self) -> str:
        return self._run(["git", "rev-parse", "--abbrev-ref", "HEAD"]).strip()

    def get_last_commit_date(self) -> str:
        """Return the committer date of HEAD as an ISO-8601 string."""
        return self._run(["git", "log", "-1", "--format=%cI"]).strip()

    def _run(self, cmd: list[str]) -> str:
        try:
            result = subprocess.run(
                cmd,
                cwd=self.root,
                text=True,
                check=True,
                capture_output=True,
            )
        except (subprocess.CalledProcessError, OSError) as e:
            raise GitCommandError(cmd, original_exception=e) from e
        return result.stdout

    def _create_subprocess(self, cmd: list[str]) -> subprocess.Popen[str]:
        return subprocess.Popen(
            cmd,
            cwd=self.root,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            bufsize=1,
        )
