import tempfile
import unittest
from pathlib import Path

from fakes import FakeGit, git_error
from pages_deployer.validation import (
    ValidationError,
    validate_all,
    validate_git_repository,
    validate_github_remote,
    validate_site_compiled,
)


class ValidationTests(unittest.TestCase):
    def test_not_a_repository(self) -> None:
        git = FakeGit()
        git.failures["git_dir"] = [git_error("fatal: not a git repository")]
        with self.assertRaises(ValidationError) as ctx:
            validate_git_repository(git)
        self.assertIn("not a git repository", str(ctx.exception))

    def test_site_must_exist_and_contain_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with self.assertRaises(ValidationError):
                validate_site_compiled(root / "missing")
            (root / "empty" / "nested").mkdir(parents=True)
            with self.assertRaises(ValidationError) as ctx:
                validate_site_compiled(root / "empty")
            self.assertIn("empty", str(ctx.exception))
            (root / "empty" / "nested" / "index.html").write_text("x", encoding="utf-8")
            validate_site_compiled(root / "empty")

    def test_remote_must_exist_and_be_github(self) -> None:
        git = FakeGit()
        with self.assertRaises(ValidationError):
            validate_github_remote(git)
        git.remotes["origin"] = "https://gitlab.com/alice/blog.git"
        with self.assertRaises(ValidationError) as ctx:
            validate_github_remote(git)
        self.assertIn("not a GitHub URL", str(ctx.exception))
        git.remotes["origin"] = "git@github.com:alice/blog.git"
        self.assertEqual(validate_github_remote(git), "git@github.com:alice/blog.git")

    def test_validate_all_returns_remote_url(self) -> None:
        git = FakeGit()
        git.remotes["origin"] = "https://github.com/alice/blog.git"
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "index.html").write_text("x", encoding="utf-8")
            self.assertEqual(validate_all(git, tmp), "https://github.com/alice/blog.git")


if __name__ == "__main__":
    unittest.main()
