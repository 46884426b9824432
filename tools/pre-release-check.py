"""Script to perform a pre-release check."""

import subprocess
import sys
from functools import partial
from pathlib import Path

run = partial(subprocess.run, capture_output=True, text=True)


def check_git_is_clean():
    """Check the the working tree is clean."""
    unstaged = run(['git', 'diff', '--quiet'])
    if unstaged.returncode:
        sys.exit('You have unstaged changes.')

    staged = run(['git', 'diff', '--quiet', '--cached'])
    if staged.returncode:
        sys.exit('You have staged changes.')


def find_version(path: Path, prefix: str, end: str) -> str:
    """Find the version in the first line starting with a prefix."""
    for line in path.read_text(encoding='utf-8').splitlines():
        if line.startswith(prefix):
            version, _, _ = line[len(prefix):].partition(end)
            return version.strip()
    return ''


def check_version():
    """Check that version information matches and is tagged."""
    pyproject = Path('pyproject.toml')
    readme = Path('README.md')
    pyproject_version = find_version(pyproject, 'version = "', '"')
    readme_version = find_version(
        readme, 'The most recent release is ', ' ').rstrip('.')
    if not pyproject_version:
        sys.exit(f'Could not find version in {pyproject}')
    if readme_version != pyproject_version:
        sys.exit(f'Versions do not match in {readme} and {pyproject}')

    version_tag = f'v{pyproject_version}'
    tags_text = run(['git', 'show-ref', '--tags']).stdout.splitlines()
    tag_tuples = [line.rpartition('/') for line in tags_text]
    tags = {c: a.split()[0] for a, b, c in tag_tuples}
    if version_tag not in tags:
        sys.exit(f'There is no tag for version {pyproject_version}')

    head = run(['git', 'rev-parse', 'HEAD']).stdout.strip()
    if head != tags[version_tag]:
        sys.exit(f'HEAD does not match tags for {pyproject_version}')


check_git_is_clean()
check_version()
