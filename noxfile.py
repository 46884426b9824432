"""Nox configuration."""

import nox                                       # pylint: disable=import-error


@nox.session(python=['3.10', '3.11', '3.12'], reuse_venv=True)
def test(session):
    """Run the test suite."""
    session.install('-e', '.[test]')
    args = ['pytest', *session.posargs, '-n', 'auto', '-vv', 'tests']
    session.run(*args)


@nox.session(reuse_venv=True)
def release(session):
    """Generate a release."""
    session.install('build', '-e', '.')
    session.run('python', 'tools/pre-release-check.py')
    session.run('python', '-m', 'build')
