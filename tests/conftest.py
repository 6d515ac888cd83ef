import pytest


@pytest.fixture(autouse=True)
def isolate_working_directory(tmp_path, monkeypatch):
    """Run every test from an empty directory.

    The command line looks for ``.changelog-writer.json`` in the working
    directory; a stray file in the checkout must not change test results.
    """
    monkeypatch.chdir(tmp_path)
    yield tmp_path
