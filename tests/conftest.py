import pytest
from fastapi.testclient import TestClient

from filestat.services.metrics.collector import FileStatCollector, FilesCollector
from filestat.services.metrics.instance import set_files_collector


@pytest.fixture
def tree_dir(tmp_path):
    """Directory holding app.log (10 bytes), notes.txt and an old/ sub-directory."""
    (tmp_path / "app.log").write_bytes(b"0123456789")
    (tmp_path / "notes.txt").write_bytes(b"a\nb\nc\n")
    old = tmp_path / "old"
    old.mkdir()
    (old / "rotated.log").write_bytes(b"x\n")
    return tmp_path


@pytest.fixture
def files_collector(tree_dir):
    """Collector with one tree named 'prod' rooted at tree_dir."""
    leaf = FileStatCollector(
        patterns=("*.log",),
        tree_root=str(tree_dir),
        enable_nb_lines=True,
        labels=("prod",),
    )
    return FilesCollector.from_leaves([("prod", leaf)], has_tree=True)


@pytest.fixture
def client(files_collector):
    from filestat.app import create_app

    set_files_collector(files_collector)
    with TestClient(create_app("/metrics")) as test_client:
        yield test_client
    set_files_collector(None)
