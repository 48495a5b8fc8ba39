"""Tests for tree traversal, deduplication and sample emission."""

import os
import zlib
from datetime import datetime

from prometheus_client import CollectorRegistry

from filestat.services.metrics.collector import FileStatCollector, FilesCollector
from filestat.services.metrics.templater import PatternTemplater


def samples_by_name(collector):
    result = {}
    for sample in collector.iter_samples():
        result.setdefault(sample.name, []).append(sample)
    return result


def make_collector(*leaves, has_tree=False, templater=None):
    named = [(leaf.labels[0] if leaf.labels else "", leaf) for leaf in leaves]
    return FilesCollector.from_leaves(named, has_tree=has_tree, templater=templater)


def test_prod_tree_scenario(tree_dir):
    collector = make_collector(
        FileStatCollector(patterns=("*.log",), tree_root=str(tree_dir), labels=("prod",)),
        has_tree=True,
    )

    samples = samples_by_name(collector)

    [match] = samples["file_glob_match_number"]
    assert match.labels == {"pattern": "*.log", "tree": "prod"}
    assert match.value == 1
    [size] = samples["file_stat_size_bytes"]
    assert size.labels == {"path": "app.log", "tree": "prod"}
    assert size.value == 10
    [mtime] = samples["file_stat_modif_time_seconds"]
    assert mtime.value == os.stat(tree_dir / "app.log").st_mtime_ns / 1e9


def test_directories_are_not_counted(tree_dir):
    collector = make_collector(FileStatCollector(patterns=("*",), tree_root=str(tree_dir)))

    samples = samples_by_name(collector)

    paths = sorted(s.labels["path"] for s in samples["file_stat_size_bytes"])
    assert paths == ["app.log", "notes.txt"]
    assert samples["file_glob_match_number"][0].value == 2


def test_display_path_is_relative_to_root(tree_dir):
    collector = make_collector(FileStatCollector(patterns=("old/*.log",), tree_root=str(tree_dir)))

    [size] = samples_by_name(collector)["file_stat_size_bytes"]

    assert size.labels == {"path": "old/rotated.log"}
    assert str(tree_dir) not in size.labels["path"]


def test_absolute_pattern_stays_under_tree_root(tmp_path):
    etc = tmp_path / "mnt" / "etc"
    etc.mkdir(parents=True)
    (etc / "app.conf").write_bytes(b"12345")
    collector = make_collector(
        FileStatCollector(patterns=("/etc/*.conf",), tree_root=str(tmp_path / "mnt"), labels=("m1",)),
        has_tree=True,
    )

    samples = samples_by_name(collector)

    [size] = samples["file_stat_size_bytes"]
    assert size.labels == {"path": "/etc/app.conf", "tree": "m1"}
    assert size.value == 5
    [match] = samples["file_glob_match_number"]
    assert match.labels == {"pattern": "/etc/*.conf", "tree": "m1"}
    assert match.value == 1


def test_relative_tree_root(tmp_path, monkeypatch):
    logs = tmp_path / "mnt" / "logs"
    logs.mkdir(parents=True)
    (logs / "a.log").write_bytes(b"abc")
    monkeypatch.chdir(tmp_path)
    collector = make_collector(FileStatCollector(patterns=("logs/*.log", "/logs/*.log"), tree_root="mnt"))

    samples = samples_by_name(collector)

    [size] = samples["file_stat_size_bytes"]
    assert size.labels == {"path": "logs/a.log"}
    assert size.value == 3
    # both patterns resolve to mnt/logs/*.log
    assert [s.labels["pattern"] for s in samples["file_glob_match_number"]] == ["logs/*.log"]


def test_brace_alternation(tmp_path):
    (tmp_path / "a.log").write_text("a")
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "c.csv").write_text("c")
    collector = make_collector(FileStatCollector(patterns=("*.{log,txt}",), tree_root=str(tmp_path)))

    samples = samples_by_name(collector)

    assert samples["file_glob_match_number"][0].value == 2
    assert sorted(s.labels["path"] for s in samples["file_stat_size_bytes"]) == ["a.log", "b.txt"]


def test_glob_error_reports_zero_matches(tree_dir, monkeypatch):
    from filestat.services.metrics import collector as collector_module

    def reject(base_dir, pattern):
        raise ValueError("embedded null byte")
        yield

    monkeypatch.setattr(collector_module, "iter_matches", reject)
    collector = make_collector(FileStatCollector(patterns=("*.log",), tree_root=str(tree_dir)))

    samples = list(collector.iter_samples())

    assert [(s.name, s.value) for s in samples] == [("file_glob_match_number", 0.0)]


def test_recursive_pattern(tree_dir):
    collector = make_collector(FileStatCollector(patterns=("**/*.log",), tree_root=str(tree_dir)))

    samples = samples_by_name(collector)

    assert sorted(s.labels["path"] for s in samples["file_stat_size_bytes"]) == ["app.log", "old/rotated.log"]
    assert samples["file_glob_match_number"][0].value == 2


def test_file_matched_by_two_patterns_is_stat_once(tree_dir):
    collector = make_collector(FileStatCollector(patterns=("*.log", "app.*"), tree_root=str(tree_dir)))

    samples = samples_by_name(collector)

    assert len(samples["file_stat_size_bytes"]) == 1
    assert len(samples["file_stat_modif_time_seconds"]) == 1
    counts = {s.labels["pattern"]: s.value for s in samples["file_glob_match_number"]}
    assert counts == {"*.log": 1, "app.*": 1}


def test_identical_pattern_in_two_groups_is_matched_once(tree_dir):
    first = FileStatCollector(patterns=("*.log",), tree_root=str(tree_dir))
    second = FileStatCollector(patterns=("./*.log",), tree_root=str(tree_dir), enable_nb_lines=True)
    collector = make_collector(first, second)

    samples = samples_by_name(collector)

    assert len(samples["file_glob_match_number"]) == 1
    assert samples["file_glob_match_number"][0].labels["pattern"] == "*.log"
    assert "file_content_line_number" not in samples


def test_dedup_does_not_carry_over_between_scrapes(tree_dir):
    collector = make_collector(FileStatCollector(patterns=("*.log",), tree_root=str(tree_dir)))

    first = list(collector.iter_samples())
    second = list(collector.iter_samples())

    assert len(first) == len(second) == 3


def test_missing_tree_root_is_skipped_silently(tmp_path):
    collector = make_collector(
        FileStatCollector(patterns=("*.log",), tree_root=str(tmp_path / "unmounted"), labels=("gone",)),
        has_tree=True,
    )

    assert list(collector.iter_samples()) == []


def test_missing_tree_does_not_affect_others(tree_dir, tmp_path):
    collector = make_collector(
        FileStatCollector(patterns=("*.log",), tree_root=str(tmp_path / "unmounted"), labels=("gone",)),
        FileStatCollector(patterns=("*.log",), tree_root=str(tree_dir), labels=("prod",)),
        has_tree=True,
    )

    samples = samples_by_name(collector)

    assert {s.labels["tree"] for s in samples["file_glob_match_number"]} == {"prod"}


def test_pattern_without_match_reports_zero(tree_dir):
    collector = make_collector(FileStatCollector(patterns=("*.csv",), tree_root=str(tree_dir)))

    samples = list(collector.iter_samples())

    assert len(samples) == 1
    assert samples[0].name == "file_glob_match_number"
    assert samples[0].value == 0


def test_content_metrics(tree_dir):
    collector = make_collector(FileStatCollector(
        patterns=("notes.txt",), tree_root=str(tree_dir), enable_crc32=True, enable_nb_lines=True,
    ))

    samples = samples_by_name(collector)

    assert samples["file_content_line_number"][0].value == 3
    assert samples["file_content_hash_crc32"][0].value == zlib.crc32(b"a\nb\nc\n")


def test_empty_file_content_metrics(tmp_path):
    (tmp_path / "empty").write_bytes(b"")
    collector = make_collector(FileStatCollector(
        patterns=("empty",), tree_root=str(tmp_path), enable_crc32=True, enable_nb_lines=True,
    ))

    samples = samples_by_name(collector)

    assert samples["file_content_hash_crc32"][0].value == 0
    assert samples["file_content_line_number"][0].value == 0


def test_unreadable_content_skips_content_samples_only(tree_dir, monkeypatch):
    from filestat.services.metrics import collector as collector_module

    def failing_scan(path, want_crc32, want_lines):
        raise PermissionError("denied")

    monkeypatch.setattr(collector_module, "scan_content", failing_scan)
    collector = make_collector(FileStatCollector(
        patterns=("*.log",), tree_root=str(tree_dir), enable_nb_lines=True,
    ))

    samples = samples_by_name(collector)

    assert "file_content_line_number" not in samples
    assert len(samples["file_stat_size_bytes"]) == 1


def test_relative_root_uses_working_directory(tree_dir, monkeypatch):
    monkeypatch.chdir(tree_dir)
    collector = make_collector(FileStatCollector(patterns=("*.txt",)))

    [size] = samples_by_name(collector)["file_stat_size_bytes"]

    assert size.labels == {"path": "notes.txt"}


def test_templated_pattern_and_root(tmp_path):
    day_dir = tmp_path / "2024"
    day_dir.mkdir()
    (day_dir / "app-2024-03-15.log").write_bytes(b"12345")
    templater = PatternTemplater(clock=lambda: datetime(2024, 3, 15))
    collector = make_collector(
        FileStatCollector(
            patterns=('app-{{ now().strftime("%Y-%m-%d") }}.log',),
            tree_root=str(tmp_path) + "/{{ now().year }}",
        ),
        templater=templater,
    )

    samples = samples_by_name(collector)

    assert samples["file_stat_size_bytes"][0].labels == {"path": "app-2024-03-15.log"}
    assert samples["file_glob_match_number"][0].labels == {"pattern": 'app-{{ now().strftime("%Y-%m-%d") }}.log'}


def test_bad_template_skips_only_that_pattern(tree_dir):
    collector = make_collector(FileStatCollector(
        patterns=("{{ broken(", "*.log"), tree_root=str(tree_dir),
    ))

    samples = samples_by_name(collector)

    assert [s.labels["pattern"] for s in samples["file_glob_match_number"]] == ["*.log"]


def test_bad_root_template_skips_collector(tree_dir):
    collector = make_collector(
        FileStatCollector(patterns=("*.log",), tree_root="{{ nope }}"),
        FileStatCollector(patterns=("*.txt",), tree_root=str(tree_dir)),
    )

    samples = samples_by_name(collector)

    assert [s.labels["pattern"] for s in samples["file_glob_match_number"]] == ["*.txt"]


def test_prometheus_collect_groups_samples(files_collector):
    registry = CollectorRegistry()
    registry.register(files_collector)

    assert registry.get_sample_value(
        "file_glob_match_number", {"pattern": "*.log", "tree": "prod"}
    ) == 1
    assert registry.get_sample_value(
        "file_stat_size_bytes", {"path": "app.log", "tree": "prod"}
    ) == 10
    assert registry.get_sample_value(
        "file_content_line_number", {"path": "app.log", "tree": "prod"}
    ) == 0


def test_describe_lists_only_active_descriptors(files_collector):
    names = [family.name for family in files_collector.describe()]

    assert names == [
        "file_glob_match_number",
        "file_stat_size_bytes",
        "file_stat_modif_time_seconds",
        "file_content_line_number",
    ]
