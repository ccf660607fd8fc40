# Copyright 2026 50Hertz Transmission GmbH and Elia Transmission Belgium SA/NV
#
# This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
# If a copy of the MPL was not distributed with this file,
# you can obtain one at https://mozilla.org/MPL/2.0/.
# Mozilla Public License, version 2.0

import re

import logbook
import pytest
from loadflow_results_engine.retention import enforce_retention, is_run_family_member, run_family
from loadflow_results_engine.storage import ArtifactDescriptor
from tests.fake_storage import FakeStorage, at

CONTEXT = "project-1"


def _seed_family(storage: FakeStorage, base_name: str, n_runs: int, folder: str = "loadflow_results") -> list[str]:
    paths = []
    for i in range(n_runs):
        path = f"{folder}/{base_name}_2025030{i}_120000.json"
        storage.put(CONTEXT, path, b"{}", at(i))
        paths.append(path)
    return paths


def test_enforce_retention_deletes_oldest(fake_storage):
    paths = _seed_family(fake_storage, "run", 7)

    report = enforce_retention(fake_storage, CONTEXT, "run", max_history=5)

    assert fake_storage.deletes == [paths[1], paths[0]]
    assert fake_storage.paths(CONTEXT) == set(paths[2:])
    assert [a.path for a in report.kept] == list(reversed(paths[2:]))
    assert [a.path for a in report.deleted] == [paths[1], paths[0]]
    assert report.failures == []


def test_enforce_retention_default_keeps_five(fake_storage):
    _seed_family(fake_storage, "run", 6)
    enforce_retention(fake_storage, CONTEXT, "run")
    assert len(fake_storage.paths(CONTEXT)) == 5


def test_enforce_retention_within_bound(fake_storage):
    _seed_family(fake_storage, "run", 3)
    report = enforce_retention(fake_storage, CONTEXT, "run", max_history=5)
    assert fake_storage.deletes == []
    assert len(report.kept) == 3


def test_enforce_retention_only_touches_the_family(fake_storage):
    _seed_family(fake_storage, "run", 3)
    fake_storage.put(CONTEXT, "loadflow_results/other_20250101_120000.json", b"{}", at(0))
    fake_storage.put(CONTEXT, "loadflow_results/run_notes.txt", b"", at(0))
    fake_storage.put(CONTEXT, "loadflow_results/run.json", b"{}", at(0))
    fake_storage.put(CONTEXT, "config.json", b"{}", at(0))

    enforce_retention(fake_storage, CONTEXT, "run", max_history=0)

    assert fake_storage.paths(CONTEXT) == {
        "loadflow_results/other_20250101_120000.json",
        "loadflow_results/run_notes.txt",
        "loadflow_results/run.json",
        "config.json",
    }


def test_enforce_retention_prefix_overlap(fake_storage):
    # run_v2 runs are members of the run family as well
    fake_storage.put(CONTEXT, "run_v2_20250101_120000.json", b"{}", at(0))
    fake_storage.put(CONTEXT, "run_20250102_120000.json", b"{}", at(1))

    enforce_retention(fake_storage, CONTEXT, "run", max_history=1)
    assert fake_storage.paths(CONTEXT) == {"run_20250102_120000.json"}


def test_enforce_retention_swallows_delete_failures():
    paths = []
    storage = FakeStorage()
    for i in range(4):
        path = f"run_2025030{i}_120000.json"
        storage.put(CONTEXT, path, b"{}", at(i))
        paths.append(path)
    storage.fail_deletes = {paths[1]}

    with logbook.TestHandler() as log_handler:
        report = enforce_retention(storage, CONTEXT, "run", max_history=1)

    assert storage.deletes == [paths[2], paths[1], paths[0]]
    assert [a.path for a in report.deleted] == [paths[2], paths[0]]
    assert [failure.artifact_path for failure in report.failures] == [paths[1]]
    assert "timed out" in report.failures[0].reason
    assert storage.paths(CONTEXT) == {paths[3], paths[1]}
    assert log_handler.has_warning(re.compile("could not delete 1 runs"), channel="loadflow_results_engine.retention")
    assert not log_handler.has_errors


def test_enforce_retention_path_prefix(fake_storage):
    _seed_family(fake_storage, "run", 3, folder="loadflow_results")
    _seed_family(fake_storage, "run", 3, folder="archive")

    enforce_retention(fake_storage, CONTEXT, "run", max_history=1, path_prefix="archive")

    remaining = fake_storage.paths(CONTEXT)
    assert len([p for p in remaining if p.startswith("archive/")]) == 1
    assert len([p for p in remaining if p.startswith("loadflow_results/")]) == 3


def test_enforce_retention_negative_history(fake_storage):
    with pytest.raises(ValueError):
        enforce_retention(fake_storage, CONTEXT, "run", max_history=-1)


def test_run_family():
    artifacts = [
        ArtifactDescriptor(path="run_a.json", filename="run_a.json", uploaded_at=at(1)),
        ArtifactDescriptor(path="run_b.json", filename="run_b.json", uploaded_at=at(3)),
        ArtifactDescriptor(path="x/run_c.json", filename="run_c.json", uploaded_at=at(2)),
        ArtifactDescriptor(path="running.json", filename="running.json", uploaded_at=at(4)),
    ]
    assert [a.path for a in run_family(artifacts, "run")] == ["run_b.json", "x/run_c.json", "run_a.json"]
    assert not is_run_family_member(artifacts[3], "run")
