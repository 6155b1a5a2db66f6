from __future__ import annotations

import json
from pathlib import Path

import pytest

from hirepipeline.core import AutoEvaluationTrigger, CandidateStore
from hirepipeline.pipeline import (
    CandidateLoadError,
    CandidateLoader,
    PipelineRunner,
    SnapshotLoader,
    SnapshotWriter,
)
from hirepipeline.schemas import CandidateStatus, Job


def candidate_record(candidate_id: str, **overrides) -> dict:
    record = {
        "id": candidate_id,
        "tenantId": "tenant-A",
        "jobId": "j1",
        "name": "Ananya Gupta",
        "role": "Senior React Developer",
        "experience": "6 years",
    }
    record.update(overrides)
    return record


def write_lines(path: Path, *lines: str) -> None:
    path.write_text("\n".join(lines), encoding="utf-8")


def test_candidate_loader_raises_on_invalid_json(tmp_path: Path):
    path = tmp_path / "candidates.jsonl"
    write_lines(path, json.dumps(candidate_record("c1")), "{invalid")

    with pytest.raises(CandidateLoadError) as exc:
        CandidateLoader().load(path)
    assert "invalid JSON" in str(exc.value)
    assert [candidate.id for candidate in exc.value.partial] == ["c1"]


def test_candidate_loader_skips_invalid_and_reports(tmp_path: Path):
    path = tmp_path / "candidates.jsonl"
    write_lines(
        path,
        json.dumps(candidate_record("c1")),
        "",
        json.dumps({"id": "c2"}),
        json.dumps(["not", "an", "object"]),
    )

    with pytest.raises(CandidateLoadError) as exc:
        CandidateLoader().load(path)
    error = exc.value
    assert error.errors[0].startswith("line 3:")
    assert "validation error" in error.errors[0]
    assert error.errors[1] == "line 4: expected an object"
    assert len(error.partial) == 1


def test_snapshot_loader_invalid_json(tmp_path: Path):
    path = tmp_path / "snapshot.json"
    path.write_text("{invalid", encoding="utf-8")

    with pytest.raises(ValueError):
        SnapshotLoader().load(path)


def test_snapshot_loader_rejects_non_object(tmp_path: Path):
    path = tmp_path / "snapshot.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        SnapshotLoader().load(path)


def test_import_reports_store_errors(tmp_path: Path):
    store = CandidateStore()
    store.add_job(Job(id="j1", tenant_id="tenant-A", title="Senior React Developer"))

    class NoopEvaluator:
        def evaluate(self, resume_text, job_description):
            raise AssertionError("not expected")

    with AutoEvaluationTrigger(store, NoopEvaluator()) as trigger:
        runner = PipelineRunner(store=store, trigger=trigger)
        path = tmp_path / "candidates.jsonl"
        write_lines(
            path,
            json.dumps(candidate_record("c1", status="hr_round")),
            json.dumps(candidate_record("c1")),
            json.dumps(candidate_record("c3", jobId="j404")),
        )

        added, errors = runner.import_candidates(path)

    assert [candidate.id for candidate in added] == ["c1"]
    assert added[0].status is CandidateStatus.APPLIED
    assert errors == [
        "candidate c1: candidate 'c1' already exists",
        "candidate c3: job 'j404' not found",
    ]
    assert store.get_job("j1").applicants == 1


def test_snapshot_round_trip_keeps_statuses(tmp_path: Path):
    store = CandidateStore()
    store.add_job(Job(id="j1", tenant_id="tenant-A", title="Senior React Developer"))
    source = tmp_path / "in.json"
    source.write_text(
        json.dumps(
            {
                "jobs": [],
                "candidates": [candidate_record("c5", status="team_interview")],
            }
        ),
        encoding="utf-8",
    )
    jobs, candidates = SnapshotLoader().load(source)
    store.restore(jobs=jobs, candidates=candidates)

    target = tmp_path / "out" / "snapshot.json"
    payload = SnapshotWriter().write(target, store)

    assert payload["metadata"]["candidate_count"] == 1
    written = json.loads(target.read_text(encoding="utf-8"))
    assert written["candidates"][0]["status"] == "team_interview"
    assert written["candidates"][0]["tenantId"] == "tenant-A"
    assert "evaluation" not in written["candidates"][0]
    assert written["jobs"][0]["postedDate"]
