import json

import pytest
from conftest import FakeClient

from documents.document_models import MigrationPlan, PatchDescriptor
from migrations import cli_migrate
from migrations.prompts import confirm
from migrations.runner import MigrationOutcome
from migrations.summary import format_outcome, format_plan
from transforms.block_spans import BlockSpansTransform
from transforms.registry import TRANSFORMS, build_transform


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    (tmp_path / "sanity.json").write_text(
        json.dumps({"api": {"projectId": "proj", "dataset": "production"}})
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def wired(monkeypatch):
    client = FakeClient(documents=[{"_id": "a", "_type": "date"}])
    created = []

    def _client(project_id, dataset, token=None):
        created.append((project_id, dataset, token))
        return client

    monkeypatch.setattr(cli_migrate, "SanityClient", _client)
    monkeypatch.setattr(cli_migrate, "find_token", lambda: None)
    monkeypatch.setattr(cli_migrate, "get_token", lambda project_id: "write-token")
    monkeypatch.setattr(cli_migrate, "confirm_backup", lambda migration, dataset: True)
    monkeypatch.setattr(cli_migrate, "confirm_summary", lambda summary: True)
    return client, created


def test_registry_builds_each_migration():
    assert sorted(TRANSFORMS) == [
        "block-spans-to-children",
        "date-to-rich-date",
        "fix-draft-refs",
    ]
    for name in TRANSFORMS:
        assert build_transform(name).name == name
    assert isinstance(build_transform("block-spans-to-children"), BlockSpansTransform)
    assert build_transform("block-spans-to-children").commit_mode == "per-document"
    assert build_transform("fix-draft-refs").commit_mode == "transaction"


def test_registry_rejects_unknown_name():
    with pytest.raises(ValueError):
        build_transform("drop-everything")


def test_confirm_defaults_to_no():
    assert confirm("go?", read=lambda msg: "") is False
    assert confirm("go?", read=lambda msg: "Y") is True

    def _closed(msg):
        raise EOFError

    assert confirm("go?", read=_closed) is False


def test_format_plan_and_outcomes():
    plan = MigrationPlan(
        patches=[PatchDescriptor("a", set={"body[0].children": [{"_key": "k"}]}, unset=["body[0].spans"])]
    )

    text = format_plan(plan)

    assert text.splitlines() == [
        "On document: a",
        '    SET body[0].children = [{"_key":"k"}]',
        "    UNSET body[0].spans",
    ]
    assert format_outcome(MigrationOutcome("noop")) == "Nothing to do."
    assert format_outcome(MigrationOutcome("cancelled")) == "Cancelled."
    assert format_outcome(MigrationOutcome("failed", error="boom")) == "Data migration failed: boom"
    assert (
        format_outcome(MigrationOutcome("success", transaction_id="t1", document_ids=["a", "b"]))
        == "Migrated 2 documents in transaction t1."
    )
    assert format_outcome(MigrationOutcome("success", document_ids=["a"])) == "Migrated 1 documents."


def test_missing_sanity_json_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc:
        cli_migrate.main(["date-to-rich-date", "--yes"])
    assert exc.value.code == 1


def test_full_run_commits_and_reports(project_dir, wired, capsys):
    client, created = wired

    cli_migrate.main(["date-to-rich-date", "--dataset", "staging"])

    assert "Migrated 1 documents in transaction tx-1." in capsys.readouterr().out
    assert created == [("proj", "staging", None), ("proj", "staging", "write-token")]
    assert client.committed[0][0]["patch"]["set"] == {"_type": "richDate"}


def test_declined_backup_prompt_exits_before_fetch(project_dir, wired, monkeypatch, capsys):
    client, created = wired
    monkeypatch.setattr(cli_migrate, "confirm_backup", lambda migration, dataset: False)

    with pytest.raises(SystemExit):
        cli_migrate.main(["date-to-rich-date"])

    assert "Cancelled." in capsys.readouterr().out
    assert client.queries == []
    assert created == []


def test_failed_run_exits_non_zero(project_dir, wired, capsys):
    client, _ = wired
    client.fail_fetch = True

    with pytest.raises(SystemExit) as exc:
        cli_migrate.main(["fix-draft-refs", "--yes"])

    assert exc.value.code == 1
    assert "Data migration failed: dataset unreachable" in capsys.readouterr().out


@pytest.mark.parametrize("value", ["0", "-5"])
def test_page_size_must_be_positive(project_dir, wired, value):
    client, created = wired

    with pytest.raises(SystemExit) as exc:
        cli_migrate.main(["date-to-rich-date", "--yes", "--fetch-strategy", "paged", "--page-size", value])

    assert exc.value.code == 2
    assert created == []
