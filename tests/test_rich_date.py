from conftest import apply_patch

from transforms.rich_date import FieldValueRenameTransform


def test_retags_date_objects_at_any_depth():
    doc = {"_id": "a", "_type": "date", "nested": {"_type": "date"}}

    patch = FieldValueRenameTransform().patch_document(doc)

    assert patch.document_id == "a"
    assert patch.set == {"_type": "richDate", "nested._type": "richDate"}
    assert patch.unset == []


def test_paths_inside_arrays_use_brackets():
    doc = {
        "_id": "event-1",
        "_type": "event",
        "dates": [{"_type": "date", "utc": "2017-01-01"}, {"_type": "other"}],
    }

    patch = FieldValueRenameTransform().patch_document(doc)

    assert patch.set == {"dates[0]._type": "richDate"}


def test_document_without_matches_is_noop():
    doc = {"_id": "b", "_type": "post", "published": "date", "meta": {"kind": "date"}}
    assert FieldValueRenameTransform().patch_document(doc) is None


def test_applying_patch_makes_transform_idempotent():
    doc = {"_id": "a", "_type": "post", "when": {"_type": "date"}, "list": [{"_type": "date"}]}
    transform = FieldValueRenameTransform()

    patch = transform.patch_document(doc)
    migrated = apply_patch(doc, set=patch.set, unset=patch.unset)

    assert migrated["list"][0]["_type"] == "richDate"
    assert transform.patch_document(migrated) is None


def test_custom_field_and_values():
    transform = FieldValueRenameTransform(field="kind", match_value="old", replacement="new")
    doc = {"_id": "c", "_type": "thing", "kind": "old"}

    assert transform.patch_document(doc).set == {"kind": "new"}


def test_plan_filters_noop_documents():
    docs = [
        {"_id": "a", "_type": "date"},
        {"_id": "b", "_type": "post"},
    ]
    plan = FieldValueRenameTransform().plan(docs)

    assert plan.document_ids == ["a"]
    assert plan.placeholders == []
