from datetime import datetime, timezone

import pytest
import yaml

from tasktree.errors import InvalidAnnotationKeyError
from tasktree.spec import (
    API_VERSION,
    KIND_TASKTREE,
    GitSourceSpec,
    SourceSpec,
    SourceType,
    SpecMetadata,
    TasktreeSpec,
    WorkspaceSpec,
    spec_from_dict,
    spec_to_dict,
    validate_annotation_key,
)

CREATED = datetime(2026, 3, 25, 12, 0, 0, tzinfo=timezone.utc)


def _sample() -> TasktreeSpec:
    return TasktreeSpec(
        api_version=API_VERSION,
        kind=KIND_TASKTREE,
        metadata=SpecMetadata(
            name="feature-payments",
            created_at=CREATED,
            annotations={"jira.ticket": "PAY-1"},
        ),
        spec=WorkspaceSpec(
            sources=[
                SourceSpec(
                    name="api",
                    type=SourceType.GIT,
                    path="api",
                    git=GitSourceSpec(
                        url="git@example.com:myorg/api.git",
                        ref="main",
                        branch="feature/payments",
                    ),
                )
            ]
        ),
    )


@pytest.mark.parametrize("key", ["a", "jira.ticket", "A-1_b.c", "9lives"])
def test_valid_annotation_keys(key):
    assert validate_annotation_key(key) is None


def test_empty_annotation_key_rejected():
    with pytest.raises(InvalidAnnotationKeyError) as info:
        validate_annotation_key("")
    assert info.value.reason == "key must not be empty"


@pytest.mark.parametrize("key", ["-a", ".a", "a b", "a/b", "a\n"])
def test_bad_annotation_keys_rejected(key):
    with pytest.raises(InvalidAnnotationKeyError) as info:
        validate_annotation_key(key)
    assert info.value.reason == "key must match ^[a-zA-Z0-9][a-zA-Z0-9._-]*$"


def test_annotation_key_length_limit():
    assert validate_annotation_key("a" * 128) is None
    with pytest.raises(InvalidAnnotationKeyError) as info:
        validate_annotation_key("a" * 129)
    assert "exceeds maximum of 128" in info.value.reason


def test_dict_round_trip():
    spec = _sample()
    assert spec_from_dict(spec_to_dict(spec)) == spec


def test_yaml_round_trip():
    spec = _sample()
    text = yaml.safe_dump(spec_to_dict(spec), sort_keys=False)
    assert spec_from_dict(yaml.safe_load(text)) == spec


def test_created_at_format():
    assert spec_to_dict(_sample())["metadata"]["createdAt"] == "2026-03-25T12:00:00Z"


def test_empty_optional_fields_are_omitted():
    spec = TasktreeSpec(
        metadata=SpecMetadata(name="demo"),
        spec=WorkspaceSpec(sources=[SourceSpec(name="web", type=SourceType.LOCAL)]),
    )
    data = spec_to_dict(spec)
    assert data["metadata"] == {"name": "demo"}
    assert data["spec"]["sources"] == [{"name": "web", "type": "local"}]


def test_empty_sources_serialise_as_list():
    data = spec_to_dict(TasktreeSpec(metadata=SpecMetadata(name="demo")))
    assert data["spec"] == {"sources": []}
    assert data["apiVersion"] == API_VERSION
    assert data["kind"] == KIND_TASKTREE


def test_from_dict_parses_yaml_document():
    doc = "apiVersion: tasktree.dev/v1\nkind: Tasktree\nmetadata:\n  name: demo\nspec:\n  sources: []\n"
    spec = spec_from_dict(yaml.safe_load(doc))
    assert spec.api_version == API_VERSION
    assert spec.metadata.name == "demo"
    assert spec.metadata.created_at is None
    assert spec.spec.sources == []


def test_unknown_source_type_is_kept_as_text():
    spec = spec_from_dict({"spec": {"sources": [{"name": "x", "type": "ftp"}]}})
    assert spec.spec.sources[0].type == "ftp"
    assert spec.spec.sources[0].git is None


def test_from_empty_document():
    spec = spec_from_dict(None)
    assert spec.api_version == ""
    assert spec.spec.sources == []