"""
Unit tests for publish resolution.

Tests cover:
- New names create a template owned by the caller
- Foreign ownership rejects regardless of version or labels
- New versions under the same owner create a version row
- Re-publishing an exact version only merges labels
- Impossible lookup combinations raise ResolutionInvariantError
"""
import pytest

from template_registry.core.exceptions import ResolutionInvariantError
from template_registry.schemas.templates import Pipeline, PublishRequest, Template
from template_registry.services.template_resolver import (
    CreateTemplate,
    CreateVersion,
    MergeLabels,
    RejectUnauthorized,
    build_template_config,
    merge_labels,
    resolve,
)


pytestmark = pytest.mark.unit

OWNER = "github.com:1:main"
OTHER = "github.com:2:main"


def _request(version="1.0.0", labels=(), **overrides):
    fields = {
        "name": "node/build",
        "version": version,
        "maintainer": "foo@bar.com",
        "description": "builds node apps",
        "templateUrl": "http://foo.bar/node",
        "labels": list(labels),
    }
    fields.update(overrides)
    return PublishRequest(**fields)


def _template(id=1, version="1.0.0", scm_uri=OWNER, labels=(), **overrides):
    fields = {
        "id": id,
        "name": "node/build",
        "version": version,
        "scm_uri": scm_uri,
        "maintainer": "old@bar.com",
        "description": "old description",
        "template_url": "http://old.url",
        "labels": frozenset(labels),
    }
    fields.update(overrides)
    return Template(**fields)


# ---------------------------------------------------------------------------
# Step 1: unknown name
# ---------------------------------------------------------------------------

class TestCreateTemplate:

    def test_unknown_name_creates_template(self):
        outcome = resolve(_request(), Pipeline(id=1, scm_uri=OWNER), None, None)
        assert isinstance(outcome, CreateTemplate)

    def test_new_template_is_owned_by_caller(self):
        outcome = resolve(_request(), Pipeline(id=2, scm_uri=OTHER), None, None)
        assert outcome.config.scm_uri == OTHER

    def test_config_carries_request_fields(self):
        request = _request(labels=["a", "b"], config={"image": "node:18"})
        outcome = resolve(request, Pipeline(id=1, scm_uri=OWNER), None, None)

        config = outcome.config
        assert config.name == "node/build"
        assert config.version == "1.0.0"
        assert config.maintainer == "foo@bar.com"
        assert config.description == "builds node apps"
        assert config.template_url == "http://foo.bar/node"
        assert config.labels == ("a", "b")
        assert config.config == {"image": "node:18"}


# ---------------------------------------------------------------------------
# Step 2: ownership
# ---------------------------------------------------------------------------

class TestRejectUnauthorized:

    def test_foreign_scm_uri_is_rejected(self):
        outcome = resolve(
            _request(), Pipeline(id=2, scm_uri=OTHER), _template(scm_uri=OWNER), None
        )
        assert isinstance(outcome, RejectUnauthorized)
        assert outcome.owner_scm_uri == OWNER
        assert outcome.caller_scm_uri == OTHER

    def test_rejected_even_when_exact_version_exists(self):
        existing = _template(scm_uri=OWNER, labels=["a"])
        outcome = resolve(
            _request(labels=["b"]), Pipeline(id=2, scm_uri=OTHER), existing, existing
        )
        assert isinstance(outcome, RejectUnauthorized)

    def test_ownership_checked_before_exact_version_consistency(self):
        # A mismatched exact row would raise, but ownership fails first
        mismatched = _template(version="9.9.9")
        outcome = resolve(
            _request(), Pipeline(id=2, scm_uri=OTHER), _template(), mismatched
        )
        assert isinstance(outcome, RejectUnauthorized)

    @pytest.mark.parametrize("version", ["1", "1.0", "2.0.0", "10.4.1"])
    def test_rejected_regardless_of_version(self, version):
        outcome = resolve(
            _request(version=version), Pipeline(id=2, scm_uri=OTHER), _template(), None
        )
        assert isinstance(outcome, RejectUnauthorized)


# ---------------------------------------------------------------------------
# Step 3a: new version
# ---------------------------------------------------------------------------

class TestCreateVersion:

    def test_new_version_under_owner(self):
        outcome = resolve(
            _request(version="1.1.0", labels=["x", "y"]),
            Pipeline(id=1, scm_uri=OWNER),
            _template(version="1.0.0", labels=["a"]),
            None,
        )
        assert isinstance(outcome, CreateVersion)
        assert outcome.config.version == "1.1.0"
        assert outcome.config.scm_uri == OWNER

    def test_new_version_keeps_submitted_labels_exactly(self):
        outcome = resolve(
            _request(version="1.1.0", labels=["x", "y"]),
            Pipeline(id=1, scm_uri=OWNER),
            _template(labels=["a"]),
            None,
        )
        assert outcome.config.labels == ("x", "y")


# ---------------------------------------------------------------------------
# Step 3b: re-publish of exact version
# ---------------------------------------------------------------------------

class TestMergeLabels:

    def test_labels_are_unioned(self):
        existing = _template(labels=["a", "b"])
        outcome = resolve(
            _request(labels=["b", "c"]), Pipeline(id=1, scm_uri=OWNER), existing, existing
        )
        assert isinstance(outcome, MergeLabels)
        assert set(outcome.labels) == {"a", "b", "c"}
        assert outcome.added == ("c",)
        assert outcome.template_id == existing.id

    def test_labels_are_sorted(self):
        existing = _template(labels=["z", "m"])
        outcome = resolve(
            _request(labels=["a"]), Pipeline(id=1, scm_uri=OWNER), existing, existing
        )
        assert outcome.labels == ("a", "m", "z")

    def test_no_new_labels_means_no_change(self):
        existing = _template(labels=["a", "b"])
        outcome = resolve(
            _request(labels=["a"]), Pipeline(id=1, scm_uri=OWNER), existing, existing
        )
        assert outcome.added == ()
        assert outcome.changed is False

    def test_merge_is_idempotent(self):
        existing = _template(labels=["a", "b"])
        request = _request(labels=["b", "c"])
        first = resolve(request, Pipeline(id=1, scm_uri=OWNER), existing, existing)

        merged = _template(labels=first.labels)
        second = resolve(request, Pipeline(id=1, scm_uri=OWNER), merged, merged)

        assert second.labels == first.labels
        assert second.changed is False

    def test_merge_carries_no_other_fields(self):
        existing = _template(labels=["a"])
        outcome = resolve(
            _request(maintainer="new@bar.com", description="new", templateUrl="http://new"),
            Pipeline(id=1, scm_uri=OWNER),
            existing,
            existing,
        )
        assert isinstance(outcome, MergeLabels)
        assert not hasattr(outcome, "config")

    def test_existing_by_name_may_be_an_older_version(self):
        first = _template(id=1, version="1.0.0")
        exact = _template(id=7, version="2.0.0", labels=["old"])
        outcome = resolve(
            _request(version="2.0.0", labels=["new"]), Pipeline(id=1, scm_uri=OWNER), first, exact
        )
        assert outcome.template_id == 7
        assert outcome.labels == ("new", "old")


# ---------------------------------------------------------------------------
# Step 4: unreachable states
# ---------------------------------------------------------------------------

class TestInvariantViolations:

    def test_exact_without_family_raises(self):
        with pytest.raises(ResolutionInvariantError):
            resolve(_request(), Pipeline(id=1, scm_uri=OWNER), None, _template())

    def test_exact_for_different_version_raises(self):
        with pytest.raises(ResolutionInvariantError):
            resolve(
                _request(version="1.0.0"),
                Pipeline(id=1, scm_uri=OWNER),
                _template(),
                _template(version="3.0.0"),
            )

    def test_exact_with_different_owner_raises(self):
        with pytest.raises(ResolutionInvariantError):
            resolve(
                _request(),
                Pipeline(id=1, scm_uri=OWNER),
                _template(scm_uri=OWNER),
                _template(scm_uri=OTHER),
            )

    def test_invariant_error_is_an_assertion_error(self):
        assert issubclass(ResolutionInvariantError, AssertionError)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:

    def test_build_template_config_uses_given_scm_uri(self):
        config = build_template_config(_request(), "github.com:9:dev")
        assert config.scm_uri == "github.com:9:dev"

    def test_merge_labels_returns_union_and_delta(self):
        union, added = merge_labels(frozenset({"a", "b"}), ["b", "c", "d"])
        assert union == ("a", "b", "c", "d")
        assert added == ("c", "d")

    def test_merge_labels_empty_submission(self):
        union, added = merge_labels(frozenset({"a"}), [])
        assert union == ("a",)
        assert added == ()
