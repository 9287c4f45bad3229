"""Tests for artifact mappers and artifact name mappers."""

from __future__ import annotations

import os

import pytest

from depkit.core.errors import SpecConfigError
from depkit.core.ir import Artifact
from depkit.core.mappers import build_artifact_mapper, identity, rename
from depkit.core.name_mappers import build_name_mapper, fixed, repository_default

# ============================================================================
# Artifact mappers
# ============================================================================


class TestArtifactMappers:
    """Artifact to artifact transforms."""

    def test_identity(self, snapshot_artifact: Artifact) -> None:
        assert build_artifact_mapper("identity()").apply(snapshot_artifact) == snapshot_artifact

    def test_base_version(self, snapshot_artifact: Artifact) -> None:
        mapped = build_artifact_mapper("baseVersion()").apply(snapshot_artifact)
        assert mapped.version == "1.0-SNAPSHOT"
        assert snapshot_artifact.version == "1.0-20240322.113300-2"

    def test_omit_classifier(self, snapshot_artifact: Artifact) -> None:
        assert build_artifact_mapper("omitClassifier()").apply(snapshot_artifact).classifier == ""

    def test_compose_chain(self) -> None:
        source = Artifact.parse("g:a:jar:classifier:1.0-20240322.090900-12")
        mapper = build_artifact_mapper(
            "compose(baseVersion(), omitClassifier(), rename('g1', 'a1', null))"
        )
        mapped = mapper.apply(source)
        assert mapped.group_id == "g1"
        assert mapped.artifact_id == "a1"
        assert mapped.version == "1.0-SNAPSHOT"
        assert mapped.classifier == ""
        assert mapped.extension == "jar"

    def test_rename_wildcards_keep_fields(self, artifact: Artifact) -> None:
        mapped = build_artifact_mapper("rename(*, null, 2.0)").apply(artifact)
        assert (mapped.group_id, mapped.artifact_id, mapped.version) == ("g", "a", "2.0")

    def test_rename_description(self) -> None:
        assert rename("g1", None, None).description == "rename(g1, null, null)"

    def test_add_suffix(self, artifact: Artifact) -> None:
        assert build_artifact_mapper("addSuffix(-shaded)").apply(artifact).artifact_id == "a-shaded"

    def test_add_suffix_blank(self) -> None:
        with pytest.raises(SpecConfigError, match="invalid suffix"):
            build_artifact_mapper("addSuffix(' ')")

    def test_compose_applies_left_to_right(self, artifact: Artifact) -> None:
        mapper = build_artifact_mapper("compose(addSuffix(-x), addSuffix(-y))")
        assert mapper.apply(artifact).artifact_id == "a-x-y"

    def test_identity_is_neutral(self, snapshot_artifact: Artifact) -> None:
        base = build_artifact_mapper("baseVersion()")
        left = build_artifact_mapper("compose(identity(), baseVersion())")
        right = build_artifact_mapper("compose(baseVersion(), identity())")
        assert left.apply(snapshot_artifact) == base.apply(snapshot_artifact)
        assert right.apply(snapshot_artifact) == base.apply(snapshot_artifact)
        assert identity().description == "identity()"

    def test_rename_arity(self) -> None:
        with pytest.raises(SpecConfigError, match="Bad parameter count for op rename"):
            build_artifact_mapper("rename(g, a)")

    def test_mapper_argument_must_be_mapper(self) -> None:
        with pytest.raises(SpecConfigError, match="Expected artifact mapper, got string 'x'"):
            build_artifact_mapper("compose(identity(), x)")


# ============================================================================
# Name mappers
# ============================================================================


class TestNameMappers:
    """Artifact to string."""

    def test_compose_fields(self, snapshot_artifact: Artifact) -> None:
        mapper = build_name_mapper("compose(G(), fixed(:), A(), fixed(:), V())")
        assert mapper.apply(snapshot_artifact) == "g:a:1.0-20240322.113300-2"

    def test_repository(self, snapshot_artifact: Artifact) -> None:
        mapper = build_name_mapper("repository(/)")
        assert mapper.apply(snapshot_artifact) == (
            "g/a/1.0-SNAPSHOT/a-1.0-20240322.113300-2-classifier.jar"
        )

    def test_repository_splits_group(self) -> None:
        mapper = build_name_mapper("repository(/)")
        assert mapper.apply(Artifact.parse("org.example:lib:1.0")) == (
            "org/example/lib/1.0/lib-1.0.jar"
        )

    def test_repository_default_uses_os_separator(self, artifact: Artifact) -> None:
        assert repository_default().apply(artifact) == os.sep.join(["g", "a", "1.0", "a-1.0.jar"])

    @pytest.mark.parametrize(
        "layout,expected",
        [
            ("GACVE", "g.a-classifier-1.0-20240322.113300-2.jar"),
            ("GACbVE", "g.a-classifier-1.0-SNAPSHOT.jar"),
            ("GACE", "g.a-classifier.jar"),
            ("GAVE", "g.a-1.0-20240322.113300-2.jar"),
            ("GAbVE", "g.a-1.0-SNAPSHOT.jar"),
            ("GAE", "g.a.jar"),
            ("ACVE", "a-classifier-1.0-20240322.113300-2.jar"),
            ("AVCE", "a-1.0-20240322.113300-2-classifier.jar"),
            ("ACbVE", "a-classifier-1.0-SNAPSHOT.jar"),
            ("AbVCE", "a-1.0-SNAPSHOT-classifier.jar"),
            ("ACE", "a-classifier.jar"),
            ("AVE", "a-1.0-20240322.113300-2.jar"),
            ("AbVE", "a-1.0-SNAPSHOT.jar"),
            ("AE", "a.jar"),
        ],
    )
    def test_layouts(self, snapshot_artifact: Artifact, layout: str, expected: str) -> None:
        assert build_name_mapper(f"{layout}()").apply(snapshot_artifact) == expected

    def test_layout_without_classifier(self, artifact: Artifact) -> None:
        assert build_name_mapper("ACVE()").apply(artifact) == "a-1.0.jar"

    @pytest.mark.parametrize(
        "op,expected",
        [
            ("GAKey", "g:a"),
            ("GAVKey", "g:a:1.0-20240322.113300-2"),
            ("GAbVKey", "g:a:1.0-SNAPSHOT"),
            ("GACEVKey", "g:a:jar:classifier:1.0-20240322.113300-2"),
        ],
    )
    def test_keys(self, snapshot_artifact: Artifact, op: str, expected: str) -> None:
        assert build_name_mapper(f"{op}()").apply(snapshot_artifact) == expected

    def test_optional_prefix(self, artifact: Artifact, snapshot_artifact: Artifact) -> None:
        mapper = build_name_mapper("optionalPrefix(-, C())")
        assert mapper.apply(artifact) == ""
        assert mapper.apply(snapshot_artifact) == "-classifier"

    def test_optional_suffix(self, artifact: Artifact, snapshot_artifact: Artifact) -> None:
        mapper = build_name_mapper("compose(optionalSuffix(_, C()), A())")
        assert mapper.apply(artifact) == "a"
        assert mapper.apply(snapshot_artifact) == "classifier_a"

    def test_property(self) -> None:
        mapper = build_name_mapper("P(type, jar)")
        assert mapper.apply(Artifact.parse("g:a:1.0", properties={"type": "pom"})) == "pom"
        assert mapper.apply(Artifact.parse("g:a:1.0")) == "jar"

    def test_empty(self, artifact: Artifact) -> None:
        assert build_name_mapper("empty()").apply(artifact) == ""

    def test_quoted_fixed_keeps_spaces(self, artifact: Artifact) -> None:
        assert build_name_mapper("compose(A(), fixed(' - '), V())").apply(artifact) == "a - 1.0"

    def test_blank_fixed_rejected(self) -> None:
        with pytest.raises(SpecConfigError, match="invalid fixed text"):
            build_name_mapper("fixed(' ')")
        with pytest.raises(ValueError):
            fixed("")

    def test_blank_prefix_rejected(self) -> None:
        with pytest.raises(SpecConfigError, match="invalid prefix"):
            build_name_mapper("optionalPrefix(' ', C())")

    def test_properties_in_fixed(self, artifact: Artifact) -> None:
        mapper = build_name_mapper("compose(fixed(${prefix}), A())", {"prefix": "lib-"})
        assert mapper.apply(artifact) == "lib-a"

    def test_unknown_layout(self) -> None:
        with pytest.raises(SpecConfigError, match="Unknown artifact name mapper op GVAE"):
            build_name_mapper("GVAE()")
