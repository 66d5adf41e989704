from ctitools.annotations import Annotations, AnnotationsCollector
from ctitools.schema import Schema


def test_collect_no_annotations():
    schema = Schema(
        type="object",
        properties={"foo": Schema(type="string", cti_cti="test.annotation")},
    )
    assert AnnotationsCollector().collect(schema) == {}


def test_collect_single_annotation():
    schema = Schema(
        type="object",
        properties={"foo": Schema(type="string", cti_schema="test.annotation")},
    )
    result = AnnotationsCollector().collect(schema)
    assert result == {".foo": Annotations(schema="test.annotation")}


def test_collect_multiple_annotations():
    schema = Schema(
        type="object",
        properties={"bar": Schema(type="integer", cti_display_name=True)},
    )
    result = AnnotationsCollector().collect(schema)
    assert ".bar" in result
    assert result[".bar"].display_name is True


def test_collect_union_shape():
    schema = Schema(
        any_of=[
            Schema(type="string", cti_id=True),
            Schema(type="integer", cti_overridable=False),
        ]
    )
    result = AnnotationsCollector().collect(schema)
    assert any(ann.id is True for ann in result.values())
    assert any(ann.overridable is False for ann in result.values())


def test_union_members_merge_at_same_path():
    schema = Schema(
        any_of=[
            Schema(type="string", cti_id=True),
            Schema(type="integer", cti_overridable=False),
        ]
    )
    result = AnnotationsCollector().collect(schema)
    assert list(result) == ["."]
    assert result["."] == Annotations(id=True, overridable=False)


def test_collect_array_shape():
    schema = Schema(type="array", items=Schema(type="string", cti_id=True))
    result = AnnotationsCollector().collect(schema)
    assert ".#" in result
    assert result[".#"].id is True


def test_collect_property_names_annotation():
    property_names = {"foo": "bar"}
    schema = Schema(
        type="object",
        properties={"baz": Schema(type="string", cti_property_names=property_names)},
    )
    result = AnnotationsCollector().collect(schema)
    assert result[".baz"].property_names == property_names


def test_nested_paths_and_pattern_properties():
    schema = Schema(
        type="object",
        properties={
            "outer": Schema(
                type="object",
                properties={
                    "list": Schema(type="array", items=Schema(type="string", cti_asset=True)),
                },
            )
        },
        pattern_properties={"^x": Schema(type="string", cti_meta="cti.x.y.meta.v1.0")},
    )
    result = AnnotationsCollector().collect(schema)
    assert result[".outer.list.#"] == Annotations(asset=True)
    assert result[".^x"].meta == "cti.x.y.meta.v1.0"


def test_collect_starts_afresh_each_time():
    collector = AnnotationsCollector()
    collector.collect(Schema(type="string", cti_id=True))
    assert collector.collect(Schema(type="string")) == {}


def test_read_reference_and_schema():
    assert Annotations(reference="cti.x.y.a.v1.0").read_reference() == ["cti.x.y.a.v1.0"]
    assert Annotations(reference=["cti.x.y.a.v1.0", "cti.x.y.b.v1.0"]).read_reference() == [
        "cti.x.y.a.v1.0",
        "cti.x.y.b.v1.0",
    ]
    assert Annotations(reference=True).read_reference() == []
    assert Annotations(schema=["cti.x.y.a.v1.0", None]).read_cti_schema() == ["cti.x.y.a.v1.0", None]
    assert Annotations().read_cti_schema() == []