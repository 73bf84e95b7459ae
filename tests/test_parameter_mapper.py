import copy
import threading
from datetime import date, datetime, timezone

import pytest

from s3assistant.tools.parameter_mapper import (
    DEFAULT_BOOLEAN_KEYS,
    DEFAULT_DATE_KEYS,
    DEFAULT_MAPPINGS,
    ConversionKind,
    MappingConfig,
    ParameterMapper,
)


@pytest.fixture
def mapper() -> ParameterMapper:
    return ParameterMapper()


FLAT_UNCONVERTED = sorted(
    (source, target)
    for source, target in DEFAULT_MAPPINGS.items()
    if "." not in target and target not in DEFAULT_DATE_KEYS and target not in DEFAULT_BOOLEAN_KEYS
)


@pytest.mark.parametrize("source,target", FLAT_UNCONVERTED)
def test_known_flat_key_maps_value_unchanged(mapper, source, target):
    value = {"nested": [1, 2]} if source == "metadata" else "some-value"
    assert mapper.map({source: value}) == {target: value}


def test_known_nested_key_builds_sub_mapping(mapper):
    assert mapper.map({"locationConstraint": "eu-west-1"}) == {
        "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"}
    }


def test_nested_targets_share_parent(mapper):
    mapper.extend("bucketLocationType", "CreateBucketConfiguration.Location")
    out = mapper.map({"locationConstraint": "eu-west-1", "bucketLocationType": {"Type": "AvailabilityZone"}})
    assert out == {
        "CreateBucketConfiguration": {
            "LocationConstraint": "eu-west-1",
            "Location": {"Type": "AvailabilityZone"},
        }
    }


def test_nested_values_are_not_converted(mapper):
    mapper.extend("lockUntil", "Retention.RetainUntilDate", ConversionKind.DATE)
    assert mapper.map({"lockUntil": "2024-01-01"}) == {"Retention": {"RetainUntilDate": "2024-01-01"}}


@pytest.mark.parametrize("target", sorted(DEFAULT_BOOLEAN_KEYS))
def test_boolean_conversion_is_strict(mapper, target):
    assert mapper.convert(target, True) is True
    assert mapper.convert(target, "true") is True
    assert mapper.convert(target, "false") is False
    assert mapper.convert(target, False) is False
    assert mapper.convert(target, "yes") is False
    assert mapper.convert(target, "True") is False
    assert mapper.convert(target, 1) is False


@pytest.mark.parametrize("target", sorted(DEFAULT_DATE_KEYS))
def test_date_conversion_parses_iso_dates(mapper, target):
    assert mapper.convert(target, "2024-01-01") == datetime(2024, 1, 1)


@pytest.mark.parametrize("target", sorted(DEFAULT_DATE_KEYS))
def test_date_conversion_rejects_garbage(mapper, target):
    with pytest.raises(ValueError):
        mapper.convert(target, "not-a-date")


def test_date_conversion_handles_zulu_and_native_values(mapper):
    assert mapper.convert("Expires", "2024-06-01T12:30:00Z") == datetime(2024, 6, 1, 12, 30, tzinfo=timezone.utc)
    assert mapper.convert("Expires", date(2024, 6, 1)) == datetime(2024, 6, 1)
    stamp = datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert mapper.convert("Expires", stamp) is stamp
    assert mapper.convert("Expires", 0) == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_map_propagates_date_parse_errors(mapper):
    with pytest.raises(ValueError):
        mapper.map({"ifModifiedSince": "yesterday-ish"})


def test_unregistered_target_passes_through(mapper):
    assert mapper.convert("ContentType", "text/plain") == "text/plain"
    assert mapper.convert("Whatever", 42) == 42


@pytest.mark.parametrize("key,expected", [
    ("customFlag", "CustomFlag"),
    ("someHttpHeader", "SomeHttpHeader"),
    ("x", "X"),
    ("Already", "Already"),
])
def test_unknown_keys_use_capitalize_first_fallback(mapper, key, expected):
    value = object()
    assert mapper.map({key: value}) == {expected: value}


def test_fallback_values_are_not_converted(mapper):
    # "expires" is known, but a PascalCase input key is unknown and goes through the fallback
    assert mapper.map({"Expires": "not-a-date"}) == {"Expires": "not-a-date"}


def test_null_values_are_dropped(mapper):
    assert mapper.map({"bucketName": None, "customFlag": None}) == {}
    assert mapper.map({"bucketName": "logs", "versionId": None}) == {"Bucket": "logs"}


def test_empty_and_missing_input(mapper):
    assert mapper.map({}) == {}
    assert mapper.map(None) == {}


def test_map_is_pure(mapper):
    params = {
        "bucketName": "logs",
        "locationConstraint": "eu-west-1",
        "metadata": {"owner": "ops"},
        "objectLockEnabledForBucket": "true",
        "customFlag": [1, 2],
    }
    snapshot = copy.deepcopy(params)
    table_before = dict(mapper.config.table)

    first = mapper.map(params)
    second = mapper.map(params)

    assert first == second
    assert params == snapshot
    assert mapper.config.table == table_before


def test_last_write_wins_in_input_order(mapper):
    assert mapper.map({"Bucket": "fallback", "bucketName": "known"}) == {"Bucket": "known"}
    assert mapper.map({"bucketName": "known", "Bucket": "fallback"}) == {"Bucket": "fallback"}


def test_extend_registers_boolean_target(mapper):
    mapper.extend("newParam", "NewParam", "boolean")
    assert mapper.map({"newParam": "true"}) == {"NewParam": True}
    assert mapper.map({"newParam": "nope"}) == {"NewParam": False}


def test_extend_overwrites_existing_mapping(mapper):
    mapper.extend("fileName", "ObjectKey")
    assert mapper.map({"fileName": "a.txt"}) == {"ObjectKey": "a.txt"}


def test_extend_keeps_conversion_sets_disjoint():
    config = MappingConfig.default()
    config.extend("flag", "Flag", ConversionKind.BOOLEAN)
    config.extend("flag", "Flag", ConversionKind.DATE)
    assert config.conversion_for("Flag") is ConversionKind.DATE
    assert "Flag" not in config.boolean_keys


def test_extend_rejects_unknown_kind():
    with pytest.raises(ValueError):
        MappingConfig.default().extend("a", "A", "integer")


def test_deep_targets_are_skipped(mapper, caplog):
    mapper.extend("deep", "A.B.C")
    with caplog.at_level("WARNING"):
        assert mapper.map({"deep": 1, "bucketName": "logs"}) == {"Bucket": "logs"}
    assert "A.B.C" in caplog.text


def test_configs_are_isolated():
    first = ParameterMapper(MappingConfig.default())
    second = ParameterMapper(MappingConfig.default())
    first.extend("teamTag", "TeamTag", ConversionKind.BOOLEAN)

    assert first.map({"teamTag": "true"}) == {"TeamTag": True}
    assert second.map({"teamTag": "true"}) == {"TeamTag": "true"}
    assert "teamTag" not in DEFAULT_MAPPINGS


def test_shared_config_is_seen_by_every_mapper():
    config = MappingConfig.default()
    writer = ParameterMapper(config)
    reader = ParameterMapper(config)
    writer.extend("teamTag", "Team")
    assert reader.map({"teamTag": "ops"}) == {"Team": "ops"}


def test_create_bucket_example(mapper):
    out = mapper.map({
        "bucketName": "logs",
        "acl": "private",
        "locationConstraint": "eu-west-1",
        "objectLockEnabledForBucket": "true",
    })
    assert out == {
        "Bucket": "logs",
        "ACL": "private",
        "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"},
        "ObjectLockEnabledForBucket": True,
    }


def test_concurrent_map_sees_whole_snapshots():
    config = MappingConfig.default()
    writer = ParameterMapper(config)
    keys = [f"flag{i}" for i in range(200)]
    inputs = {key: {key: "true", "bucketName": "logs"} for key in keys}
    done = threading.Event()
    torn = []

    def extend_all():
        for key in keys:
            writer.extend(key, "Ext" + key, ConversionKind.BOOLEAN)
        done.set()

    def read_until_done():
        reader = ParameterMapper(config)
        while not done.is_set():
            for key in keys:
                out = reader.map(inputs[key])
                before = {"Bucket": "logs", ParameterMapper.fallback_key(key): "true"}
                after = {"Bucket": "logs", "Ext" + key: True}
                if out not in (before, after):
                    torn.append(out)

    readers = [threading.Thread(target=read_until_done) for _ in range(4)]
    for thread in readers:
        thread.start()
    extend_all()
    for thread in readers:
        thread.join()

    assert torn == []
    assert writer.map({"flag199": "true"}) == {"Extflag199": True}
