"""
Tests for Param and the ABSENT marker.

Tests cover:
- Construction (positional value, keyword value, from_mapping)
- Mapping and attribute access
- Immutability and derivation (with_value, with_item)
- Equality, hashing, repr, pickling
"""

import copy
import pickle

import pytest

from modelparams import ABSENT, KeyNotFound, Param, set_value_key


class TestConstruction:
    """Test the ways a Param can be built."""

    def test_positional_value(self):
        """Positional value is stored under 'val' first."""
        p = Param(1.5, units="m", bounds=(0, 2))
        assert p.keys() == ("val", "units", "bounds")
        assert p.value == 1.5
        assert p["val"] == 1.5

    def test_keyword_value_key(self):
        """Without a positional value the first keyword is the value key."""
        p = Param(value=3, units="s")
        assert p.keys() == ("value", "units")
        assert p.value_key == "value"
        assert p.value == 3

    def test_keyword_configured_value_key_moved_first(self):
        """The configured value key leads even when passed after metadata."""
        p = Param(units="m", val=1)
        assert p.keys() == ("val", "units")
        assert p.value == 1
        assert p == Param(1, units="m")

    def test_from_mapping(self):
        """from_mapping keeps the mapping's key order."""
        p = Param.from_mapping([("mean", 0.0), ("sd", 1.0)])
        assert p.keys() == ("mean", "sd")
        assert p.value == 0.0

    def test_too_many_positionals(self):
        with pytest.raises(TypeError):
            Param(1, 2)

    def test_value_given_twice(self):
        with pytest.raises(TypeError):
            Param(1, val=2)

    def test_empty_param_rejected(self):
        with pytest.raises(ValueError):
            Param()
        with pytest.raises(ValueError):
            Param.from_mapping({})

    def test_configured_value_key(self):
        """set_value_key changes where positional values go."""
        set_value_key("value")
        assert Param(4).keys() == ("value",)

    def test_reserved_value_key_rejected(self):
        with pytest.raises(ValueError):
            set_value_key("component")


class TestAccess:
    """Test reading keys from a Param."""

    def test_missing_key_raises_key_not_found(self):
        """Missing keys raise KeyNotFound, which is a KeyError."""
        p = Param(1)
        with pytest.raises(KeyNotFound):
            p["units"]
        with pytest.raises(KeyError):
            p["units"]

    def test_get_with_default(self):
        p = Param(1)
        assert p.get("units") is None
        assert p.get("units", ABSENT) is ABSENT

    def test_attribute_access(self):
        p = Param(2.0, units="kg")
        assert p.units == "kg"
        assert p.val == 2.0

    def test_keys_shadowed_by_methods_read_by_subscription(self):
        """Keys named like a method or property are read with p[key]."""
        p = Param(1, parent="ecosystem", keys="k")
        assert p["parent"] == "ecosystem"
        assert p["keys"] == "k"
        assert p.parent["parent"] == "ecosystem"
        assert p.keys() == ("val", "parent", "keys")

    def test_missing_attribute(self):
        with pytest.raises(AttributeError):
            Param(1).units

    def test_mapping_protocol(self):
        p = Param(1, units="m")
        assert len(p) == 2
        assert list(p) == ["val", "units"]
        assert "units" in p
        assert dict(p.items()) == {"val": 1, "units": "m"}

    def test_parent_is_read_only(self):
        p = Param(1, units="m")
        with pytest.raises(TypeError):
            p.parent["units"] = "km"


class TestImmutability:
    """Test that Params are only ever derived, never changed."""

    def test_setattr_raises(self):
        p = Param(1, units="m")
        with pytest.raises(AttributeError):
            p.units = "km"
        with pytest.raises(AttributeError):
            p.val = 2

    def test_with_value_keeps_metadata(self):
        """with_value replaces the first key and keeps the rest in order."""
        p = Param(1, units="m", bounds=(0, 5))
        q = p.with_value(3)
        assert q.keys() == ("val", "units", "bounds")
        assert q.value == 3
        assert q.units == "m"
        assert q.bounds == (0, 5)
        assert p.value == 1

    def test_with_value_on_custom_value_key(self):
        q = Param(value=1, units="m").with_value(2)
        assert q["value"] == 2
        assert q.keys() == ("value", "units")

    def test_with_item_existing_key_keeps_position(self):
        p = Param(1, units="m", bounds=(0, 5))
        q = p.with_item("units", "km")
        assert q.keys() == ("val", "units", "bounds")
        assert q.units == "km"
        assert p.units == "m"

    def test_with_item_new_key_appended(self):
        q = Param(1, units="m").with_item("description", "length")
        assert q.keys() == ("val", "units", "description")


class TestDunder:
    """Test equality, hashing, repr and pickling."""

    def test_equality_is_order_sensitive(self):
        a = Param.from_mapping([("val", 1), ("units", "m")])
        b = Param.from_mapping([("units", "m"), ("val", 1)])
        assert a == Param(1, units="m")
        assert a != b

    def test_not_equal_to_dict(self):
        assert Param(1) != {"val": 1}

    def test_hash(self):
        assert hash(Param(1, units="m")) == hash(Param(1, units="m"))
        assert len({Param(1), Param(1), Param(2)}) == 2

    def test_repr(self):
        assert repr(Param(1, units="m")) == "Param(val=1, units='m')"

    def test_pickle_round_trip(self):
        p = Param(1, units="m", bounds=ABSENT)
        q = pickle.loads(pickle.dumps(p))
        assert q == p
        assert q.bounds is ABSENT

    def test_copy(self):
        p = Param(1, units="m")
        assert copy.copy(p) == p
        assert copy.deepcopy(p) == p


class TestAbsent:
    """Test the ABSENT marker."""

    def test_distinct_from_falsy_values(self):
        assert ABSENT is not None
        assert ABSENT != 0
        assert ABSENT is not False
        assert not ABSENT

    def test_repr(self):
        assert repr(ABSENT) == "ABSENT"

    def test_singleton_survives_copy_and_pickle(self):
        assert copy.copy(ABSENT) is ABSENT
        assert copy.deepcopy(ABSENT) is ABSENT
        assert pickle.loads(pickle.dumps(ABSENT)) is ABSENT
        assert type(ABSENT)() is ABSENT
