# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

import pytest
from pydantic import ValidationError
from pimo.errors import ConfigurationParseError, MalformedOptionError
from pimo.options import parse_arguments, parse_index, parse_property, parse_update
from pimo.schemas import IndexSpec, UpdateSpec

def test_empty_arguments():
    opts = parse_arguments([])
    assert opts.update is None
    assert opts.indexes == ()
    assert not opts.should_drop_null()
    assert opts.get_id_key() is None
    assert opts.get_op_prefix() is None
    assert not opts.should_update()

def test_update_clause():
    opts = parse_arguments(["update [a,b]"])
    assert opts.update == UpdateSpec(keys=("a", "b"), multi=False)
    assert opts.should_update()

def test_multi_clause_trims_names():
    opts = parse_arguments(["multi [ time ,  servername ]"])
    assert opts.update.keys == ("time", "servername")
    assert opts.update.multi is True

def test_update_clause_without_space():
    assert parse_update("update[a]") == UpdateSpec(keys=("a",), multi=False)

def test_last_update_clause_wins():
    opts = parse_arguments(["update [a]", "multi [b, c]"])
    assert opts.update == UpdateSpec(keys=("b", "c"), multi=True)

def test_property_clause_lowercases_key():
    opts = parse_arguments(["DropNull = true", "id=time", "mongo=op_"])
    assert opts.properties == {"dropnull": "true", "id": "time", "mongo": "op_"}
    assert opts.should_drop_null()
    assert opts.get_id_key() == "time"
    assert opts.get_op_prefix() == "op_"

def test_dropnull_value_case_insensitive():
    assert parse_arguments(["dropnull=TRUE"]).should_drop_null()
    assert not parse_arguments(["dropnull=yes"]).should_drop_null()

def test_empty_property_value_disables_rule():
    opts = parse_arguments(["mongo="])
    assert opts.get_property("mongo") == ""
    assert opts.get_op_prefix() is None

def test_parse_property_shape():
    assert parse_property("a = b") == ("a", "b")
    assert parse_property("a = b c") is None

def test_index_clause():
    opts = parse_arguments(["{x:1,y:-1},{unique:true}"])
    assert opts.indexes == (IndexSpec(
        keys={"x": 1, "y": -1},
        options={"unique": True, "sparse": False, "dropDups": False, "background": False},
    ),)

def test_index_key_order_preserved():
    ix = parse_index("{ time : 1, servername : 1, hostname : -1 } , { unique:true, dropDups: true }")
    assert list(ix.keys.items()) == [("time", 1), ("servername", 1), ("hostname", -1)]
    assert ix.options["unique"] is True
    assert ix.options["dropDups"] is True
    assert ix.options["sparse"] is False
    assert ix.options["background"] is False

def test_index_option_not_true_is_false():
    ix = parse_index("{a:1},{sparse:yes, background:TRUE}")
    assert ix.options["sparse"] is False
    assert ix.options["background"] is True

def test_multiple_index_clauses_accumulate_in_order():
    opts = parse_arguments(["{a:1},{}", "update [a]", "{b:-1},{sparse:true}"])
    assert [list(ix.keys) for ix in opts.indexes] == [["a"], ["b"]]
    assert opts.indexes[0].options == {
        "sparse": False, "unique": False, "dropDups": False, "background": False}

def test_index_spec_defaults_flags_by_construction():
    ix = IndexSpec(keys={"a": 1})
    assert ix.options == {
        "sparse": False, "unique": False, "dropDups": False, "background": False}

@pytest.mark.parametrize("arg", [
    "{unbalanced",
    "{a:1}",
    "update a, b",
    "",
    "just words",
])
def test_malformed_argument(arg):
    with pytest.raises(MalformedOptionError) as ei:
        parse_arguments(["update [a]", arg])
    assert ei.value.argument == arg
    assert arg in str(ei.value)
    assert isinstance(ei.value, ConfigurationParseError)

@pytest.mark.parametrize("arg", ["{a:up},{}", "{a:2},{}", "{a:},{}", "{},{unique:true}"])
def test_bad_index_keys(arg):
    with pytest.raises(MalformedOptionError) as ei:
        parse_arguments([arg])
    assert ei.value.argument == arg

def test_options_are_immutable():
    opts = parse_arguments(["update [a]"])
    with pytest.raises(ValidationError):
        opts.update = None

def test_describe():
    d = parse_arguments(["multi [a]", "id=a", "{a:1},{unique:true}"]).describe()
    assert d["update"] == {"keys": ("a",), "multi": True}
    assert d["id_key"] == "a"
    assert d["indexes"][0]["keys"] == {"a": 1}

def test_parsed_mappings_are_read_only():
    opts = parse_arguments(["dropnull=false", "{a:1},{unique:true}"])
    with pytest.raises(TypeError):
        opts.properties["dropnull"] = "true"
    with pytest.raises(TypeError):
        opts.indexes[0].keys["b"] = 1
    with pytest.raises(TypeError):
        opts.indexes[0].options["unique"] = False
    assert not opts.should_drop_null()
    assert opts.indexes[0].model_dump() == {
        "keys": {"a": 1},
        "options": {"unique": True, "sparse": False, "dropDups": False, "background": False},
    }
