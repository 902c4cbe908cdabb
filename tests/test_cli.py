# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

import json
import pytest
from pimo import cli as pmcli
from pimo import metrics

def _out(capsys):
    return [json.loads(l) for l in capsys.readouterr().out.strip().splitlines()]

@pytest.fixture
def records(tmp_path):
    path = tmp_path / "records.jsonl"
    path.write_text(
        '["2011-01-01T00:00:00.000Z", "web1", 3, {"n": "7"}, [["/a"], ["/b"]]]\n'
        '\n'
        '["2011-01-02T00:00:00.000Z", null, 4, {}, []]\n',
        encoding="utf-8")
    return str(path)

SCHEMA = "time:chararray,host:chararray,hits:long,tags:map[],pages:{t:(path:chararray)}"

def test_parse_options(capsys):
    rc = pmcli.main_cli(["parse-options", "multi [a, b]", "dropnull=true", "{a:1},{sparse:true}"])
    assert rc is None
    (out,) = _out(capsys)
    assert out["update"] == {"keys": ["a", "b"], "multi": True}
    assert out["drop_null"] is True
    assert out["indexes"][0]["options"]["sparse"] is True

def test_parse_options_malformed(capsys):
    rc = pmcli.main_cli(["parse-options", "{unbalanced"])
    assert rc == 2
    (out,) = _out(capsys)
    assert out["ok"] is False
    assert out["code"] == "malformed_option"
    assert out["argument"] == "{unbalanced"

def test_transcode_prints_documents(capsys, records):
    pmcli.main_cli(["transcode", "--schema", SCHEMA,
                    "--arg", "id=time", "--arg", "dropnull=true", records])
    docs = _out(capsys)
    assert len(docs) == 2
    assert "$date" in docs[0]["_id"]
    assert docs[0]["host"] == "web1"
    assert docs[0]["tags"] == {"n": 7}
    assert docs[0]["pages"] == [{"path": "/a"}, {"path": "/b"}]
    assert "host" not in docs[1]
    assert docs[1]["pages"] == []

def test_transcode_uses_configured_args(capsys, records, cfg):
    cfg.set("storage.args", ["id=host"])
    pmcli.main_cli(["transcode", "--schema", SCHEMA, records])
    docs = _out(capsys)
    assert docs[0]["_id"] == "web1"
    assert docs[1]["host"] is None

def test_transcode_bad_schema(capsys, records):
    rc = pmcli.main_cli(["transcode", "--schema", "a:boolean", records])
    assert rc == 2
    assert _out(capsys)[0]["code"] == "schema_syntax_error"

def test_store_with_memory_writer(capsys, records, cfg):
    cfg.set("writer.type", "memory")
    pmcli.main_cli(["store", "--schema", SCHEMA, "--arg", "update [time]",
                    "--arg", "{time:1},{unique:true}", "--collection", "hits", records])
    (out,) = _out(capsys)
    assert out["ok"] is True
    assert out["written"] == 2
    assert cfg.get("writer.collection") == "hits"
    assert metrics.get("indexes_ensured_total") == 1
    assert metrics.get("documents_written_total") == 2

def test_store_bad_uri_envelope(capsys, records, cfg):
    cfg.set("writer.type", "mongo")
    rc = pmcli.main_cli(["store", "--schema", SCHEMA, "--uri", "http://nope", records])
    assert rc == 2
    (out,) = _out(capsys)
    assert out["ok"] is False
    assert out["code"] == "invalid_uri"

def test_transcode_bad_json_envelope(capsys, tmp_path):
    path = tmp_path / "bad.jsonl"
    path.write_text('[1, "a"]\n[2, \n', encoding="utf-8")
    rc = pmcli.main_cli(["transcode", "--schema", "n:int, s:chararray", str(path)])
    assert rc == 2
    docs = _out(capsys)
    assert docs[0] == {"n": 1, "s": "a"}
    assert docs[-1]["code"] == "malformed_record"
    assert "line 2" in docs[-1]["error"]
