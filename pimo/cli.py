# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
import argparse, json, sys
from typing import Any, Iterator, List
from bson import json_util
from pimo import log as ops_log
from pimo.config import get_cfg, reload_cfg
from pimo.errors import MalformedRecordError, PimoError
from pimo.metrics import snapshot
from pimo.options import parse_arguments
from pimo.service import MongoStorage
from pimo.writers.factory import get_writer

def _storage_args(args) -> List[str]:
    if args.arg:
        return list(args.arg)
    return list(get_cfg().get("storage.args") or [])

def _records(path: str | None) -> Iterator[List[Any]]:
    fh = open(path, "r", encoding="utf-8") if path and path != "-" else sys.stdin
    try:
        for lineno, line in enumerate(fh, 1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise MalformedRecordError(lineno, e.msg) from e
    finally:
        if fh is not sys.stdin:
            fh.close()

def cmd_parse_options(args):
    opts = parse_arguments(args.args)
    print(json.dumps(opts.describe(), ensure_ascii=False))

def cmd_transcode(args):
    storage = MongoStorage(*_storage_args(args))
    storage.check_schema(args.schema)
    from pimo.writers.memory_writer import MemoryWriter
    writer = MemoryWriter(update=storage.update_spec())
    storage.prepare_to_write(writer)
    for values in _records(args.file):
        doc = storage.put_next(values)
        print(json_util.dumps(doc, ensure_ascii=False))

def cmd_store(args):
    cfg = get_cfg()
    for key in ("uri", "database", "collection"):
        val = getattr(args, key)
        if val:
            cfg.set(f"writer.{key}", val)
    storage = MongoStorage(*_storage_args(args))
    storage.check_schema(args.schema)
    writer = get_writer(cfg, update=storage.update_spec())
    ops_log.configure(cfg.get("log.ops"))
    try:
        storage.prepare_to_write(writer)
        n = storage.store(_records(args.file))
    finally:
        writer.close()
        ops_log.close()
    out = {"ok": True, "written": n, "metrics": snapshot()}
    print(json.dumps(out, ensure_ascii=False))

def main_cli(argv=None):
    p = argparse.ArgumentParser(prog="pimocli")
    p.add_argument("--config", help="YAML config file (default: $PIGMONGO_CONFIG or ./config.yml)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_opts = sub.add_parser("parse-options")
    p_opts.add_argument("args", nargs="*")
    p_opts.set_defaults(func=cmd_parse_options)

    def add_pipeline_args(sp):
        sp.add_argument("--schema", required=True,
                        help="record schema, e.g. 'time:chararray,hits:long'")
        sp.add_argument("--arg", action="append",
                        help="storage argument, repeatable; defaults to storage.args")
        sp.add_argument("file", nargs="?", help="JSON-lines records (default: stdin)")

    p_trans = sub.add_parser("transcode")
    add_pipeline_args(p_trans)
    p_trans.set_defaults(func=cmd_transcode)

    p_store = sub.add_parser("store")
    add_pipeline_args(p_store)
    p_store.add_argument("--uri")
    p_store.add_argument("--database")
    p_store.add_argument("--collection")
    p_store.set_defaults(func=cmd_store)

    args = p.parse_args(argv)
    if args.config:
        reload_cfg(args.config)
    try:
        return args.func(args)
    except PimoError as e:
        print(json.dumps(e.as_dict(), ensure_ascii=False))
        return 2

if __name__ == "__main__":
    raise SystemExit(main_cli())
