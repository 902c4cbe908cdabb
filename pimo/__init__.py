# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later
__all__ = [
    "config", "log", "metrics", "errors", "schemas", "dates", "options",
    "schema_parser", "transcode", "service", "cli", "writers",
]
