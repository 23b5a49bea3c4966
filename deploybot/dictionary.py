# -*- coding: utf-8 -*-
"""
Command dictionary: short key -> shell template.

Example dictionary.json:

    {
      "api": "cd ${LOCATION}/api && git fetch && git checkout ${BRANCH} && git pull",
      "web": "cd ${LOCATION}/web && git checkout ${BRANCH} && npm run build"
    }

The loaded mapping is read-only for the lifetime of the process.
"""

import json
from types import MappingProxyType
from typing import Mapping

from deploybot.errors import DictionaryError


def load_dictionary(path: str) -> Mapping[str, str]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except OSError as e:
        raise DictionaryError(f"cannot read {path}: {e}") from e
    except ValueError as e:
        raise DictionaryError(f"invalid JSON in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise DictionaryError(f"{path} must hold a JSON object")

    for key, template in raw.items():
        if not isinstance(template, str):
            raise DictionaryError(f"template for key `{key}` must be a string")

    return MappingProxyType(dict(raw))
