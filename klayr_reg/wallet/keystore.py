import json
import logging
import os
from typing import List, Optional

from pydantic import ValidationError

from klayr_reg.errors.exceptions import KeystoreError
from klayr_reg.models.chain import KeystoreEntry

logger = logging.getLogger(__name__)


def load_keystore(path: Optional[str]) -> List[KeystoreEntry]:
    """
    Load validator BLS keys from ``{"keys": [{"plain": {"blsKey", "blsPrivateKey"}}]}``.

    A missing file is an empty keystore.
    """
    if not path or not os.path.exists(path):
        logger.debug(f"Keystore {path!r} not found, using an empty keystore")
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise KeystoreError(f"Invalid JSON in keystore {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise KeystoreError(f"Cannot read keystore {path}: {e}") from e

    keys = data.get("keys", []) if isinstance(data, dict) else None
    if not isinstance(keys, list):
        raise KeystoreError(f"Keystore {path} has no 'keys' list")

    entries = []
    for i, item in enumerate(keys):
        plain = item.get("plain") if isinstance(item, dict) else None
        if not isinstance(plain, dict):
            raise KeystoreError(f"Keystore entry {i} has no 'plain' section")
        try:
            entries.append(KeystoreEntry(**plain))
        except ValidationError as e:
            raise KeystoreError(f"Keystore entry {i} is invalid: {e}") from e
    return entries
