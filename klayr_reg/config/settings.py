"""
Settings resolution for klayr-reg.

Values come from an explicit, ordered list of sources (command line, config
file, environment, interactive answers). Each key is resolved once, taking
the first non-empty value. Core code only ever sees the resulting
``Settings`` object.
"""

import json
import os
from typing import Any, Dict, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from klayr_reg.config.config import DEFAULT_PHRASE_PATH, ENV_VARS
from klayr_reg.errors.exceptions import ConfigurationError

SECRET_FIELDS = ("relayer_phrase", "cc_password")

# camelCase keys accepted in JSON config files
_CONFIG_FILE_KEYS = {
    "mainIpc": "main_ipc",
    "mainWs": "main_ws",
    "sideIpc": "side_ipc",
    "sideWs": "side_ws",
    "sideName": "side_name",
    "keys": "keys",
    "promptPath": "prompt_path",
    "phrasePath": "phrase_path",
    "mainPhrasePath": "main_phrase_path",
    "sidePhrasePath": "side_phrase_path",
    "relayerPhrase": "relayer_phrase",
    "mainRelayerPhrase": "main_relayer_phrase",
    "sideRelayerPhrase": "side_relayer_phrase",
    "authorizeCc": "authorize_cc",
    "ccPass": "cc_pass",
    "mainCcPass": "main_cc_pass",
    "sideCcPass": "side_cc_pass",
    "registerMainchainFee": "register_mainchain_fee",
    "registerSidechainFee": "register_sidechain_fee",
    "logFile": "log_file",
}


class ChainSettings(BaseModel):
    """Connection and relayer settings for one chain"""
    model_config = ConfigDict(frozen=True)

    ipc: Optional[str] = None
    ws: Optional[str] = None
    relayer_phrase: Optional[str] = None
    phrase_path: Optional[str] = None
    cc_password: Optional[str] = None

    @property
    def has_endpoint(self) -> bool:
        return bool(self.ipc or self.ws)

    @property
    def derivation_path(self) -> str:
        return self.phrase_path or DEFAULT_PHRASE_PATH


class Settings(BaseModel):
    """Fully resolved run settings"""
    model_config = ConfigDict(frozen=True)

    mainchain: ChainSettings = Field(default_factory=ChainSettings)
    sidechain: ChainSettings = Field(default_factory=ChainSettings)
    side_name: Optional[str] = None
    keys: Optional[str] = None
    prompt_path: bool = False
    authorize_cc: bool = False
    register_mainchain_fee: Optional[int] = Field(None, ge=0)
    register_sidechain_fee: Optional[int] = Field(None, ge=0)
    verbose: bool = False
    log_file: Optional[str] = None
    log_json: bool = False

    @field_validator("register_mainchain_fee", "register_sidechain_fee", mode="before")
    @classmethod
    def parse_fee(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v.isdigit():
                raise ValueError("fee must be a non-negative integer in base units")
            return int(v)
        return v

    def masked(self) -> Dict[str, Any]:
        """Settings as a dict with secrets replaced, safe for logging"""
        data = self.model_dump()
        for chain in ("mainchain", "sidechain"):
            for field in SECRET_FIELDS:
                if data[chain].get(field):
                    data[chain][field] = "***"
        return data


def load_json(path: Optional[str]) -> dict:
    """Load a JSON file; a missing file yields an empty dict."""
    if not path:
        return {}
    abs_path = os.path.abspath(path)
    if not os.path.exists(abs_path):
        return {}
    try:
        with open(abs_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must hold a JSON object")
    return data


def config_file_source(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalize a config-file mapping to setting names."""
    return {_CONFIG_FILE_KEYS[k]: v for k, v in data.items() if k in _CONFIG_FILE_KEYS}


def environment_source(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Pick the KLAYR_REG_* variables out of an environment mapping."""
    return {name: environ[var] for name, var in ENV_VARS.items() if var in environ}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def first_value(sources: Iterable[Mapping[str, Any]], key: str) -> Any:
    for source in sources:
        value = source.get(key)
        if value is not None and value != "":
            return value
    return None


def resolve_settings(sources: Iterable[Mapping[str, Any]]) -> Settings:
    """Resolve an ordered list of sources into one ``Settings`` value."""
    sources = list(sources)

    def pick(key):
        return first_value(sources, key)

    def chain(prefix: str) -> ChainSettings:
        return ChainSettings(
            ipc=pick(f"{prefix}_ipc"),
            ws=pick(f"{prefix}_ws"),
            # shared values take precedence over per-chain ones
            relayer_phrase=pick("relayer_phrase") or pick(f"{prefix}_relayer_phrase"),
            phrase_path=pick("phrase_path") or pick(f"{prefix}_phrase_path"),
            cc_password=pick("cc_pass") or pick(f"{prefix}_cc_pass"),
        )

    try:
        return Settings(
            mainchain=chain("main"),
            sidechain=chain("side"),
            side_name=pick("side_name"),
            keys=pick("keys"),
            prompt_path=_as_bool(pick("prompt_path") or False),
            authorize_cc=_as_bool(pick("authorize_cc") or False),
            register_mainchain_fee=pick("register_mainchain_fee"),
            register_sidechain_fee=pick("register_sidechain_fee"),
            verbose=_as_bool(pick("verbose") or False),
            log_file=pick("log_file"),
            log_json=_as_bool(pick("log_json") or False),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
