import argparse

from klayr_reg import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="klayr-reg",
        description="Register a sidechain on the mainchain and the mainchain on the sidechain.",
    )
    # flags default to None so that unset flags never shadow config or environment values
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="Verbose mode")
    parser.add_argument("-c", "--config", type=str, help="Config file path")
    parser.add_argument("--side-name", type=str, help="Sidechain name for registration")
    parser.add_argument("--keys", type=str, help="Sidechain validators keys file")
    parser.add_argument("--main-ipc", type=str, help="Mainchain node data path for IPC")
    parser.add_argument("--main-ws", type=str, help="Mainchain WebSocket URL")
    parser.add_argument("--side-ipc", type=str, help="Sidechain node data path for IPC")
    parser.add_argument("--side-ws", type=str, help="Sidechain WebSocket URL")
    parser.add_argument("--authorize-cc", action="store_true", default=None,
                        help="Authorize the chain-connector plugin after registration")
    parser.add_argument("--cc-pass", type=str, help="CC password for both mainchain and sidechain")
    parser.add_argument("--main-cc-pass", type=str, help="CC password for mainchain")
    parser.add_argument("--side-cc-pass", type=str, help="CC password for sidechain")
    parser.add_argument("--relayer-phrase", type=str, help="Relayer phrase for both chains")
    parser.add_argument("--main-relayer-phrase", type=str, help="Relayer phrase for mainchain")
    parser.add_argument("--side-relayer-phrase", type=str, help="Relayer phrase for sidechain")
    parser.add_argument("--prompt-path", action="store_true", default=None, help="Prompt to set phrase path")
    parser.add_argument("--phrase-path", type=str, help="Phrase path for both chains")
    parser.add_argument("--main-phrase-path", type=str, help="Phrase path for mainchain")
    parser.add_argument("--side-phrase-path", type=str, help="Phrase path for sidechain")
    parser.add_argument("--register-mainchain-fee", type=str, help="Custom registerMainchain transaction fee")
    parser.add_argument("--register-sidechain-fee", type=str, help="Custom registerSidechain transaction fee")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")
    parser.add_argument("--log-json", action="store_true", default=None, help="Structured JSON log output")
    parser.add_argument("--no-prompt", action="store_true", help="Fail instead of prompting for missing values")
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
