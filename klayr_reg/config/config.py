MODULE_INTEROPERABILITY = "interoperability"
COMMAND_REGISTER_MAINCHAIN = "registerMainchain"
COMMAND_REGISTER_SIDECHAIN = "registerSidechain"

# Signing domain tags
TAG_TRANSACTION = "KLY_TX_"
MESSAGE_TAG_CHAIN_REG = "KLY_CHAIN_REG_"

# Fees in base units
REGISTER_MAINCHAIN_PROVISIONAL_FEE = 2_000_000_000
REGISTER_SIDECHAIN_PROVISIONAL_FEE = 1_010_000_000
REGISTER_SIDECHAIN_FEE_BUFFER = 1_000_000_000
DEFAULT_MIN_FEE_PER_BYTE = 1000
SIGNATURE_LENGTH = 64

DEFAULT_PHRASE_PATH = "m/44'/134'/0'"

# IPC sockets of a node, relative to its data path
IPC_SOCKETS_DIR = "tmp/sockets"
IPC_RPC_SOCKET_NAME = "bus_rpc_socket.sock"

ADDRESS_PREFIX = "kly"

BLS_PUBLIC_KEY_LENGTH = 48
CHAIN_ID_LENGTH = 4
ED25519_PUBLIC_KEY_LENGTH = 32

# setting name -> environment variable
ENV_VARS = {
    "config": "KLAYR_REG_CONFIG",
    "main_ipc": "KLAYR_REG_MAINCHAIN_IPC",
    "main_ws": "KLAYR_REG_MAINCHAIN_WS",
    "side_ipc": "KLAYR_REG_SIDECHAIN_IPC",
    "side_ws": "KLAYR_REG_SIDECHAIN_WS",
    "side_name": "KLAYR_REG_SIDECHAIN_NAME",
    "keys": "KLAYR_REG_SIDECHAIN_KEYS",
    "prompt_path": "KLAYR_REG_PROMPT_PATH",
    "phrase_path": "KLAYR_REG_PHRASE_PATH",
    "main_phrase_path": "KLAYR_REG_MAINCHAIN_PHRASE_PATH",
    "side_phrase_path": "KLAYR_REG_SIDECHAIN_PHRASE_PATH",
    "relayer_phrase": "KLAYR_REG_RELAYER_PHRASE",
    "main_relayer_phrase": "KLAYR_REG_MAINCHAIN_RELAYER_PHRASE",
    "side_relayer_phrase": "KLAYR_REG_SIDECHAIN_RELAYER_PHRASE",
    "authorize_cc": "KLAYR_REG_AUTHORIZE_CC",
    "cc_pass": "KLAYR_REG_CC_PASSWORD",
    "main_cc_pass": "KLAYR_REG_MAINCHAIN_CC_PASSWORD",
    "side_cc_pass": "KLAYR_REG_SIDECHAIN_CC_PASSWORD",
    "register_mainchain_fee": "KLAYR_REG_REGISTER_MAINCHAIN_FEE",
    "register_sidechain_fee": "KLAYR_REG_REGISTER_SIDECHAIN_FEE",
    "log_file": "KLAYR_REG_LOG_FILE",
}
