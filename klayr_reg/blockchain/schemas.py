from klayr_reg.config.config import BLS_PUBLIC_KEY_LENGTH, CHAIN_ID_LENGTH, ED25519_PUBLIC_KEY_LENGTH

transaction_schema = {
    "$id": "/klayr/transaction",
    "type": "object",
    "required": ["module", "command", "nonce", "fee", "senderPublicKey", "params"],
    "properties": {
        "module": {"dataType": "string", "fieldNumber": 1, "minLength": 1, "maxLength": 32},
        "command": {"dataType": "string", "fieldNumber": 2, "minLength": 1, "maxLength": 32},
        "nonce": {"dataType": "uint64", "fieldNumber": 3},
        "fee": {"dataType": "uint64", "fieldNumber": 4},
        "senderPublicKey": {
            "dataType": "bytes",
            "fieldNumber": 5,
            "minLength": ED25519_PUBLIC_KEY_LENGTH,
            "maxLength": ED25519_PUBLIC_KEY_LENGTH,
        },
        "params": {"dataType": "bytes", "fieldNumber": 6},
        "signatures": {"type": "array", "fieldNumber": 7, "items": {"dataType": "bytes"}},
    },
}

_validator_item = {
    "type": "object",
    "required": ["blsKey", "bftWeight"],
    "properties": {
        "blsKey": {
            "dataType": "bytes",
            "fieldNumber": 1,
            "minLength": BLS_PUBLIC_KEY_LENGTH,
            "maxLength": BLS_PUBLIC_KEY_LENGTH,
        },
        "bftWeight": {"dataType": "uint64", "fieldNumber": 2},
    },
}

_chain_id = {
    "dataType": "bytes",
    "fieldNumber": 1,
    "minLength": CHAIN_ID_LENGTH,
    "maxLength": CHAIN_ID_LENGTH,
}

_chain_name = {"dataType": "string", "fieldNumber": 2, "minLength": 1, "maxLength": 32}

# The exact message every sidechain validator signs for registerMainchain
registration_signature_message_schema = {
    "$id": "/modules/interoperability/sidechain/registrationSignatureMessage",
    "type": "object",
    "required": ["ownChainID", "ownName", "mainchainValidators", "mainchainCertificateThreshold"],
    "properties": {
        "ownChainID": _chain_id,
        "ownName": _chain_name,
        "mainchainValidators": {"type": "array", "fieldNumber": 3, "items": _validator_item},
        "mainchainCertificateThreshold": {"dataType": "uint64", "fieldNumber": 4},
    },
}

mainchain_reg_params_schema = {
    "$id": "/modules/interoperability/sidechain/mainchainRegistration",
    "type": "object",
    "required": [
        "ownChainID",
        "ownName",
        "mainchainValidators",
        "mainchainCertificateThreshold",
        "signature",
        "aggregationBits",
    ],
    "properties": {
        **registration_signature_message_schema["properties"],
        "signature": {"dataType": "bytes", "fieldNumber": 5},
        "aggregationBits": {"dataType": "bytes", "fieldNumber": 6},
    },
}

sidechain_reg_params_schema = {
    "$id": "/modules/interoperability/mainchain/sidechainRegistration",
    "type": "object",
    "required": ["chainID", "name", "sidechainValidators", "sidechainCertificateThreshold"],
    "properties": {
        "chainID": _chain_id,
        "name": _chain_name,
        "sidechainValidators": {"type": "array", "fieldNumber": 3, "items": _validator_item},
        "sidechainCertificateThreshold": {"dataType": "uint64", "fieldNumber": 4},
    },
}
