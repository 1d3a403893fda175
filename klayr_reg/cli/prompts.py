"""
Interactive completion of settings that no source provided.

Answers come back as one more settings source, using per-chain keys only,
so they never override a value given on the command line, in the config
file or in the environment.
"""

import getpass
from typing import Callable, Dict

from klayr_reg.config.config import DEFAULT_PHRASE_PATH
from klayr_reg.config.settings import Settings

Ask = Callable[[str], str]


def _confirm(ask: Ask, question: str, default: bool = True) -> bool:
    suffix = " [Y/n] " if default else " [y/N] "
    answer = ask(question + suffix).strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def _endpoint_answer(answer: str, prefix: str) -> Dict[str, str]:
    answer = answer.strip()
    if answer.startswith("ws"):
        return {f"{prefix}_ws": answer}
    return {f"{prefix}_ipc": answer}


def _per_chain_secret(
    ask: Ask,
    ask_secret: Ask,
    key: str,
    label: str,
    main_missing: bool,
    side_missing: bool,
) -> Dict[str, str]:
    answers = {}
    if main_missing and side_missing and _confirm(ask, f"Use the same {label} for both chains?"):
        value = ask_secret(f"Enter {label} for both chains: ")
        return {f"main_{key}": value, f"side_{key}": value}
    if main_missing:
        answers[f"main_{key}"] = ask_secret(f"Enter {label} for mainchain: ")
    if side_missing:
        answers[f"side_{key}"] = ask_secret(f"Enter {label} for sidechain: ")
    return answers


_PHRASE_PATH_CHOICES = {
    "1": "default", "default": "default",
    "2": "both", "both": "both",
    "3": "each", "each": "each",
}


def _phrase_path_answers(ask: Ask, main_missing: bool, side_missing: bool) -> Dict[str, str]:
    menu = (
        "Choose phrase path option:\n"
        f"  1) Use default path for both chains (\"{DEFAULT_PHRASE_PATH}\")\n"
        "  2) Specify path for both chains\n"
        "  3) Specify path for each chain\n"
        "[1] "
    )
    while True:
        answer = ask(menu).strip().lower() or "default"
        if answer in _PHRASE_PATH_CHOICES:
            break
    choice = _PHRASE_PATH_CHOICES[answer]

    answers = {}
    if choice == "both":
        path = ask("Enter phrase path for both chains: ").strip()
        if main_missing:
            answers["main_phrase_path"] = path
        if side_missing:
            answers["side_phrase_path"] = path
    elif choice == "each":
        if main_missing:
            answers["main_phrase_path"] = ask("Enter phrase path for mainchain: ").strip()
        if side_missing:
            answers["side_phrase_path"] = ask("Enter phrase path for sidechain: ").strip()
    return answers


def collect_missing(
    settings: Settings,
    ask: Ask = input,
    ask_secret: Ask = getpass.getpass,
) -> Dict[str, str]:
    answers: Dict[str, str] = {}

    if not settings.mainchain.has_endpoint:
        answers.update(_endpoint_answer(ask("Enter mainchain IPC data path or WS URL: "), "main"))
    if not settings.sidechain.has_endpoint:
        answers.update(_endpoint_answer(ask("Enter sidechain IPC data path or WS URL: "), "side"))

    if not settings.side_name:
        answers["side_name"] = ask("Enter sidechain name: ").strip()
    if not settings.keys:
        answers["keys"] = ask("Enter sidechain validator keys path: ").strip()

    # without an answer a chain derives its relayer key from the default path
    main_path_missing = settings.mainchain.phrase_path is None
    side_path_missing = settings.sidechain.phrase_path is None
    if settings.prompt_path and (main_path_missing or side_path_missing):
        answers.update(_phrase_path_answers(ask, main_path_missing, side_path_missing))

    answers.update(_per_chain_secret(
        ask, ask_secret, "relayer_phrase", "relayer passphrase",
        main_missing=not settings.mainchain.relayer_phrase,
        side_missing=not settings.sidechain.relayer_phrase,
    ))

    if settings.authorize_cc:
        answers.update(_per_chain_secret(
            ask, ask_secret, "cc_pass", "CC password",
            main_missing=not settings.mainchain.cc_password,
            side_missing=not settings.sidechain.cc_password,
        ))
    return answers
