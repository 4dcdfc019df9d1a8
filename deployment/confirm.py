from typing import Any, Sequence

from ape.utils import ZERO_ADDRESS

ABORT_ANSWERS = ("n", "no")


def _confirm(question: str) -> None:
    """Anything but an explicit no carries on."""
    if input(f"{question} Y/N? ").strip().lower() in ABORT_ANSWERS:
        print("Aborting deployment!")
        exit(-1)


def _continue() -> None:
    _confirm("Continue")


def _confirm_resolution(resolved_args: Sequence[Any], contract_name: str) -> None:
    """Shows the resolved constructor arguments of a contract and asks to deploy it."""
    if resolved_args:
        print(f"\nConstructor arguments for {contract_name}")
        for position, value in enumerate(resolved_args):
            print(f"\t[{position}] {value}")
    else:
        print(f"\n(i) No constructor arguments for {contract_name}")

    _confirm(f"Deploy {contract_name}")
    if ZERO_ADDRESS in resolved_args:
        _confirm(f"Zero address among {contract_name} constructor arguments; continue")
