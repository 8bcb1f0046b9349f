"""CLI entry point for the scheduling assistant.

Usage:
    python -m agenda.main                      # interactive loop
    python -m agenda.main "Qual o clima em Brasília?"   # one turn, then exit
    python -m agenda.main --debug              # show API calls
"""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

from agenda.agent import create_orchestrator

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """WARNING by default, DEBUG when --debug is passed."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> None:
    """Run one turn for a given message, or an interactive loop."""
    parser = argparse.ArgumentParser(description="Agenda Assistant CLI")
    parser.add_argument("message", nargs="?", help="Run a single turn with this message and exit")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    args = parser.parse_args(argv)

    load_dotenv()
    _configure_logging(debug=args.debug)

    orchestrator = create_orchestrator()

    if args.message:
        print(orchestrator.run_turn(args.message))
        return

    print("\n" + "=" * 60)
    print("  Agenda Assistant - CLI")
    print("=" * 60)
    print("  Digite sua mensagem e pressione Enter. 'sair' encerra.")
    print("=" * 60 + "\n")

    while True:
        try:
            user_input = input("Você: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nAté logo!")
            break

        if not user_input:
            continue

        if user_input.lower() in ("sair", "exit", "quit", "q"):
            print("\nAté logo!")
            break

        print(f"\nAssistente: {orchestrator.run_turn(user_input)}\n")


if __name__ == "__main__":
    main()
