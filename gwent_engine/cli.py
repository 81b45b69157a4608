"""
Gwent Engine CLI - Command-line interface for the engine.

Usage:
    gwent-engine validate [data_dir]     Validate the card catalog
    gwent-engine factions                List playable factions
    gwent-engine decks                   List saved decks
    gwent-engine simulate [--seed N]     Play a bot-vs-bot match
"""

import argparse
import logging
import sys


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Gwent Engine - Two-player card game rules engine",
        prog="gwent-engine",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate the card catalog")
    validate_parser.add_argument("data_dir", nargs="?", help="Directory of faction files (bundled data by default)")
    validate_parser.add_argument("--deck-size", type=int, default=25, help="Minimum pool size per faction")

    # Factions command
    subparsers.add_parser("factions", help="List playable factions")

    # Decks command
    decks_parser = subparsers.add_parser("decks", help="List saved decks")
    decks_parser.add_argument("--deck-dir", help="Deck directory")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a bot-vs-bot match")
    simulate_parser.add_argument("--seed", type=int, help="Random seed")
    simulate_parser.add_argument("--player-faction", help="Faction of the player side")
    simulate_parser.add_argument("--opponent-faction", help="Faction of the opponent side")
    simulate_parser.add_argument("--player-deck", help="Name of a saved deck for the player side")
    simulate_parser.add_argument("--deck-dir", help="Deck directory")
    simulate_parser.add_argument("--random-player", action="store_true", help="Player side plays randomly")
    simulate_parser.add_argument("--settings", help="JSON settings file (GWENT_* variables otherwise)")
    simulate_parser.add_argument("--verbose", "-v", action="store_true", help="Print every event")

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "factions":
        cmd_factions(args)
    elif args.command == "decks":
        cmd_decks(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_validate(args):
    """Validate the card catalog."""
    from .catalog import CardCatalog, validate_catalog

    catalog = CardCatalog.load(args.data_dir)
    result = validate_catalog(catalog, min_deck_size=args.deck_size)

    print(f"Cards loaded: {len(catalog)}")
    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")

    if not result.valid:
        sys.exit(1)
    print("\nCatalog is valid")


def cmd_factions(args):
    """List playable factions with their pool sizes."""
    from .catalog import CardCatalog

    catalog = CardCatalog.load()
    factions = catalog.playable_factions()
    if not factions:
        print("No playable factions loaded")
        sys.exit(1)

    for faction in factions:
        pool = catalog.get_by_faction(faction)
        leaders = catalog.get_leaders(faction)
        print(f"{faction.value:<16} {len(pool):>3} cards  {len(leaders)} leader(s)")


def cmd_decks(args):
    """List saved decks."""
    from .decks import DeckStore

    store = DeckStore(args.deck_dir)
    names = store.list()
    if not names:
        print(f"No saved decks in {store.deck_dir}")
        return

    for name in names:
        deck = store.load(name)
        if deck is None:
            print(f"{name:<20} (unreadable)")
        else:
            print(f"{name:<20} {deck.faction:<16} {len(deck.card_ids)} cards")


def cmd_simulate(args):
    """Play a full match with a bot on each side."""
    import random

    from .bots import HeuristicOpponent, RandomPolicy
    from .catalog import CardCatalog
    from .config import MatchSettings
    from .decks import DeckStore, randomise_deck
    from .engine_core.state import Side
    from .session import PhaseScheduler

    if args.settings:
        try:
            settings = MatchSettings.from_file(args.settings)
        except FileNotFoundError:
            print(f"Error: File not found: {args.settings}")
            sys.exit(1)
    else:
        settings = MatchSettings.from_env()
    settings = settings.without_delays()

    catalog = CardCatalog.load()
    rng = random.Random(args.seed)

    try:
        if args.player_deck:
            player_deck = DeckStore(args.deck_dir).load(args.player_deck)
            if player_deck is None:
                print(f"Error: Saved deck not found: {args.player_deck}")
                sys.exit(1)
        else:
            player_deck = randomise_deck(
                catalog, args.player_faction, size=settings.randomise_deck_size, rng=rng,
            )
        opponent_deck = randomise_deck(
            catalog, args.opponent_faction, size=settings.randomise_deck_size, rng=rng,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.random_player:
        player_policy = RandomPolicy(seed=args.seed)
    else:
        player_policy = HeuristicOpponent(side=Side.PLAYER, rng=random.Random(rng.random()))

    scheduler = PhaseScheduler(
        catalog=catalog,
        settings=settings,
        player_deck=player_deck,
        opponent_deck=opponent_deck,
        player_policy=player_policy,
        seed=args.seed,
    )

    print(f"Player: {player_deck.faction} ({player_policy.get_name()})")
    print(f"Opponent: {opponent_deck.faction} ({scheduler.opponent_policy.get_name()})")

    result = scheduler.run_until_idle()
    if args.verbose:
        print()
        for message in result.messages:
            print(f"  {message}")

    state = scheduler.state
    print()
    for record in state.round_history:
        winner = record.winner.value if record.winner else "draw"
        print(f"Round {record.round_number}: {record.player_score} - {record.opponent_score} ({winner})")
    print(f"\nResult: {state.result.value if state.result else 'unfinished'}")


if __name__ == "__main__":
    main()
