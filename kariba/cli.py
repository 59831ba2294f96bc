"""
Kariba CLI - Command-line interface for the engine.

Usage:
    kariba play [--name NAME] [--seed N]        Play a match in the terminal
    kariba simulate [--seed N] [--games K]      Bot-only matches with a summary
    kariba serve [--host HOST] [--port PORT]    Run the HTTP API
"""

import argparse
import asyncio
import logging
import random
import sys

from .config import load_config


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Kariba - Waterhole Card Game Engine",
        prog="kariba",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a match against three bots")
    play_parser.add_argument("--name", default="", help="Your display name")
    play_parser.add_argument("--seed", type=int, help="Shuffle seed")
    play_parser.add_argument(
        "--delay", type=float, help="Seconds each bot waits before playing"
    )

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run bot-only matches")
    simulate_parser.add_argument("--seed", type=int, default=0, help="Seed of the first match")
    simulate_parser.add_argument("--games", type=int, default=10, help="Number of matches")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args):
    """Interactive terminal match."""
    from .session import SessionManager, GameLoop

    try:
        config = load_config()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    manager = SessionManager(config=config)
    session = manager.create_session(human_name=args.name, seed=args.seed)
    loop = GameLoop(session)
    delay = config.bot_delay_seconds if args.delay is None else args.delay
    shown = 0

    while not session.match_state.is_finished:
        shown = _print_log(session.match_state, shown)
        _print_table(session.match_state, session.human_player_id)

        human = session.match_state.get_player(session.human_player_id)
        try:
            raw = input("Cards to play (numbers, q to quit): ").strip()
        except EOFError:
            raw = "q"
        if raw.lower() in ("q", "quit"):
            manager.end_session(session.session_id, reason="user_quit")
            print("Match abandoned.")
            return

        card_ids = _parse_selection(raw, human.hand)
        if card_ids is None:
            print(f"Enter card numbers between 1 and {len(human.hand)}.")
            continue

        result = loop.submit_human_move(card_ids, run_bots=False)
        if not result.success:
            print(f"Invalid move: {'; '.join(result.errors)}")
            continue

        shown = _print_log(session.match_state, shown)
        try:
            asyncio.run(loop.run_bot_turns_paced(delay=delay))
        except KeyboardInterrupt:
            manager.end_session(session.session_id, reason="interrupted")
            print("\nMatch abandoned.")
            return

    _print_log(session.match_state, shown)
    print()
    for player in sorted(session.match_state.players, key=lambda p: p.score, reverse=True):
        print(f"  {player.name}: {player.score}")
    manager.end_session(session.session_id, reason="completed")


def cmd_simulate(args):
    """Bot-only matches: every seat, the human's included, uses the standard bot."""
    from .bots import KaribaBot
    from .engine_core import Reducer, legal_actions
    from .game.setup import initialize_match

    if args.games < 1:
        print("Error: --games must be at least 1")
        sys.exit(1)

    try:
        config = load_config()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    reducer = Reducer(config=config)
    wins: dict[str, int] = {}
    total_turns = 0

    for game in range(args.games):
        state = initialize_match("Seat 1", rng=random.Random(args.seed + game), config=config)
        bots = {p.player_id: KaribaBot(player_id=p.player_id) for p in state.players}
        while not state.is_finished:
            decision = bots[state.current_player.player_id].select_action(
                state, legal_actions(state)
            )
            result = reducer.apply(state, decision.action, now=state.started_at)
            if not result.success:
                print(f"Error in game {game}: {result.error}")
                sys.exit(1)
            state = result.new_state

        winner = state.winner
        wins[winner.name] = wins.get(winner.name, 0) + 1
        total_turns += state.turn_number
        scores = ", ".join(f"{p.name} {p.score}" for p in state.players)
        print(f"Game {game + 1} (seed {args.seed + game}): {winner.name} wins [{scores}]")

    print(f"\nPlayed {args.games} games, {total_turns / args.games:.1f} turns on average")
    for name, count in sorted(wins.items(), key=lambda item: item[1], reverse=True):
        print(f"  {name}: {count} wins")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    uvicorn.run(
        "kariba.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
    )


def _parse_selection(raw, hand):
    """Turn '1 3' (1-based positions in hand) into card ids, or None."""
    try:
        positions = [int(token) for token in raw.replace(",", " ").split()]
    except ValueError:
        return None
    if not positions or any(p < 1 or p > len(hand) for p in positions):
        return None
    return [hand[p - 1].card_id for p in positions]


def _print_log(state, shown):
    for entry in state.log[shown:]:
        print(f"  > {entry.message}")
    return len(state.log)


def _print_table(state, human_id):
    from .game.animals import Animal

    print("\nWaterhole:")
    for animal in Animal:
        count = len(state.slot(animal))
        print(f"  {animal.emoji} {animal.display_name:<9} {'#' * count}")

    print(f"Draw pile: {len(state.draw_pile)}")
    for player in state.players:
        if player.player_id != human_id:
            print(f"  {player.name}: {len(player.hand)} cards, score {player.score}")

    human = state.get_player(human_id)
    print(f"Your score: {human.score}")
    print("Your hand:")
    for i, card in enumerate(human.hand, start=1):
        print(f"  {i}. {card.animal.emoji} {card.animal.display_name}")


if __name__ == "__main__":
    main()
