"""
Courtier CLI - Command-line interface for the engine.

Usage:
    courtier simulate --players 3 --seed 7    Play a full bot game
    courtier serve --host 0.0.0.0 --port 8000  Run the HTTP API
"""

import argparse
import logging
import random
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Courtier - Card game rules engine",
        prog="courtier",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a full game between bots")
    simulate_parser.add_argument("--players", type=int, default=3, help="Number of bots (2-4)")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Seed for shuffles and bots")
    simulate_parser.add_argument(
        "--policy",
        choices=["random", "first", "cautious"],
        default="random",
        help="Bot policy",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def make_policy(name, seed=None):
    from .bots import RandomPolicy, FirstLegalPolicy, CautiousPolicy

    if name == "first":
        return FirstLegalPolicy()
    elif name == "cautious":
        return CautiousPolicy(seed=seed)
    return RandomPolicy(seed=seed)


def run_bot_game(manager, player_count, policy, on_event=None):
    """
    Play a whole game between bots through the session manager.

    The first bot hosts and starts each new round. Returns the finished
    GameTable.
    """
    from .engine_core.action_generator import legal_actions

    player_ids = [f"bot-{i}" for i in range(1, player_count + 1)]
    table = manager.create_game(player_ids[0], "Bot 1", max_players=player_count)
    game_id = table.game_id
    unsubscribe = manager.events.subscribe(game_id, on_event) if on_event else None

    try:
        for i, player_id in enumerate(player_ids[1:], start=2):
            manager.join_game(table.game.room_code, player_id, f"Bot {i}")
        _check(manager.start_game(game_id, player_ids[0]))

        while True:
            table = manager.get_table(game_id)
            if table.game.is_finished:
                return table

            state = table.require_round()
            if state.is_over:
                _check(manager.start_next_round(game_id, player_ids[0]))
                continue

            actor = state.current_turn_player_id
            decision = policy.select_action(state, actor, legal_actions(state, actor))
            _check(manager.apply(game_id, decision.action))
    finally:
        if unsubscribe:
            unsubscribe()


def _check(result):
    if not result.success:
        raise RuntimeError(f"Bot action rejected: {result.error} ({result.error_code})")
    return result


def cmd_simulate(args):
    """Play a full bot game and print the public narrative."""
    from .session import GameManager

    if args.players < 2 or args.players > 4:
        print("Error: --players must be between 2 and 4")
        sys.exit(1)

    manager = GameManager(rng=random.Random(args.seed))
    policy = make_policy(args.policy, args.seed)

    def print_event(event):
        message = event.payload.get("message")
        if message:
            print(message)

    table = run_bot_game(manager, args.players, policy, on_event=print_event)

    print("\nFinal tokens:")
    for seat in table.seating:
        marker = " (winner)" if seat.player_id == table.game.winner_id else ""
        print(f"  {seat.name}: {seat.tokens}{marker}")
    return 0


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    uvicorn.run("courtier.api.app:app", host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    main()
