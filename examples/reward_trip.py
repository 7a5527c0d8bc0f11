#!/usr/bin/env python3
"""
Reward a completed trip from the command line.

Settings come from the environment (see RewardSettings.from_env):

    export CONTRACT_ADDRESS=0x...
    export WALLET_PRIVATE_KEY=0x...
    export VECHAIN_NETWORK=testnet

Usage:
    python reward_trip.py 0xUSER 1500 --trips 1
"""
import argparse
import json
import logging
import sys

from tripreward_sdk import RewardClient, RewardError, __version__


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=f"TripReward SDK v{__version__}: reward a trip")
    parser.add_argument("user_address", help="Address of the rewarded user")
    parser.add_argument("distance", type=int, help="Trip distance")
    parser.add_argument("--trips", type=int, default=1, help="Number of trips in this reward")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with RewardClient.from_env() as client:
        print(f"Rewarding from {client.address}")
        try:
            tx_id = client.trigger_smart_contract(args.user_address, args.distance, trip_count=args.trips)
        except RewardError as e:
            print(json.dumps(e.summary(), indent=2), file=sys.stderr)
            return 2 if e.retryable else 1

    print(f"✅ Reward confirmed: {tx_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
