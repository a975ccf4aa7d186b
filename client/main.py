#!/usr/bin/env python3
"""
Terminal front end for the temperature profile form.

Loads the saved profile, applies edits through the form controller, and
saves it back to the server.

Usage:
    python -m client.main show
    python -m client.main save --bed-time 22:30 --mid 02:00=-2 --mid 04:00=-1
    python -m client.main save --clear-mid --final 1 --timezone Europe/Berlin
"""

import argparse
import asyncio
import json
import os
import sys

from dotenv import load_dotenv

from client.api import ProfileApiClient, ProfileClientError
from client.form import FormController

load_dotenv()

DEFAULT_SERVER_URL = os.getenv("PROFILE_SERVER_URL", "http://localhost:8000")


def parse_mid_stage(value: str) -> tuple[str, int]:
    """Parse HH:MM=TEMP into (time, temperature)."""
    try:
        time_part, temp_part = value.split('=', 1)
        return time_part.strip(), int(temp_part)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected HH:MM=TEMP, got {value!r}")


def print_form(form: FormController):
    print(f"\n{'='*40}")
    print(f"  {form.heading}")
    print(f"{'='*40}")
    print(f"  Bed time:      {form.values['bedTime']}")
    print(f"  Wake-up time:  {form.values['wakeupTime']}")
    print(f"  Initial level: {form.values['initialSleepLevel']}")
    for i, entry in enumerate(form.mid_stage_temperatures):
        print(f"  Mid-stage {i}:   {entry.time} -> {entry.temperature}")
    print(f"  Final level:   {form.values['finalSleepLevel']}")
    print(f"  Timezone:      {form.values['timezone'].get('value')}")
    print(f"{'='*40}\n")


def apply_edits(form: FormController, args):
    """Apply command-line edits in form order: scalars, removals, appends."""
    scalar_args = {
        'bedTime': args.bed_time,
        'wakeupTime': args.wake_time,
        'initialSleepLevel': args.initial,
        'finalSleepLevel': args.final,
        'timezone': args.timezone,
    }
    for field, value in scalar_args.items():
        if value is not None:
            form.set_value(field, value)

    if args.clear_mid:
        form.mid_stage_temperatures = ()
    # Highest index first so earlier removals don't shift later ones
    for index in sorted(args.remove_mid, reverse=True):
        form.remove_mid_stage(index)
    for time_str, temp in args.mid:
        form.append_mid_stage()
        form.update_mid_stage(len(form.mid_stage_temperatures) - 1, time=time_str, temperature=temp)


async def run(args) -> int:
    client = ProfileApiClient(args.server_url, args.email)
    form = FormController(client)

    try:
        await form.load()
    except ProfileClientError as e:
        print(f"Error: could not load profile ({e})")
        return 1

    if args.command == 'show':
        if args.json:
            print(json.dumps(form.to_payload(), indent=2))
        else:
            print_form(form)
        return 0

    apply_edits(form, args)
    if not await form.submit():
        if form.submit_error:
            print(f"Error: {form.submit_error}")
        for field, message in form.errors.items():
            print(f"  {field}: {message}")
        return 1

    print("Profile saved")
    print_form(form)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='Nightly temperature profile form')
    parser.add_argument('--server-url', type=str, default=DEFAULT_SERVER_URL,
                        help=f'Server URL (default: {DEFAULT_SERVER_URL})')
    parser.add_argument('--email', type=str, default=os.getenv("PROFILE_EMAIL"),
                        help='Account email (default: $PROFILE_EMAIL)')
    sub = parser.add_subparsers(dest='command', required=True)

    show = sub.add_parser('show', help='Show the saved profile')
    show.add_argument('--json', action='store_true', help='Print the raw payload')

    save = sub.add_parser('save', help='Edit and save the profile')
    save.add_argument('--bed-time', help='Bed time, HH:MM')
    save.add_argument('--wake-time', help='Wake-up time, HH:MM')
    save.add_argument('--initial', type=int, help='Initial sleep level (-10..10)')
    save.add_argument('--final', type=int, help='Final sleep level (-10..10)')
    save.add_argument('--timezone', help='IANA timezone, e.g. America/New_York')
    save.add_argument('--mid', type=parse_mid_stage, action='append', default=[],
                      metavar='HH:MM=TEMP', help='Append a mid-stage temperature')
    save.add_argument('--remove-mid', type=int, action='append', default=[],
                      metavar='INDEX', help='Remove the mid-stage entry at INDEX')
    save.add_argument('--clear-mid', action='store_true', help='Remove all mid-stage entries')

    args = parser.parse_args(argv)
    if not args.email:
        parser.error("--email is required (or set PROFILE_EMAIL)")

    sys.exit(asyncio.run(run(args)))


if __name__ == '__main__':
    main()
