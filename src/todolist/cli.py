#!/usr/bin/env python3
"""
todo - a personal task list, kept locally or on a todo server.

Usage:
    todo add "buy milk" "call mom"    # Add tasks
    todo done "buy milk"              # Mark tasks done
    todo undone "buy milk"            # Mark tasks not done
    todo remove "call mom"            # Remove tasks
    todo clear [--done]               # Remove all (or only done) tasks
    todo list                         # Show tasks
    todo connect <host> [port]        # Use a todo server from now on
    todo disconnect                   # Go back to the local task file
"""

import argparse
import json
import logging
import sys
from typing import Optional

from todolist import __version__
from todolist.backends import open_backend
from todolist.colors import Colors, colorize
from todolist.config import ConnectionConfig, DATA_FILE, config_dir, data_dir
from todolist.dispatcher import DispatchResult, Dispatcher, Operation, Request
from todolist.errors import CommandError, render_error
from todolist.store import TaskStore

logger = logging.getLogger(__name__)


# ============================================================================
# Formatting Helpers
# ============================================================================

def render_tasks(tasks: list, done_style: Optional[str] = None) -> str:
    """
    Format the task list for the terminal.

    Finished tasks are wrapped in ``done_style`` (strike-through green unless
    told otherwise).
    """
    if done_style is None:
        done_style = Colors.done_style()
    lines = ["", "Current tasks:"]
    for task in tasks:
        lines.append(colorize(task.name, done_style) if task.done else task.name)
    return '\n'.join(lines)


def _print_error(err: CommandError):
    print(colorize(render_error(err), Colors.RED), file=sys.stderr)


def _print_result(result: DispatchResult, use_json: bool):
    if result.message:
        print(result.message)

    if result.listing_error is not None:
        _print_error(result.listing_error)
        return

    if result.tasks is None:
        return

    if use_json:
        print(json.dumps([t.to_dict() for t in result.tasks], indent=2))
    else:
        print(render_tasks(result.tasks))


# ============================================================================
# Argument Parsing
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='todo',
        description='todo - a personal task list',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  todo add "buy milk"             Add a task
  todo done "buy milk"            Mark it done
  todo clear --done               Drop finished tasks
  todo connect 192.168.1.10       Keep tasks on a todo server

Exit status:
  0  the command succeeded (a failed follow-up listing is only reported)
  1  the command failed; the reason is printed to stderr
'''
    )
    parser.add_argument('--version', action='version', version=f'todo {__version__}')
    parser.add_argument('--data-dir', help='Directory holding todos.json')
    parser.add_argument('--config-dir', help='Directory holding the server link')
    parser.add_argument('--json', action='store_true', help='Output the task list as JSON')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')

    subparsers = parser.add_subparsers(dest='command')

    for name, help_text in (
        ('add', 'Add tasks to the task list'),
        ('remove', 'Remove tasks from the task list'),
        ('done', 'Mark tasks as done'),
        ('undone', 'Mark tasks as not done'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('tasks', nargs='*', metavar='task', help='Task names, separated by spaces')

    clear_p = subparsers.add_parser('clear', help='Remove all tasks (irreversible)')
    clear_p.add_argument('--done', '-d', action='store_true', help='Only clear done tasks')

    subparsers.add_parser('clear-done', help='Remove all done tasks (deprecated, use clear --done)')
    subparsers.add_parser('list', help='List all tasks')

    connect_p = subparsers.add_parser('connect', help='Link a todo server')
    connect_p.add_argument('host', help='Server host, e.g. 127.0.0.1 or https://todo.example.com')
    connect_p.add_argument('port', nargs='?', help='Server port (default: 6982)')

    subparsers.add_parser('disconnect', help='Unlink the todo server')

    return parser


def request_from_args(args: argparse.Namespace) -> Request:
    op = Operation(args.command)
    if op in (Operation.ADD, Operation.REMOVE, Operation.DONE, Operation.UNDONE):
        return Request(operation=op, names=list(args.tasks))
    if op == Operation.CLEAR:
        return Request(operation=op, done_only=args.done)
    if op == Operation.CONNECT:
        return Request(operation=op, host=args.host, port=args.port)
    return Request(operation=op)


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s: %(message)s',
        stream=sys.stderr,
    )


# ============================================================================
# Main CLI
# ============================================================================

def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    store = TaskStore(data_dir(args.data_dir) / DATA_FILE)
    connection = ConnectionConfig(config_dir(args.config_dir))

    try:
        backend = open_backend(store, connection)
        result = Dispatcher(backend, connection).execute(request_from_args(args))
    except CommandError as e:
        _print_error(e)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"✗ Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    _print_result(result, args.json)
    return 0


if __name__ == '__main__':
    sys.exit(main())
