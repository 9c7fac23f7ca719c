#!python3 -X utf8

from typing import Any, List, Optional
import sys
import os
import argparse
import logging

from git.exc import GitError
from gitdb.exc import ODBError

from driller.config import load_config
from driller.diff_parser import DiffParseError
from driller.git_repository import commit_modified_files
from driller.messages import error, info, warning, added, deleted
from driller.modified_file import ModifiedFile

##################################################################################################
# Commands
##################################################################################################

ArgParser = argparse.ArgumentParser

class Commands:
    def __init__(self, parser: ArgParser) -> None:
        self.root_parser = parser
        self.subparsers = parser.add_subparsers(dest='command')

    class Command:
        def __init__(self, commands: 'Commands', name: str) -> None:
            self.parser = commands.subparsers.add_parser(name)
            # Every command inspects one commit of one repository
            self.parser.add_argument('repo', type=str)
            self.parser.add_argument('rev', type=str, nargs='?', default='HEAD')

        def __enter__(self) -> ArgParser:
            return self.parser

        def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
            pass

    def __call__(self, name: str) -> 'Commands.Command':
        return Commands.Command(self, name)


def find_file(files: List[ModifiedFile], path: str) -> Optional[ModifiedFile]:
    for file in files:
        if path in (file.new_path, file.old_path):
            return file
    return None

##################################################################################################
# Main
##################################################################################################

def run(args: argparse.Namespace) -> int:
    config = load_config()
    files = commit_modified_files(args.repo, args.rev, config=config)

    if args.command == 'files':
        info(f"{len(files)} modified files in {args.rev}")
        for file in files:
            paths = file.filepath
            if file.old_path and file.new_path and file.old_path != file.new_path:
                paths = f"{file.old_path} -> {file.new_path}"
            print(f"  {file.change_type.name:<8} +{file.added_lines:<5} -{file.deleted_lines:<5} {paths}")
        return 0

    file = find_file(files, args.path)
    if file is None:
        error(f"{args.path} is not modified in {args.rev}")
        return 1

    match args.command:
        case 'diff':
            print(file.diff, end='')

        case 'parsed':
            parsed = file.diff_parsed
            info(f"{file.filepath}: {len(parsed['deleted'])} deleted, {len(parsed['added'])} added")
            deleted(parsed['deleted'])
            added(parsed['added'])

        case 'source':
            source = file.source_code_before if args.before else file.source_code
            if source is None:
                warning(f"{file.filepath} does not exist {'before' if args.before else 'after'} {args.rev}")
                return 1
            print(source, end='')

        case _:
            raise ValueError(f"Unknown command: {args.command}")

    return 0


def main() -> int:
    if sys.platform.lower() == "win32":
        os.system('chcp 65001 > nul')
        sys.stdout.reconfigure(encoding='utf-8') # type: ignore

    parser = argparse.ArgumentParser(description="Inspect the modified files of a git commit.")
    parser.add_argument('--verbose', '-v', action='store_true')
    commands = Commands(parser)

    with commands('files') as cmd:
        pass

    with commands('diff') as cmd:
        cmd.add_argument('path', type=str)

    with commands('parsed') as cmd:
        cmd.add_argument('path', type=str)

    with commands('source') as cmd:
        cmd.add_argument('path', type=str)
        cmd.add_argument('--before', action='store_true', help='Print the content before the commit.')

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='%(message)s')

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return run(args)
    except (GitError, ODBError, ValueError) as e:
        kind = "Malformed diff" if isinstance(e, DiffParseError) else type(e).__name__
        error(f"{kind}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
