"""Command-line interface for gitcas."""

import argparse
import io
import logging
import sys
from contextlib import closing

from . import codec
from .__meta__ import __version__
from .errors import ErrorKind, GitCasError
from .repository import DEFAULT_BRANCH, init_repository, open_repository


logger = logging.getLogger(__name__)

DEFAULT_GIT_DIR = ".git"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_FATAL = 128

EXIT_CODES = {
    ErrorKind.INVALID_IDENTIFIER: EXIT_FATAL,
    ErrorKind.OBJECT_NOT_FOUND: EXIT_FATAL,
}


def cmd_init(args):
    created = init_repository(args.git_dir, default_branch=args.initial_branch)
    logger.debug("Repository %s %s", args.git_dir, "created" if created else "reinitialized")
    print("Initialized git directory")
    return EXIT_OK


def cmd_cat_file(args):
    with closing(open_repository(args.git_dir)) as db:
        if args.exists:
            return EXIT_OK if db.exists(args.object) else EXIT_FAILURE

        if args.type:
            print(db.read_header(args.object).type)
        elif args.size:
            print(db.read_header(args.object).size)
        else:
            payload = db.load(args.object)
            sys.stdout.flush()
            sys.stdout.buffer.write(payload)
            sys.stdout.buffer.flush()

    return EXIT_OK


def cmd_hash_object(args):
    if args.stdin:
        content = sys.stdin.buffer.read()
    elif args.path:
        with io.open(args.path, "rb") as fileobj:
            content = fileobj.read()
    else:
        print("usage: gitcas hash-object [-w] [-t TYPE] (<path> | --stdin)", file=sys.stderr)
        return EXIT_USAGE

    if args.write:
        with closing(open_repository(args.git_dir)) as db:
            address = db.hash_object(args.object_type, content)
        if address.is_duplicate:
            logger.debug("Object %s already stored, skipped", address.id)
        else:
            logger.debug("Stored object %s (%d bytes)", address.id, len(content))
        id = address.id
    else:
        id = codec.digest(codec.encode(args.object_type, content))

    print(id)
    return EXIT_OK


def cmd_fsck(args):
    status = EXIT_OK
    with closing(open_repository(args.git_dir)) as db:
        for path, expected_id in db.corrupted():
            logger.debug("Object %s hashes to %s", path, expected_id)
            print("corrupt {0}".format(path))
            status = EXIT_FAILURE
    return status


COMMANDS = {
    "init": cmd_init,
    "cat-file": cmd_cat_file,
    "hash-object": cmd_hash_object,
    "fsck": cmd_fsck,
}


def build_parser():
    parser = argparse.ArgumentParser(prog="gitcas")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--git-dir",
        default=DEFAULT_GIT_DIR,
        help="Repository directory (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")

    commands = parser.add_subparsers(dest="command", metavar="command")
    commands.required = True

    init_parser = commands.add_parser("init", help="Create an empty repository")
    init_parser.add_argument(
        "-b", "--initial-branch",
        default=DEFAULT_BRANCH,
        help="Branch HEAD points at (default: %(default)s)",
    )

    cat_file_parser = commands.add_parser("cat-file", help="Show a stored object")
    mode = cat_file_parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("-p", dest="pretty", action="store_true", help="Print the payload")
    mode.add_argument("-t", dest="type", action="store_true", help="Print the object type")
    mode.add_argument("-s", dest="size", action="store_true", help="Print the object size")
    mode.add_argument("-e", dest="exists", action="store_true",
                      help="Exit with zero status if the object exists")
    cat_file_parser.add_argument("object")

    hash_object_parser = commands.add_parser("hash-object", help="Compute an object id")
    hash_object_parser.add_argument("-w", dest="write", action="store_true",
                                    help="Write the object into the repository")
    hash_object_parser.add_argument("-t", dest="object_type", default="blob",
                                    help="Object type (default: %(default)s)")
    hash_object_parser.add_argument("--stdin", action="store_true",
                                    help="Read the content from standard input")
    hash_object_parser.add_argument("path", nargs="?")

    commands.add_parser("fsck", help="Report objects whose content does not match their id")

    return parser


def main(argv=None):
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handler = COMMANDS[args.command]

    try:
        return handler(args)
    except GitCasError as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        print("error: {0}".format(exc), file=sys.stderr)
        return EXIT_CODES.get(exc.kind, EXIT_FAILURE)
    except (IOError, ValueError) as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        print("error: {0}".format(exc), file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
