"""
sftp-treeops - Main Entry Point

Command-line interface for bulk operations on a remote SFTP tree:
recursive listing, deletion and chmod, plus rename, mkdir and single-file
transfers.
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta

from .bulk import chmod_tree, create_dir, delete_tree, rename_path
from .cancel import CancelToken
from .config import load_config
from .errors import CopyFailed, OperationCancelled, RemoteOperationError
from .logger import setup_logging
from .ordering import filter_entries, filter_modified_before, order_by_level
from .sftp_client import TRANSPORT_ERRORS, SFTPClient
from .transfer import download, upload
from .walker import walk_tree

logger = logging.getLogger(__name__)


def _octal_mode(value: str) -> int:
    try:
        return int(value, 8)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid octal mode: {value}") from None


def parse_args(argv=None):
    """Parse command-line arguments."""
    connection = argparse.ArgumentParser(add_help=False)
    connection.add_argument("--config", help="Path to configuration file")
    connection.add_argument("--host", help="SSH Host")
    connection.add_argument("--port", type=int, help="SSH Port")
    connection.add_argument("--user", help="SSH Username")
    connection.add_argument("--password", help="SSH Password")
    connection.add_argument("--key-file", help="Path to SSH private key")
    connection.add_argument("--key-passphrase", help="Passphrase for encrypted SSH key")
    connection.add_argument(
        "--deadline", type=float, help="Abort the operation after this many seconds"
    )
    connection.add_argument("--verbose", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(
        prog="sftp-treeops",
        description="sftp-treeops - Bulk operations on remote SFTP trees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sftp-treeops ls /srv/data --host myserver.com --user deploy --files
  sftp-treeops ls /srv/backups --dirs --older-than 7 --config treeops.ini
  sftp-treeops rm /srv/data/tmp --include-root --config treeops.ini
  sftp-treeops chmod 755 /srv/www --include-root --config treeops.ini
  sftp-treeops get /srv/data/report.csv report.csv --config treeops.ini
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    ls_parser = subparsers.add_parser("ls", parents=[connection], help="List a remote tree")
    ls_parser.add_argument("path", help="Remote directory")
    ls_parser.add_argument("--dirs", action="store_true", help="Only list directories")
    ls_parser.add_argument("--files", action="store_true", help="Only list files")
    ls_parser.add_argument("--include-root", action="store_true", help="List the root itself")
    ls_parser.add_argument(
        "--order", choices=["asc", "desc"], help="Order by depth (shallowest or deepest first)"
    )
    ls_parser.add_argument(
        "--older-than", type=float, metavar="DAYS", help="Only entries modified DAYS ago or more"
    )

    rm_parser = subparsers.add_parser("rm", parents=[connection], help="Delete a remote tree")
    rm_parser.add_argument("path", help="Remote directory")
    rm_parser.add_argument("--include-root", action="store_true", help="Also remove the root")

    chmod_parser = subparsers.add_parser(
        "chmod", parents=[connection], help="Change mode of a remote tree"
    )
    chmod_parser.add_argument("mode", type=_octal_mode, help="Octal mode, e.g. 755")
    chmod_parser.add_argument("path", help="Remote directory")
    chmod_parser.add_argument("--include-root", action="store_true", help="Also chmod the root")

    mv_parser = subparsers.add_parser("mv", parents=[connection], help="Rename a remote path")
    mv_parser.add_argument("old_path")
    mv_parser.add_argument("new_path")

    mkdir_parser = subparsers.add_parser(
        "mkdir", parents=[connection], help="Create a remote directory"
    )
    mkdir_parser.add_argument("path")

    get_parser = subparsers.add_parser("get", parents=[connection], help="Download a file")
    get_parser.add_argument("remote_path")
    get_parser.add_argument("local_path")

    put_parser = subparsers.add_parser("put", parents=[connection], help="Upload a file")
    put_parser.add_argument("local_path")
    put_parser.add_argument("remote_path")

    return parser.parse_args(argv)


def cmd_ls(client, args, cancel):
    entries = walk_tree(client, args.path, include_root=args.include_root, cancel=cancel)

    want_dirs = args.dirs or not args.files
    want_files = args.files or not args.dirs
    entries = filter_entries(entries, args.path, want_dirs, want_files, args.include_root)

    if args.older_than is not None:
        cutoff = datetime.now() - timedelta(days=args.older_than)
        entries = filter_modified_before(entries, cutoff)

    if args.order is not None:
        roots = [entry for entry in entries if entry.level == 0]
        ordered = order_by_level(entries, descending=args.order == "desc")
        entries = roots + ordered if args.order == "asc" else ordered + roots

    for entry in entries:
        kind = "d" if entry.is_dir else "-"
        print(f"{kind} {entry.mode & 0o7777:04o} {entry.size:12d} {entry.mod_time} {entry.level:3d} {entry.full_path}")
    return 0


def cmd_rm(client, args, cancel):
    removed = delete_tree(client, args.path, include_root=args.include_root, cancel=cancel)
    print(f"[OK] Removed {removed} paths under {args.path}")
    return 0


def cmd_chmod(client, args, cancel):
    changed = chmod_tree(client, args.path, args.mode, include_root=args.include_root, cancel=cancel)
    print(f"[OK] Changed mode of {changed} paths under {args.path} to {args.mode:o}")
    return 0


def cmd_mv(client, args, cancel):
    rename_path(client, args.old_path, args.new_path)
    print(f"[OK] Renamed {args.old_path} -> {args.new_path}")
    return 0


def cmd_mkdir(client, args, cancel):
    create_dir(client, args.path)
    print(f"[OK] Created {args.path}")
    return 0


def cmd_get(client, args, cancel):
    copied = download(client, args.remote_path, args.local_path, cancel=cancel)
    print(f"[OK] {copied} bytes copied")
    return 0


def cmd_put(client, args, cancel):
    copied = upload(client, args.local_path, args.remote_path, cancel=cancel)
    print(f"[OK] {copied} bytes copied")
    return 0


COMMANDS = {
    "ls": cmd_ls,
    "rm": cmd_rm,
    "chmod": cmd_chmod,
    "mv": cmd_mv,
    "mkdir": cmd_mkdir,
    "get": cmd_get,
    "put": cmd_put,
}


def run_command(args):
    """
    Load configuration, connect, and run one command against the server.

    The connection is always closed before returning.
    """
    client = None

    try:
        config = load_config(
            config_path=args.config,
            host=args.host,
            port=args.port,
            username=args.user,
            password=args.password,
            key_file=args.key_file,
            key_passphrase=args.key_passphrase,
            debug=args.verbose,
        )
        setup_logging(config.logging)

        server_desc = f"{config.ssh.host}:{config.ssh.port}"
        client = SFTPClient(config.ssh, config.connection)
        try:
            client.connect()
        except PermissionError as e:
            print(f"[ERROR] Authentication failed: {e}")
            return 1
        except TimeoutError as e:
            logger.error("Connection timed out: %s", e)
            print(f"[ERROR] Connection to {server_desc} timed out")
            return 1
        except ConnectionError as e:
            print(f"[ERROR] Could not connect to server at {server_desc}")
            print(f"        {e}")
            return 1

        cancel = CancelToken(args.deadline)
        return COMMANDS[args.command](client, args, cancel)

    except ValueError as e:
        print(f"[ERROR] Configuration error: {e}")
        return 1
    except FileNotFoundError as e:
        # Config file not found
        print(f"[ERROR] {e}")
        return 1
    except RemoteOperationError as e:
        logger.error("%s", e)
        print(f"[ERROR] {e}")
        return 1
    except CopyFailed as e:
        print(f"[ERROR] {e}")
        return 1
    except OperationCancelled as e:
        print(f"[ERROR] {e}")
        return 1
    except TRANSPORT_ERRORS as e:
        logger.error("SSH session lost: %s", e)
        print(f"[ERROR] Connection to the server was lost: {e}")
        return 1
    except KeyboardInterrupt:
        print()
        logger.info("Received interrupt, stopping...")
        return 130
    finally:
        if client is not None:
            try:
                client.disconnect()
            except Exception as e:
                logger.warning("Error disconnecting: %s", e)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    if args.command in COMMANDS:
        return run_command(args)

    print("Usage: sftp-treeops <command> [options]")
    print()
    print("Commands:")
    print("  ls     List a remote tree")
    print("  rm     Delete a remote tree")
    print("  chmod  Change mode of a remote tree")
    print("  mv     Rename a remote path")
    print("  mkdir  Create a remote directory")
    print("  get    Download a file")
    print("  put    Upload a file")
    print()
    print("Run 'sftp-treeops <command> --help' for more information.")
    return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
